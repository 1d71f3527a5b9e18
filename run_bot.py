#!/usr/bin/env python3
"""
Dialog Engine - Console Weather Bot

Runs the weather bot in the terminal. Each line typed is one conversational
turn: classify -> select -> resolve -> fulfill -> handle.

Usage:
    python run_bot.py
"""

import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Optional, Union

from dialog_engine.config import load_settings
from dialog_engine.dialogs import build_dialog
from dialog_engine.dispatcher.context import OutboundMessage, TurnState

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class ConsoleContext:
    """Conversation context that prints bot messages to stdout."""

    def __init__(self, timeout: Optional[float] = None):
        self.cancellation = asyncio.Event()
        self.timeout = timeout
        self.next_turn: Optional[Callable[..., Awaitable[Any]]] = None

    async def post(self, message: Union[str, OutboundMessage]) -> None:
        if isinstance(message, str):
            message = OutboundMessage(text=message)

        if message.text:
            print(f"bot> {message.text}")
        for attachment in message.attachments:
            print(f"bot> [{attachment.name or attachment.content_type}]")
            print(json.dumps(attachment.content, indent=2, ensure_ascii=False))

    def wait(self, callback: Callable[..., Awaitable[Any]]) -> None:
        self.next_turn = callback


def print_separator(title: str = "") -> None:
    """Print a formatted separator line."""
    if title:
        print(f"\n{'='*70}")
        print(f"  {title}")
        print(f"{'='*70}\n")
    else:
        print(f"{'='*70}")


async def converse(dialog: Any, context: ConsoleContext) -> None:
    """Read lines from stdin and run one turn per line."""
    loop = asyncio.get_running_loop()
    context.wait(dialog.message_received)

    while True:
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            break
        text = line.strip()
        if not text:
            continue
        if text.lower() in ("quit", "exit"):
            break

        pending = loop.create_future()
        pending.set_result(text)

        result = await context.next_turn(context, pending)
        if result.state == TurnState.FAULTED:
            logger.warning(f"Turn faulted: {result.error}")
        else:
            logger.debug(f"Turn summary: {result.summary()}")


def main():
    """Run the console bot."""
    print_separator("DIALOG ENGINE - Weather Bot")

    try:
        settings = load_settings()
        dialog = build_dialog(settings)
        context = ConsoleContext(timeout=settings.turn_timeout)

        print("Ask about the weather (e.g. 'weather in Seattle'). Type 'quit' to exit.\n")
        asyncio.run(converse(dialog, context))

        print_separator("Goodbye")
        return 0

    except Exception as e:
        logger.error(f"Bot failed: {e}", exc_info=True)
        print(f"\n❌ Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
