"""
Turn Dispatcher

Runs one conversational turn end to end:
classify -> select -> resolve -> fulfill -> handle.

Subclasses declare their intent handlers with the `intent` decorator.
"""

import asyncio
import logging
from typing import Any, Callable, ClassVar, Iterable, List, Optional, Sequence, Tuple

from ..actions.base import Action
from ..actions.registry import ActionRegistry, ActionResolver
from ..errors import (
    ClassificationFault,
    DialogEngineError,
    FulfillmentFault,
    HandlerFault,
    ResolutionFault,
    TurnError,
    UnresolvedIntentError,
)
from ..nlu.classifier import IntentClassifier
from ..nlu.models import Interpretation
from ..nlu.selector import WinnerSelector
from .context import ConversationContext, PendingInput, TurnResult, TurnState
from .handlers import HandlerBinding, HandlerRegistry, collect_bindings

logger = logging.getLogger(__name__)

ClassifierAnswers = List[Tuple[int, IntentClassifier, List[Interpretation]]]


class Dispatcher:
    """
    Base class for intent-routing dialogs.

    Registries are built once in the constructor and never modified, so one
    dispatcher can serve concurrent turns.
    """

    # Filled per subclass from @intent declarations
    handler_bindings: ClassVar[Tuple[HandlerBinding, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        cls.handler_bindings = collect_bindings(cls)

    def __init__(
        self,
        classifiers: Sequence[IntentClassifier],
        action_registry: ActionRegistry,
        selector: Optional[WinnerSelector] = None,
        handlers: Iterable[HandlerBinding] = (),
        strict_none: bool = False
    ):
        """
        Initialize the dispatcher.

        Args:
            classifiers: Classifiers in priority order (first wins ties)
            action_registry: Intent -> action bindings
            selector: Winner selection strategy
            handlers: Extra handler bindings for plain functions
            strict_none: Fault the turn instead of routing a "not understood"
                result to the default handler

        Raises:
            BindingError: If the handler table is invalid
            ValueError: If no classifier is given
        """
        if not classifiers:
            raise ValueError("At least one intent classifier is required")

        self.classifiers = tuple(classifiers)
        self.action_registry = action_registry
        self.resolver = ActionResolver(action_registry)
        self.selector = selector or WinnerSelector()
        self.strict_none = strict_none

        bound = [
            HandlerBinding(
                member=binding.member,
                function=binding.function.__get__(self, type(self)),
                intent_names=binding.intent_names
            )
            for binding in self.handler_bindings
        ]
        self.handlers = HandlerRegistry(bound + list(handlers))

        logger.info(f"{self.__class__.__name__} initialized with "
                    f"{len(self.classifiers)} classifier(s)")

    async def message_received(self, context: ConversationContext, pending: PendingInput) -> TurnResult:
        """
        Turn boundary: await the user's input and dispatch it.

        Turn errors are logged, reported through `on_turn_error` and returned
        in the TurnResult; the conversation is re-armed for the next input.
        """
        text = await pending

        try:
            return await self.dispatch(text, context, pending)
        except TurnError as e:
            logger.error(f"Turn failed for {text!r}: {e}")
            result = TurnResult(
                text=text,
                state=TurnState.FAULTED,
                error=str(e),
                intent=getattr(e, 'intent_name', None),
                classifier_faults=[str(fault) for fault in getattr(e, 'faults', [])]
            )
            await self.on_turn_error(context, e)
            context.wait(self.message_received)
            return result

    async def dispatch(self, text: str, context: ConversationContext, pending: PendingInput) -> TurnResult:
        """
        Run a full turn for `text`.

        `pending` is handed to the intent handler; if it is not a future it
        has already been consumed, so handlers get a settled future carrying
        `text` instead.

        Returns:
            TurnResult describing the completed turn

        Raises:
            UnresolvedIntentError: If no classifier produced a usable answer
            ResolutionFault: If the action for the winning intent could not be created
            FulfillmentFault: If the resolved action failed
            HandlerFault: If the intent handler raised
            DispatchFault: If there is no handler and no default handler
        """
        if not asyncio.isfuture(pending):
            pending = _settled(text)

        result = TurnResult(text=text)
        try:
            result.state = TurnState.CLASSIFYING
            answers, faults = await self._classify(text, context)
            result.classifier_faults = [str(fault) for fault in faults]

            result.state = TurnState.SELECTING
            interpretation = self._select(answers, faults, text)
            result.intent = interpretation.name
            result.confidence = interpretation.confidence
            result.classifier = interpretation.source

            result.state = TurnState.RESOLVING
            action, intent_name = self._resolve(interpretation)
            result.action = type(action).__name__ if action is not None else None

            result.state = TurnState.FULFILLING
            fulfillment = await self._fulfill(context, pending, intent_name, action)

            result.state = TurnState.HANDLING
            await self._handle(context, pending, intent_name, fulfillment)
        except Exception:
            logger.warning(f"Turn faulted while {result.state.value}")
            result.state = TurnState.FAULTED
            raise

        result.state = TurnState.DONE
        result.success = True
        return result

    async def on_turn_error(self, context: ConversationContext, error: TurnError) -> None:
        """Hook for reporting a failed turn to the user; silent by default."""

    async def perform_fulfillment(
        self,
        context: ConversationContext,
        pending: PendingInput,
        action: Action
    ) -> Any:
        """Fulfill a resolved action. Override to decorate or replace fulfillment."""
        return await action.fulfill()

    async def _classify(
        self,
        text: str,
        context: ConversationContext
    ) -> Tuple[ClassifierAnswers, List[ClassificationFault]]:
        logger.info(f"Classifying {text!r} with {len(self.classifiers)} classifier(s)")

        outcomes = await self._guard(
            context,
            asyncio.gather(*(classifier.query(text) for classifier in self.classifiers),
                           return_exceptions=True),
            lambda reason: UnresolvedIntentError(f"Classification {reason}")
        )

        answers: ClassifierAnswers = []
        faults: List[ClassificationFault] = []
        for rank, (classifier, outcome) in enumerate(zip(self.classifiers, outcomes)):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, (Exception, asyncio.CancelledError)):
                    raise outcome
                fault = ClassificationFault(classifier.name, outcome)
                logger.warning(str(fault))
                faults.append(fault)
                continue

            interpretations = list(outcome or [])
            logger.debug(f"{classifier.name} returned {len(interpretations)} interpretation(s)")
            answers.append((rank, classifier, interpretations))

        if not answers:
            raise UnresolvedIntentError("All intent classifiers failed", faults=faults)
        return answers, faults

    def _select(
        self,
        answers: ClassifierAnswers,
        faults: List[ClassificationFault],
        text: str
    ) -> Interpretation:
        winner = self.selector.select(answers)
        if winner is not None:
            return winner.winner

        if not any(interpretations for _, _, interpretations in answers):
            raise UnresolvedIntentError("No interpretation returned by any classifier", faults=faults)
        if self.strict_none:
            raise UnresolvedIntentError("No winning intent selected from classifier results",
                                        faults=faults)

        # Only "not understood" answers: route the best one to the default handler
        best = None
        for _, classifier, interpretations in answers:
            local = classifier.best_intent(interpretations)
            if local is not None and (best is None or local.confidence > best.confidence):
                best = local
        logger.info(f"Nothing understood in {text!r}; using default handler")
        return best if best is not None else Interpretation(query=text)

    async def _fulfill(
        self,
        context: ConversationContext,
        pending: PendingInput,
        intent_name: str,
        action: Optional[Action]
    ) -> Any:
        if action is None:
            return None

        try:
            return await self._guard(
                context,
                self.perform_fulfillment(context, pending, action),
                lambda reason: FulfillmentFault(intent_name, f"Fulfillment of '{intent_name}' {reason}")
            )
        except TurnError:
            raise
        except Exception as e:
            raise FulfillmentFault(intent_name, f"Fulfillment of '{intent_name}' failed: {e}") from e

    def _resolve(self, interpretation: Interpretation) -> Tuple[Optional[Action], str]:
        try:
            return self.resolver.resolve(interpretation)
        except DialogEngineError:
            raise
        except Exception as e:
            raise ResolutionFault(
                interpretation.name,
                f"Could not create the action for '{interpretation.name}': {e}"
            ) from e

    async def _handle(
        self,
        context: ConversationContext,
        pending: PendingInput,
        intent_name: str,
        fulfillment: Any
    ) -> None:
        handler = self.handlers.lookup(intent_name)
        logger.info(f"Dispatching intent '{intent_name}' to "
                    f"{self.handlers.member_for(intent_name)}")
        try:
            await handler(context, pending, fulfillment)
        except DialogEngineError:
            raise
        except Exception as e:
            raise HandlerFault(intent_name, f"Handler for '{intent_name}' failed: {e}") from e

    async def _guard(
        self,
        context: ConversationContext,
        awaitable: Any,
        interrupted: Callable[[str], TurnError]
    ) -> Any:
        """
        Await `awaitable` unless the context is cancelled or times out first.

        On interruption the work is cancelled and `interrupted(reason)` is
        raised.
        """
        cancellation: Optional[asyncio.Event] = getattr(context, 'cancellation', None)
        timeout: Optional[float] = getattr(context, 'timeout', None)

        work = asyncio.ensure_future(awaitable)
        watcher = asyncio.ensure_future(cancellation.wait()) if cancellation is not None else None
        waiters = {work} if watcher is None else {work, watcher}

        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            await _cancel(work)
            raise
        finally:
            if watcher is not None:
                await _cancel(watcher)

        if work in done:
            return work.result()

        await _cancel(work)
        reason = "cancelled" if cancellation is not None and cancellation.is_set() \
            else f"timed out after {timeout}s"
        raise interrupted(reason)


async def _cancel(future: "asyncio.Future[Any]") -> None:
    if not future.done():
        future.cancel()
    await asyncio.gather(future, return_exceptions=True)


def _settled(text: str) -> "asyncio.Future[str]":
    future = asyncio.get_running_loop().create_future()
    future.set_result(text)
    return future
