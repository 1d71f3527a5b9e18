"""
Dialog Engine - Conversational Turn Dispatcher

Routes free-text user input through one or more intent classifiers, picks a
single winning interpretation, fulfills the matching action and hands the
result to the dialog handler registered for that intent.
"""

__version__ = "0.1.0"
__author__ = "Dialog Engine Team"
