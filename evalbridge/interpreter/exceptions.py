# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Error taxonomy for the embedded interpreter.

Both kinds are recovered inside the evaluation session and rendered as text
by the report builder. They never reach the host as raised exceptions.
"""


class InterpreterError(Exception):
    """Base for every failure the interpreter can report for a single call."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class LibraryLoadError(InterpreterError):
    """
    Raised when the standard symbol library cannot be loaded into a fresh
    interpreter. Evaluation is never attempted after this.
    """


class EvaluationError(InterpreterError):
    """
    Raised when the submitted source fails: a syntax error, a runtime fault,
    or any exception the evaluated code raises itself.
    """
