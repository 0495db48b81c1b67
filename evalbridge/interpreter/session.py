# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
One evaluation session per host call.

A session owns a freshly built interpreter and two private StringIO sinks.
The lifecycle is linear and single-shot:

  IDLE -> LOADING_LIBRARY -> EVALUATING -> SUCCEEDED | FAILED -> DONE
                          \\-> LOAD_FAILED ----------------------> DONE

If the standard library fails to load, evaluation is never attempted. Any
error raised while evaluating is captured as data in the returned outcome;
output written before the failure point stays in the buffers.

Sessions are never reused. Nothing survives past run() except the outcome.
"""

import enum
import io
from typing import Optional

from evalbridge.bridge.report import render_report
from evalbridge.bridge.schema import EvaluationRequest, SessionOutcome
from evalbridge.interpreter.engine import InterpreterFactory, python_interpreter_factory
from evalbridge.interpreter.exceptions import EvaluationError, LibraryLoadError
from evalbridge.interpreter.library import StandardLibrary
from evalbridge.logging.logger import get_logger

logger = get_logger(__name__)


class SessionState(enum.Enum):
    IDLE = "idle"
    LOADING_LIBRARY = "loading_library"
    LOAD_FAILED = "load_failed"
    EVALUATING = "evaluating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DONE = "done"


class SessionAlreadyRunError(RuntimeError):
    """Raised when run() is called twice on the same session."""


class EvaluationSession:
    """
    Runs one piece of source text through a brand new interpreter.

    Usage:
        outcome = EvaluationSession(EvaluationRequest("print('hi')")).run()
        outcome.stdout  # "hi\\n"
    """

    def __init__(
        self,
        request: EvaluationRequest,
        library: Optional[StandardLibrary] = None,
        interpreter_factory: Optional[InterpreterFactory] = None,
    ) -> None:
        self._request = request
        self._library = library if library is not None else StandardLibrary()
        self._factory = interpreter_factory or python_interpreter_factory()
        self._state = SessionState.IDLE
        # The terminal state reached before DONE, kept for diagnostics.
        self._outcome_state: Optional[SessionState] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def outcome_state(self) -> Optional[SessionState]:
        return self._outcome_state

    def _transition(self, state: SessionState) -> None:
        logger.debug(
            "Session state change",
            extra={"from_state": self._state.value, "to_state": state.value},
        )
        self._state = state

    def run(self) -> SessionOutcome:
        if self._state is not SessionState.IDLE:
            raise SessionAlreadyRunError("An evaluation session can only be run once")

        stdout = io.StringIO()
        stderr = io.StringIO()
        interpreter = self._factory(stdout, stderr, self._library)

        self._transition(SessionState.LOADING_LIBRARY)
        try:
            interpreter.load_library()
        except LibraryLoadError as err:
            self._transition(SessionState.LOAD_FAILED)
            self._outcome_state = SessionState.LOAD_FAILED
            self._transition(SessionState.DONE)
            logger.warning("Standard library failed to load", extra={"error": err.message})
            return SessionOutcome(error=err)

        self._transition(SessionState.EVALUATING)
        error: Optional[EvaluationError] = None
        try:
            interpreter.evaluate(self._request.source)
            self._transition(SessionState.SUCCEEDED)
        except EvaluationError as err:
            error = err
            self._transition(SessionState.FAILED)

        self._outcome_state = self._state
        self._transition(SessionState.DONE)

        outcome = SessionOutcome(
            stdout=stdout.getvalue(),
            stderr=stderr.getvalue(),
            error=error,
        )
        logger.debug(
            "Session finished",
            extra={
                "outcome": self._outcome_state.value,
                "stdout_chars": len(outcome.stdout),
                "stderr_chars": len(outcome.stderr),
            },
        )
        return outcome


def evaluate_source(
    source: str,
    library: Optional[StandardLibrary] = None,
    interpreter_factory: Optional[InterpreterFactory] = None,
) -> str:
    """
    Evaluate `source` in a fresh session and return the rendered report.

    This is the function the host bridge publishes. It always returns a
    string, whatever the submitted source does.
    """
    session = EvaluationSession(
        EvaluationRequest(source=source),
        library=library,
        interpreter_factory=interpreter_factory,
    )
    return render_report(session.run())
