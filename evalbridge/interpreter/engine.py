# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The interpreter capability behind every evaluation session.

The session only ever talks to the narrow `Interpreter` protocol:
  - load_library() raises LibraryLoadError or returns None
  - evaluate(source) raises EvaluationError or returns None, writing all of
    its output into the sinks it was constructed with

Anything that satisfies that contract can stand in for PythonInterpreter,
which is what the tests do to simulate library load failures.

PythonInterpreter runs source with exec() inside a private globals dict.
This is not a security sandbox: evaluated code has the full power of the
host process. Isolation here means "no state carried between calls", not
"safe to run hostile code".
"""

import builtins
import contextlib
import threading
from typing import Any, Protocol, TextIO

from evalbridge.interpreter.exceptions import EvaluationError
from evalbridge.interpreter.library import StandardLibrary

# sys.stdout/sys.stderr are process-wide, so redirected evaluations share one
# execution context and run strictly one at a time.
_EXECUTION_CONTEXT = threading.RLock()


class Interpreter(Protocol):
    """What an evaluation session needs from an embedded interpreter."""

    def load_library(self) -> None: ...

    def evaluate(self, source: str) -> None: ...


class InterpreterFactory(Protocol):
    """Builds a fresh interpreter bound to a pair of output sinks."""

    def __call__(self, stdout: TextIO, stderr: TextIO, library: StandardLibrary) -> Interpreter: ...


def describe_exception(err: BaseException) -> str:
    """Render an exception the way the report shows it: `Type: message`."""
    return f"{type(err).__name__}: {err}"


class PythonInterpreter:
    """
    A single-use Python interpreter with its own namespace and output sinks.

    Each instance gets a private copy of the builtins table, so nothing the
    evaluated code does to its globals (or to `__builtins__`) is visible to
    the next instance.
    """

    def __init__(
        self,
        stdout: TextIO,
        stderr: TextIO,
        library: StandardLibrary,
        filename: str = "<eval>",
    ) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._library = library
        self._filename = filename
        self._globals: dict[str, Any] = {
            "__name__": "__main__",
            "__builtins__": dict(vars(builtins)),
        }

    @property
    def namespace(self) -> dict[str, Any]:
        return self._globals

    def load_library(self) -> None:
        self._globals.update(self._library.symbols())

    def evaluate(self, source: str) -> None:
        """
        Compile and run `source` once.

        Raises:
            EvaluationError: For syntax errors and for anything the code
                raises, including SystemExit and KeyboardInterrupt, so no
                submission can stop the service.
        """
        try:
            code = compile(source, self._filename, "exec")
        except (SyntaxError, ValueError) as err:
            raise EvaluationError(describe_exception(err)) from err

        with _EXECUTION_CONTEXT:
            try:
                with contextlib.redirect_stdout(self._stdout), contextlib.redirect_stderr(self._stderr):
                    exec(code, self._globals)
            except BaseException as err:
                raise EvaluationError(describe_exception(err)) from err


def python_interpreter_factory(filename: str = "<eval>") -> InterpreterFactory:
    """Return a factory that builds PythonInterpreters with the given filename."""

    def build(stdout: TextIO, stderr: TextIO, library: StandardLibrary) -> Interpreter:
        return PythonInterpreter(stdout, stderr, library, filename=filename)

    return build
