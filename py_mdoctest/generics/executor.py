"""Executor protocol module for py_mdoctest.

This module defines the protocols that every code executor must implement.
An executor evaluates example source code inside an evaluation session and
returns the complete textual transcript the code produced, so that it can be
compared with the expected output of the example.

Classes:
    SessionProtocol: A persistent evaluation context with a defined lifetime.
    ExecutorProtocol: Type protocol for code executors.

Type Variables:
    ConfigT: Configuration type for the executor (covariant)

Note:
    The session is owned by the runner. It is opened at the start of one
    target's run, passed into `execute()` for every example of that target,
    and closed at the end of the run, so that state created by one example is
    visible to the following examples of the same target only.
"""

# Standard library imports
from abc import abstractmethod
from types import TracebackType
from typing import Any, Dict, Optional, Type, TypeVar

# Third-party imports
from typing_extensions import Protocol, Self, runtime_checkable

__all__ = ['ConfigT', 'ERROR_MARKER', 'ExecutorProtocol', 'SessionProtocol']

# Type variable for executor configuration
ConfigT = TypeVar("ConfigT", covariant=True)

#: Prefix of a transcript produced by an error raised in example code
ERROR_MARKER = '??? '


@runtime_checkable
class SessionProtocol(Protocol):
    """A persistent evaluation context.

    Sessions are context managers; leaving the `with` block closes them.
    """

    closed: bool

    def close(self) -> None:
        ...

    def __enter__(self) -> Self:
        ...

    def __exit__(self,
                 exc_type: Optional[Type[BaseException]],
                 exc_val: Optional[BaseException],
                 exc_tb: Optional[TracebackType]) -> None:
        ...


@runtime_checkable
class ExecutorProtocol(Protocol[ConfigT]):
    """Protocol defining the interface of example code executors.

    Required Methods:
        - open_session: Create the evaluation context for one target.
        - execute: Evaluate code in a session and return its transcript.

    Examples:
        ```python
        from py_mdoctest.executors import PythonExecutor

        executor = PythonExecutor()
        with executor.open_session() as session:
            executor.execute("x = 3 + 4;", session)  # ''
            executor.execute("x", session)           # '7\\n'
        ```
    """

    def __init__(self, config: Optional[ConfigT] = None) -> None:
        ...

    @abstractmethod
    def open_session(self, globs: Optional[Dict[str, Any]] = None) -> SessionProtocol:
        """Create a new evaluation context.

        Args:
            globs: Initial bindings of the context. Executors that cannot
                share host objects ignore it.

        Returns:
            SessionProtocol: Open session, to be closed by the caller.
        """
        ...

    @abstractmethod
    def execute(self, code: str, session: SessionProtocol) -> str:
        """Evaluate `code` in `session` and return everything it printed.

        The transcript includes display output and warning text. If the code
        raises an error, the transcript is replaced by `ERROR_MARKER` followed
        by the error message; output printed before the error is lost. Errors
        of the executed code are never propagated to the caller.

        Raises:
            SessionClosedError: If the session is already closed.
        """
        ...
