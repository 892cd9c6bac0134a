"""py_mdoctest exception types.

Exception Hierarchy
-------------------

Exception (built-in Python)
└── DoctestError
    ├── ExtractionError (also ValueError)
    ├── CollectionError (also LookupError)
    └── ExecutorError (also RuntimeError)
        ├── ExecutorUnavailableError
        └── SessionClosedError

Exception Types
---------------

- ExtractionError: Documentation text could not be turned into examples. Contains the
  extraction `outcome` (see `py_mdoctest.extraction.Outcome`). Raised inside the Texinfo
  extractor and converted back into data before leaving `extract()`, so callers see an
  extraction error as a reason string on the target, never as an exception.

- CollectionError: A target identifier (module, class, function or file name) could not
  be resolved. Contains the `identifier`.

- ExecutorError: Base class for setup-level executor failures.

- ExecutorUnavailableError: The host capability needed to evaluate code and capture its
  transcript is missing (e.g. no Octave binary on PATH).

- SessionClosedError: Code was submitted to an evaluation session that has already been
  closed.

Errors raised by the *executed example code* are not represented here: executors catch
them and turn them into transcript text.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_mdoctest.extraction import Outcome

__all__ = (
    'DoctestError',
    'ExtractionError',
    'CollectionError',
    'ExecutorError',
    'ExecutorUnavailableError',
    'SessionClosedError',
)


class DoctestError(Exception):
    """Base class of py_mdoctest errors."""


class ExtractionError(DoctestError, ValueError):
    """Exception for documentation that cannot be split into examples.

    Contains:
    - The extraction outcome describing why
    """

    def __init__(self, outcome: Outcome, detail: str = ""):
        self.outcome: Outcome = outcome
        self.detail: str = detail
        msg = outcome.value
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class CollectionError(DoctestError, LookupError):
    """Exception raised when a target identifier cannot be resolved."""

    def __init__(self, identifier: str, reason: str = ""):
        self.identifier: str = identifier
        self.reason: str = reason
        msg = f"Cannot collect doctest targets from '{identifier}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ExecutorError(DoctestError, RuntimeError):
    """Executor error."""


class ExecutorUnavailableError(ExecutorError):
    """The evaluation capability needed by an executor is missing."""


class SessionClosedError(ExecutorError):
    """Evaluation session is already closed."""
