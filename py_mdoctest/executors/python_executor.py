"""In-process Python executor.

Example code is run with `exec`/`eval` in a namespace dictionary that lives
as long as the session, which mirrors an interactive console: every
top-level expression statement is displayed with `repr` (the value is also
bound to `_`), unless the source ends with a semicolon. Standard output,
standard error and warnings are redirected into one buffer while the code
runs.

If the code raises, `SystemExit` included, the transcript becomes
``??? <Type>: <message>``, the last line of the formatted exception without
the traceback. Output written before the error is discarded.
`KeyboardInterrupt` is propagated.
"""
import ast
import io
import tokenize
import traceback
import warnings
from contextlib import redirect_stderr, redirect_stdout
from types import TracebackType
from typing import TextIO

from typing_extensions import Any, Dict, Optional, Self, Type

from py_mdoctest.config import DoctestConfig, get_config
from py_mdoctest.exceptions import SessionClosedError
from py_mdoctest.generics.executor import ERROR_MARKER, ExecutorProtocol

__all__ = ('PythonExecutor', 'PythonSession',)

_FILENAME = '<doctest>'
_IGNORED_TOKENS = frozenset((tokenize.COMMENT, tokenize.NEWLINE, tokenize.NL,
                             tokenize.INDENT, tokenize.DEDENT, tokenize.ENDMARKER))


class PythonSession:
    """Namespace shared by the examples of one target."""

    def __init__(self, globs: Optional[Dict[str, Any]] = None):
        self.namespace: Dict[str, Any] = dict(globs) if globs is not None else {}
        self.namespace.setdefault('__name__', '__doctest__')
        self.closed: bool = False

    def close(self) -> None:
        self.namespace.clear()
        self.closed = True

    def __enter__(self) -> Self:
        return self

    def __exit__(self,
                 exc_type: Optional[Type[BaseException]],
                 exc_val: Optional[BaseException],
                 exc_tb: Optional[TracebackType]) -> None:
        self.close()


def _ends_with_semicolon(source: str) -> bool:
    """Return True if the last code token of `source` is a semicolon."""
    last = None
    try:
        for tok in tokenize.generate_tokens(io.StringIO(source).readline):
            if tok.type not in _IGNORED_TOKENS:
                last = tok
    except (tokenize.TokenError, SyntaxError):
        return False
    return last is not None and last.string == ';'


def format_exception(exc: BaseException) -> str:
    """Format an exception raised by example code as transcript text."""
    lines = traceback.format_exception_only(type(exc), exc)
    return ERROR_MARKER + lines[-1].strip()


class PythonExecutor(ExecutorProtocol[DoctestConfig]):
    """Runs examples as Python code in the current interpreter."""

    def __init__(self, config: Optional[DoctestConfig] = None) -> None:
        self.config: DoctestConfig = config if config is not None else get_config()

    def open_session(self, globs: Optional[Dict[str, Any]] = None) -> PythonSession:
        return PythonSession(globs)

    def execute(self, code: str, session: PythonSession) -> str:  # type: ignore[override]
        if session.closed:
            raise SessionClosedError("Python session is closed")

        buffer = io.StringIO()
        try:
            with redirect_stdout(buffer), redirect_stderr(buffer), warnings.catch_warnings():
                warnings.simplefilter('always')
                warnings.showwarning = self._warning_writer(buffer)
                self._run(code, session.namespace, buffer)
        except KeyboardInterrupt:
            raise
        except BaseException as exc:
            # SystemExit from example code ends the example, not the run
            return format_exception(exc)
        return buffer.getvalue()

    @staticmethod
    def _warning_writer(stream: TextIO):
        def showwarning(message, category, filename, lineno, file=None, line=None):
            stream.write(f"{category.__name__}: {message}\n")
        return showwarning

    @staticmethod
    def _run(code: str, namespace: Dict[str, Any], stream: TextIO) -> None:
        module = ast.parse(code, _FILENAME, 'exec')
        quiet = _ends_with_semicolon(code)
        body = module.body
        for i, node in enumerate(body):
            if isinstance(node, ast.Expr):
                expression = ast.Expression(node.value)
                value = eval(compile(expression, _FILENAME, 'eval'), namespace)
                if value is not None and not (quiet and i == len(body) - 1):
                    namespace['_'] = value
                    stream.write(repr(value) + '\n')
            else:
                statement = ast.Module([node], type_ignores=[])
                exec(compile(statement, _FILENAME, 'exec'), namespace)
