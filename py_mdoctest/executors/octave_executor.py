"""GNU Octave executor.

Each session owns one Octave interpreter started as a subprocess, so that
variables assigned by one example stay visible to the next examples of the
same target. Every example is sent through the interpreter's stdin wrapped in
a small driver program that:

1. evaluates the code with ``evalc`` inside ``try``/``catch``, turning an
   error into ``??? <message>``;
2. prints a begin marker, the captured text and a sentinel line, then
   flushes stdout.

The reader keeps what was printed between the begin marker and the
sentinel. Interpreters without ``evalc`` get a degraded emulation based on
``diary`` and a temporary file.
"""
import shutil
import subprocess
import uuid
from types import TracebackType

from typing_extensions import Any, Dict, List, Optional, Self, Type

from py_mdoctest.config import DoctestConfig, get_config
from py_mdoctest.exceptions import ExecutorUnavailableError, SessionClosedError
from py_mdoctest.generics.executor import ERROR_MARKER, ExecutorProtocol
from py_mdoctest.logger import logger

__all__ = ('OctaveExecutor', 'OctaveSession', 'octave_string', 'build_command')

OCTAVE_ARGS = ('--no-gui', '--quiet', '--norc', '--no-history', '--no-line-editing')

_EVALC_TEMPLATE = """\
DOCTEST__code = {code};
try
  DOCTEST__out = evalc(DOCTEST__code);
catch DOCTEST__err
  DOCTEST__out = ['{marker}' DOCTEST__err.message];
end
"""

_DIARY_TEMPLATE = """\
DOCTEST__code = {code};
DOCTEST__file = tempname();
diary(DOCTEST__file);
try
  eval(DOCTEST__code);
  diary off;
  DOCTEST__out = fileread(DOCTEST__file);
catch DOCTEST__err
  diary off;
  DOCTEST__out = ['{marker}' DOCTEST__err.message];
end
unlink(DOCTEST__file);
"""

_REPORT_TEMPLATE = """\
fprintf('%s\\n', '{begin}');
fprintf('%s', DOCTEST__out);
fprintf('\\n%s\\n', '{sentinel}');
fflush(stdout);
clear DOCTEST__code DOCTEST__out DOCTEST__err DOCTEST__file
"""


def octave_string(text: str) -> str:
    """Quote `text` as an Octave char array expression."""
    parts = ["'" + line.replace("'", "''") + "'" for line in text.split('\n')]
    return '[' + ' char(10) '.join(parts) + ']'


def build_command(code: str, begin: str, sentinel: str, has_evalc: bool = True) -> str:
    """Build the driver program that evaluates `code` and reports its transcript."""
    template = _EVALC_TEMPLATE if has_evalc else _DIARY_TEMPLATE
    return (template.format(code=octave_string(code), marker=ERROR_MARKER)
            + _REPORT_TEMPLATE.format(begin=begin, sentinel=sentinel))


class OctaveSession:
    """One Octave interpreter process."""

    def __init__(self, binary: str):
        token = uuid.uuid4().hex
        self.begin: str = f"DOCTEST__BEGIN_{token}"
        self.sentinel: str = f"DOCTEST__END_{token}"
        self.closed: bool = False
        self.process = subprocess.Popen(
            [binary, *OCTAVE_ARGS],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
        )
        self.send("more off;\nDOCTEST__out = num2str(exist('evalc'));\n"
                  + _REPORT_TEMPLATE.format(begin=self.begin, sentinel=self.sentinel))
        probe = self.receive()
        self.has_evalc: bool = probe is not None and probe.strip() not in ('', '0')
        if not self.has_evalc:
            logger.warning("Octave has no evalc, using diary emulation")

    @property
    def alive(self) -> bool:
        return self.process.poll() is None

    def send(self, text: str) -> None:
        assert self.process.stdin is not None
        self.process.stdin.write(text)
        self.process.stdin.flush()

    def receive(self) -> Optional[str]:
        """Read up to the sentinel; None if the interpreter exited first."""
        assert self.process.stdout is not None
        lines: List[str] = []
        for raw in iter(self.process.stdout.readline, ''):
            line = raw.rstrip('\n')
            if line == self.sentinel:
                break
            if line == self.begin:
                # Anything before the begin marker is echo of the emulation
                lines = []
                continue
            lines.append(line)
        else:
            return None
        return '\n'.join(lines)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            if self.alive:
                self.send("exit\n")
            self.process.wait(timeout=5)
        except (OSError, subprocess.TimeoutExpired):
            self.process.kill()
            self.process.wait()
        finally:
            for stream in (self.process.stdin, self.process.stdout):
                if stream is not None:
                    stream.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self,
                 exc_type: Optional[Type[BaseException]],
                 exc_val: Optional[BaseException],
                 exc_tb: Optional[TracebackType]) -> None:
        self.close()


class OctaveExecutor(ExecutorProtocol[DoctestConfig]):
    """Runs examples in a GNU Octave subprocess."""

    def __init__(self, config: Optional[DoctestConfig] = None) -> None:
        self.config: DoctestConfig = config if config is not None else get_config()
        binary = shutil.which(self.config.octave_binary)
        if binary is None:
            raise ExecutorUnavailableError(f"Octave interpreter '{self.config.octave_binary}' not found")
        self.binary: str = binary

    def open_session(self, globs: Optional[Dict[str, Any]] = None) -> OctaveSession:
        logger.debug(f"Starting Octave session: {self.binary}")
        return OctaveSession(self.binary)

    def execute(self, code: str, session: OctaveSession) -> str:  # type: ignore[override]
        if session.closed:
            raise SessionClosedError("Octave session is closed")
        if not session.alive:
            return ERROR_MARKER + "Octave process exited"

        try:
            session.send(build_command(code, session.begin, session.sentinel, session.has_evalc))
        except OSError as exc:
            logger.error(f"Cannot send code to Octave: {exc}")
            return ERROR_MARKER + "Octave process exited"

        if (transcript := session.receive()) is None:
            logger.error("Octave process exited while running an example")
            return ERROR_MARKER + "Octave process exited"
        return transcript
