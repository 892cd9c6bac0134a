import io
from types import SimpleNamespace

import pytest

from py_mdoctest.config import create_doctest_config
from py_mdoctest.exceptions import ExecutorUnavailableError, SessionClosedError
from py_mdoctest.executors import OctaveExecutor, OctaveSession, build_command, octave_executor, octave_string
from py_mdoctest.generics import ERROR_MARKER, ExecutorProtocol


class TestOctaveCommand:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("x = 1", "['x = 1']"),
            ("disp('a')", "['disp(''a'')']"),
            ("a = 1\nb = 2", "['a = 1' char(10) 'b = 2']"),
            ("", "['']"),
        ],
    )
    def test_octave_string(self, text, expected):
        assert octave_string(text) == expected

    def test_build_command_evalc(self):
        command = build_command("x = 1", "BEGIN", "END")
        assert "DOCTEST__code = ['x = 1'];" in command
        assert "evalc(DOCTEST__code)" in command
        assert f"['{ERROR_MARKER}' DOCTEST__err.message]" in command
        assert "fprintf('%s\\n', 'BEGIN');" in command
        assert "fprintf('\\n%s\\n', 'END');" in command
        assert "diary" not in command

    def test_build_command_diary(self):
        command = build_command("x = 1", "BEGIN", "END", has_evalc=False)
        assert "evalc" not in command
        assert "diary(DOCTEST__file);" in command
        assert "eval(DOCTEST__code);" in command

    def test_missing_binary(self):
        config = create_doctest_config({'octave_binary': 'no-such-octave-binary'})
        with pytest.raises(ExecutorUnavailableError):
            OctaveExecutor(config)

    def test_implements_protocol(self):
        assert isinstance(OctaveExecutor, ExecutorProtocol)


BEGIN = "DOCTEST__BEGIN_T"
END = "DOCTEST__END_T"


class FakeStdin:
    def __init__(self):
        self.written = []
        self.closed = False
        self.broken = False

    def write(self, text):
        if self.broken:
            raise BrokenPipeError("stdin closed")
        self.written.append(text)
        return len(text)

    def flush(self):
        pass

    def close(self):
        self.closed = True


class FakeProcess:
    """Stands in for the interpreter process; stdout is scripted up front."""

    def __init__(self, args, stdout_text, returncode=None):
        self.args = args
        self.stdin = FakeStdin()
        self.stdout = io.StringIO(stdout_text)
        self.returncode = returncode

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        if self.returncode is None:
            self.returncode = 0
        return self.returncode

    def kill(self):
        self.returncode = -9


def reply(*lines):
    """Interpreter output for one command: echo, begin marker, lines, sentinel."""
    return "\n".join(("echo", BEGIN, *lines, END)) + "\n"


@pytest.fixture
def fake_octave(monkeypatch):
    processes = []

    def start(stdout_text, returncode=None):
        def popen(args, **kwargs):
            process = FakeProcess(args, stdout_text, returncode)
            processes.append(process)
            return process

        monkeypatch.setattr(octave_executor.subprocess, "Popen", popen)
        monkeypatch.setattr(octave_executor.uuid, "uuid4", lambda: SimpleNamespace(hex="T"))
        monkeypatch.setattr(octave_executor.shutil, "which", lambda name: "/opt/octave/bin/" + name)
        return processes

    return start


class TestOctaveSessionProtocol:

    def test_evalc_detected(self, fake_octave):
        processes = fake_octave(reply("5"))
        session = OctaveExecutor().open_session()
        assert session.has_evalc
        assert processes[0].args == ["/opt/octave/bin/octave", *octave_executor.OCTAVE_ARGS]
        assert "exist('evalc')" in processes[0].stdin.written[0]

    def test_missing_evalc_uses_diary(self, fake_octave, caplog):
        processes = fake_octave(reply("0") + reply("x = 7", ""))
        with caplog.at_level("WARNING", logger="py_mdoctest"):
            executor = OctaveExecutor()
            session = executor.open_session()
        assert not session.has_evalc
        assert "diary emulation" in caplog.text
        assert executor.execute("x = 7", session) == "x = 7\n"
        command = processes[0].stdin.written[-1]
        assert "diary(DOCTEST__file);" in command
        assert "evalc" not in command

    def test_evalc_check_at_eof(self, fake_octave):
        fake_octave("")
        session = OctaveExecutor().open_session()
        assert not session.has_evalc

    def test_receive_drops_echo_before_begin_marker(self, fake_octave):
        fake_octave(reply("5") + "DOCTEST__code = ['x'];\n" + reply("ans = 4", ""))
        executor = OctaveExecutor()
        with executor.open_session() as session:
            assert executor.execute("2 + 2", session) == "ans = 4\n"

    def test_receive_returns_none_at_eof(self, fake_octave):
        fake_octave(reply("5") + BEGIN + "\npartial\n")
        session = OctaveSession("octave")
        assert session.receive() is None

    def test_execute_process_exited_while_running(self, fake_octave):
        fake_octave(reply("5") + BEGIN + "\n")
        executor = OctaveExecutor()
        with executor.open_session() as session:
            assert executor.execute("exit", session) == ERROR_MARKER + "Octave process exited"

    def test_execute_process_not_alive(self, fake_octave):
        processes = fake_octave(reply("5"), returncode=1)
        executor = OctaveExecutor()
        session = executor.open_session()
        assert executor.execute("1", session) == ERROR_MARKER + "Octave process exited"
        assert len(processes[0].stdin.written) == 1

    def test_execute_broken_pipe(self, fake_octave):
        processes = fake_octave(reply("5"))
        executor = OctaveExecutor()
        session = executor.open_session()
        processes[0].stdin.broken = True
        assert executor.execute("1", session) == ERROR_MARKER + "Octave process exited"

    def test_close(self, fake_octave):
        processes = fake_octave(reply("5"))
        executor = OctaveExecutor()
        session = executor.open_session()
        session.close()
        session.close()
        process = processes[0]
        assert session.closed
        assert process.stdin.written[-1] == "exit\n"
        assert process.stdin.written.count("exit\n") == 1
        assert process.stdin.closed and process.stdout.closed
        with pytest.raises(SessionClosedError):
            executor.execute("1", session)


@pytest.mark.octave
class TestOctaveSession:

    @pytest.fixture(scope="class")
    def executor(self):
        return OctaveExecutor()

    def test_display(self, executor):
        with executor.open_session() as session:
            assert executor.execute("x = 3 + 4", session).split() == ["x", "=", "7"]

    def test_semicolon_and_state(self, executor):
        with executor.open_session() as session:
            assert executor.execute("y = 5;", session).strip() == ""
            assert executor.execute("disp(y * 2)", session).strip() == "10"

    def test_error_transcript(self, executor):
        with executor.open_session() as session:
            got = executor.execute("error('my error')", session)
        assert got.startswith(ERROR_MARKER)
        assert "my error" in got

    def test_sessions_are_isolated(self, executor):
        with executor.open_session() as first:
            executor.execute("z = 1;", first)
        with executor.open_session() as second:
            assert executor.execute("z", second).startswith(ERROR_MARKER)

    def test_closed_session(self, executor):
        session = executor.open_session()
        session.close()
        with pytest.raises(SessionClosedError):
            executor.execute("1", session)
