import pytest

from py_mdoctest.collector import Target
from py_mdoctest.executors import PythonExecutor
from py_mdoctest.extraction import Example
from py_mdoctest.runner import ComparisonOutcome, DocTestRunner, TargetResult


@pytest.fixture
def runner():
    return DocTestRunner(PythonExecutor())


class TestDocTestRunner:

    def test_simple_pass(self, runner):
        results = runner.run(">> 1 + 3\n4\n")
        assert results == [ComparisonOutcome("1 + 3", "4", "4", True)]

    def test_simple_fail(self, runner):
        results = runner.run(">> 1 + 3\n5\n")
        assert len(results) == 1
        assert not results[0].passed
        assert results[0].want == "5"
        assert results[0].got == "4"

    def test_no_examples(self, runner):
        assert runner.run("Nothing to run here.") == []

    def test_state_flows_between_examples(self, runner):
        doc = """
        >> a = 2;
        >> b = a * 3;
        >> b
        6
        """
        results = runner.run(doc)
        assert [r.passed for r in results] == [True, True, True]

    def test_whitespace_is_normalized(self, runner):
        doc = ">> print('A =\\n\\n   1   2')\nA =\n\n 1 2\n"
        results = runner.run(doc)
        assert results[0].passed
        assert results[0].want == "A =\n\n 1 2"

    def test_wildcard_expectation(self, runner):
        results = runner.run(">> list(range(10))\n[0, 1, ***, 9]\n")
        assert results[0].passed

    def test_error_expectation(self, runner):
        results = runner.run(">> undefined_name\n??? NameError: ***\n")
        assert results[0].passed
        assert results[0].got.startswith("??? NameError: name 'undefined_name' is not defined")

    def test_unexpected_error_fails(self, runner):
        results = runner.run(">> 1 / 0\n0\n")
        assert not results[0].passed
        assert results[0].got == "??? ZeroDivisionError: division by zero"

    def test_system_exit_does_not_stop_the_run(self, runner):
        results = runner.run(">> import sys\n>> sys.exit(3)\n??? ***\n>> 1 + 1\n2\n")
        assert len(results) == 3
        assert results[1].got == "??? SystemExit: 3"
        assert all(r.passed for r in results)

    def test_skipped_examples_are_not_run(self, runner):
        doc = ">> x = 1\n>> x = 2  # doctest: +SKIP\n>> x\n1\n"
        results = runner.run(doc)
        assert [r.source for r in results] == ["x = 1", "x"]
        assert all(r.passed for r in results)

    def test_continuation_lines(self, runner):
        doc = ">> def f(x):\n..     return x * 2\n>> f(21)\n42\n"
        results = runner.run(doc)
        assert [r.passed for r in results] == [True, True]

    def test_globs(self, runner):
        results = runner.run(">> foo(1)\n2\n", {'foo': lambda x: x + 1})
        assert results[0].passed

    def test_sessions_do_not_leak_between_runs(self, runner):
        runner.run(">> leaked = 1\n")
        results = runner.run(">> leaked\n1\n")
        assert not results[0].passed

    def test_repeated_runs_are_identical(self, runner):
        doc = ">> a = [1, 2];\n>> a.append(3)\n>> a\n[1, 2, 3]\n"
        assert runner.run(doc) == runner.run(doc)

    def test_texinfo_docstring(self, runner):
        doc = "-*- texinfo -*-\n@example\nfoo(1)\n@result{} 2\n@end example\n"
        results = runner.run(doc, {'foo': lambda x: x + 1})
        assert results == [ComparisonOutcome("foo(1)", "2", "2", True)]

    def test_texinfo_extraction_error_runs_nothing(self, runner):
        assert runner.run("-*- texinfo -*-\n@example\nfoo(1)\n") == []

    def test_compare(self):
        outcome = DocTestRunner.compare(Example("x", "  ans =   4\n"), "ans = 4\n")
        assert outcome == ComparisonOutcome("x", "ans =   4", "ans = 4", True)

    def test_pass_alias_is_deprecated(self):
        outcome = ComparisonOutcome("x", "1", "1", True)
        with pytest.deprecated_call():
            assert outcome.pass_


class TestRunTarget:

    def test_target_result_counts(self, runner):
        target = Target("t", ">> 1\n1\n>> 2\n3\n>> 3\n3\n")
        result = runner.run_target(target)
        assert isinstance(result, TargetResult)
        assert result.num_tests == 3
        assert result.num_tests_passed == 2
        assert not result.passed
        assert [f.source for f in result.failures] == ["2"]

    def test_target_without_examples_passes(self, runner):
        result = runner.run_target(Target("t", "No examples."))
        assert result.num_tests == 0
        assert result.passed
        assert result.error is None

    def test_target_dialect_overrides_runner(self, runner):
        target = Target("t", "@example\n1 + 1\n@result{} 2\n@end example\n", dialect='texinfo')
        result = runner.run_target(target)
        assert result.num_tests == 1
        assert result.passed

    def test_extraction_error_is_data(self, runner):
        target = Target("t", "@example\nfoo(1)\n@result{} 2 @result{} 3\n@end example\n", dialect='texinfo')
        result = runner.run_target(target)
        assert result.error == "multiple results on one line"
        assert result.results == []
        assert not result.passed

    def test_target_with_error(self, runner):
        result = runner.run_target(Target("t", error="cannot read file"))
        assert result.error == "cannot read file"
        assert result.num_tests == 0
