import pytest

from py_mdoctest.exceptions import ExtractionError
from py_mdoctest.extraction import Example, Outcome
from py_mdoctest.texinfo import TexinfoExtractor, to_prompts

HEADER = "-*- texinfo -*-\n@deftypefn {} {} foo (@var{x})\nAdd one to @var{x}.\n\n"


def _extract(body: str):
    return TexinfoExtractor().extract(HEADER + body + "@end deftypefn\n")


class TestResultSynthesis:

    def test_single_result(self):
        extraction = _extract("@example\nfoo (1)\n  @result{} 2\n@end example\n")
        assert extraction.outcome is Outcome.RESULT_SYNTHESIS
        assert extraction.error is None
        assert len(extraction.examples) == 1
        example = extraction.examples[0]
        assert example.source == "foo (1)"
        assert example.expected.strip() == "2"

    def test_several_commands_before_result(self):
        extraction = _extract("@example\na = 1;\nb = a + 1\n@result{} b = 2\n@end example\n")
        assert [e.source for e in extraction.examples] == ["a = 1;", "b = a + 1"]
        assert extraction.examples[0].expected == ""
        assert extraction.examples[1].expected.strip() == "b = 2"

    def test_lines_after_last_result_continue_output(self):
        extraction = _extract("@example\nA = eye (2)\n@result{} A =\n\n   1   0\n   0   1\n@end example\n")
        assert len(extraction.examples) == 1
        assert extraction.examples[0].expected.split() == ["A", "=", "1", "0", "0", "1"]

    def test_group_markers_and_escapes(self):
        extraction = _extract("@example\n@group\nc = @{1, 2@}\n@result{} c = @{@}\n@end group\n@end example\n")
        assert extraction.examples[0].source == "c = {1, 2}"
        assert extraction.examples[0].expected.strip() == "c = {}"

    def test_blocks_are_separated(self):
        body = ("@example\nfoo (1)\n@result{} 2\n@end example\nSome prose.\n"
                "@example\nfoo (2)\n@result{} 3\n@end example\n")
        extraction = _extract(body)
        assert [(e.source, e.expected.strip()) for e in extraction.examples] == [("foo (1)", "2"), ("foo (2)", "3")]

    def test_spaced_result_marker(self):
        extraction = _extract("@example\nfoo (1)\n  @result {} 2\n@end example\n")
        assert extraction.outcome is Outcome.RESULT_SYNTHESIS
        assert [(e.source, e.expected.strip()) for e in extraction.examples] == [("foo (1)", "2")]

    def test_spaced_markers_count_as_multiple_results(self):
        extraction = _extract("@example\nfoo (1)\n@result{} 2 @result  {} 3\n@end example\n")
        assert extraction.outcome is Outcome.MULTIPLE_RESULTS

    def test_multiple_results_on_one_line(self):
        extraction = _extract("@example\nfoo (1)\n@result{} 2 @result{} 3\n@end example\n")
        assert extraction.outcome is Outcome.MULTIPLE_RESULTS
        assert extraction.error == Outcome.MULTIPLE_RESULTS.value
        assert extraction.examples == []

    def test_result_before_command(self):
        extraction = _extract("@example\n\n@result{} 2\n@end example\n")
        assert extraction.outcome is Outcome.NO_COMMAND
        assert extraction.examples == []


class TestExplicitPrompts:

    def test_explicit_prompts_used_as_is(self):
        extraction = _extract("@example\n>> x = 3\nx = 3\n>> x + 1\nans = 4\n@end example\n")
        assert extraction.outcome is Outcome.EXPLICIT_PROMPTS
        assert extraction.examples == [Example("x = 3", "x = 3"), Example("x + 1", "ans = 4")]

    def test_result_marker_stripped_with_prompts(self):
        extraction = _extract("@example\n>> foo (1)\n@result{} 2\n@end example\n")
        assert extraction.examples == [Example("foo (1)", "2")]


class TestTexinfoErrors:

    def test_no_blocks(self):
        extraction = _extract("Just prose.\n")
        assert extraction.outcome is Outcome.NO_BLOCKS
        assert extraction.error is None
        assert extraction.examples == []

    def test_malformed(self):
        extraction = _extract("@example\nfoo (1)\n@result{} 2\n")
        assert extraction.outcome is Outcome.MALFORMED
        assert extraction.error == "malformed blocks"

    def test_empty_blocks(self):
        extraction = _extract("@example\n\n@end example\n")
        assert extraction.outcome is Outcome.EMPTY

    def test_neither_prompts_nor_results(self):
        extraction = _extract("@example\nfoo (1)\n@end example\n")
        assert extraction.outcome is Outcome.NO_PROMPTS_OR_RESULTS
        assert extraction.error == "blocks present but neither prompts nor result markers"

    def test_to_prompts_raises(self):
        with pytest.raises(ExtractionError) as excinfo:
            to_prompts("@example\n@end example\n")
        assert excinfo.value.outcome is Outcome.EMPTY
        assert str(excinfo.value) == "empty blocks"

    def test_to_prompts_text(self):
        text, outcome = to_prompts("@example\nfoo (1)\n@result{} 2\n@end example\n")
        assert outcome is Outcome.RESULT_SYNTHESIS
        assert text == ">> foo (1)\n2"
