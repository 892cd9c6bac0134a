"""Texinfo dialect of example extraction.

Texinfo documentation (as used by GNU Octave help texts and ``.texi`` files)
keeps runnable text in ``@example`` ... ``@end example`` blocks and marks
results with ``@result{}`` instead of using prompts. This module rewrites
such documentation into the prompt dialect and then reuses
`py_mdoctest.extraction.PromptExtractor` to split it into examples.

Rewriting rules:
    - Text outside the blocks is discarded; blocks are joined with two blank
      lines so that the output of one block never runs into the next.
    - ``@group`` / ``@end group`` lines are removed and ``@{``, ``@}``, ``@@``
      are unescaped.
    - If the blocks already contain prompts they are used as they are.
    - Otherwise every non-blank line before a ``@result{}`` line (back to the
      block start or the previous result line) becomes a prompt line, and the
      ``@result{}`` line plus any lines after the last one form the expected
      output. Spaces between ``@result`` and ``{}`` are allowed.

Errors are reported as `Outcome` values on the returned `Extraction`, see
`Outcome.is_error`.
"""
import re

from typing_extensions import List, Tuple

from py_mdoctest.exceptions import ExtractionError
from py_mdoctest.extraction import Extraction, Outcome, PromptExtractor, PROMPT_RE
from py_mdoctest.logger import logger

__all__ = (
    'TexinfoExtractor',
    'to_prompts',
)

_MARKER_RE = re.compile(r'@example|@end example')
_BLOCK_RE = re.compile(r'^[ \t]*@example[ \t]*\n(.*?)^[ \t]*@end example[ \t]*$', re.M | re.S)
_GROUP_RE = re.compile(r'^[ \t]*@(?:end )?group[ \t]*(?:\n|$)', re.M)
_RESULT_MARKER_RE = re.compile(r'@result\s*\{\}')
_RESULT_RE = re.compile(r'@result\s*\{\} ?')
_ESCAPE_RE = re.compile(r'@([{}@])')
_BLOCK_SEPARATOR = '\n\n\n'


def _synthesize_prompts(block: str) -> str:
    lines = block.splitlines()
    result_lines = []
    for i, line in enumerate(lines):
        count = len(_RESULT_MARKER_RE.findall(line))
        if count > 1:
            raise ExtractionError(Outcome.MULTIPLE_RESULTS, line.strip())
        if count:
            result_lines.append(i)

    if not result_lines:
        return block

    first_meaningful = next(line for line in lines if line.strip())
    if _RESULT_MARKER_RE.search(first_meaningful):
        raise ExtractionError(Outcome.NO_COMMAND, first_meaningful.strip())

    # Lines after the last result line continue its output
    last_result = result_lines[-1]
    out: List[str] = []
    for i, line in enumerate(lines):
        if i < last_result and not _RESULT_MARKER_RE.search(line) and line.strip():
            out.append('>> ' + line.lstrip())
        else:
            out.append(line)
    return '\n'.join(out)


def to_prompts(docstring: str) -> Tuple[str, Outcome]:
    """Rewrite Texinfo documentation into prompt-dialect text.

    Args:
        docstring: Texinfo documentation.

    Returns:
        The rewritten text and the outcome. For `Outcome.NO_BLOCKS` the text is empty.

    Raises:
        ExtractionError: If the blocks are malformed, empty, or the result
            markers cannot be turned into prompts.
    """
    if not _MARKER_RE.search(docstring):
        return '', Outcome.NO_BLOCKS

    blocks = _BLOCK_RE.findall(docstring)
    if not blocks:
        raise ExtractionError(Outcome.MALFORMED)

    blocks = [_GROUP_RE.sub('', block).rstrip('\n') for block in blocks]
    if not any(block.strip() for block in blocks):
        raise ExtractionError(Outcome.EMPTY)

    if any(PROMPT_RE.match(line) for block in blocks for line in block.splitlines()):
        outcome = Outcome.EXPLICIT_PROMPTS
    elif any(_RESULT_MARKER_RE.search(block) for block in blocks):
        outcome = Outcome.RESULT_SYNTHESIS
        blocks = [_synthesize_prompts(block) for block in blocks]
    else:
        raise ExtractionError(Outcome.NO_PROMPTS_OR_RESULTS)

    text = _BLOCK_SEPARATOR.join(blocks)
    text = _RESULT_RE.sub('', text)
    text = _ESCAPE_RE.sub(r'\1', text)
    return text, outcome


class TexinfoExtractor:
    """Extractor for Texinfo documentation."""

    def extract(self, docstring: str) -> Extraction:
        try:
            text, outcome = to_prompts(docstring)
        except ExtractionError as exc:
            logger.debug(f"Texinfo extraction failed: {exc}")
            return Extraction([], exc.outcome)

        logger.debug(f"Texinfo extraction: {outcome.value}")
        if outcome is Outcome.NO_BLOCKS:
            return Extraction([], outcome)
        return Extraction(PromptExtractor.scan(text), outcome)
