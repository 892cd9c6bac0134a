"""Extraction of examples from documentation text.

An example is a prompt line starting with ``>>`` followed by a space and
the code, optionally continued on lines starting with ``..`` and a space,
and followed by the expected output. Expected output ends at the next
prompt, at two consecutive blank lines, or at the end of the text; a
single blank line inside the output is kept. A prompt line carrying the
marker ``% doctest: +SKIP`` (or ``# doctest: +SKIP``) is extracted with
its `skip` flag set.

If the text has an ``Examples:`` header followed later by a ``See also``
line, only the part in between is scanned.

Classes:
    Example: One extracted question/answer pair.
    Outcome: Extraction outcome, including the Texinfo error taxonomy.
    Extraction: Examples plus the outcome that produced them.
    ExtractorProtocol: Interface shared by all dialect extractors.
    PromptExtractor: Line state machine for the default prompt dialect.

Functions:
    extract_examples: Extract with the prompt dialect.
    get_extractor: Pick the extractor for a docstring and dialect setting.
"""
import re
from enum import Enum, auto

from typing_extensions import List, NamedTuple, Optional, Protocol, runtime_checkable

__all__ = (
    'Example',
    'Outcome',
    'Extraction',
    'ExtractorProtocol',
    'PromptExtractor',
    'extract_examples',
    'get_extractor',
    'is_texinfo',
)

PROMPT_RE = re.compile(r'^[ \t]*>> (.*)$')
# Prompt-like lines without the trailing space still end an output block
PROMPT_LIKE_RE = re.compile(r'^\s*>>')
CONTINUATION_RE = re.compile(r'^[ \t]*\.\.(?: (.*))?$')
SKIP_RE = re.compile(r'[%#]\s*doctest:\s*\+SKIP')
SECTION_RE = re.compile(r'Examples:\s*\n(.*)\n\s*See also ', re.S)
TEXINFO_RE = re.compile(r'-\*- texinfo -\*-|^[ \t]*@example\b', re.M)


class Example(NamedTuple):
    """One question/answer unit taken from a docstring.

    Attributes:
        source: Code to execute; continuation lines are joined with newlines.
        expected: Raw expected output, not normalized.
        skip: True if the prompt line carries the skip marker.
    """

    source: str
    expected: str = ''
    skip: bool = False


class Outcome(Enum):
    """How a docstring was turned into examples."""

    PROMPTS = 'used prompts'
    EXPLICIT_PROMPTS = 'used explicit prompts'
    RESULT_SYNTHESIS = 'used result-marker synthesis'
    NO_BLOCKS = 'no blocks found'
    MALFORMED = 'malformed blocks'
    EMPTY = 'empty blocks'
    NO_COMMAND = 'no command before result'
    MULTIPLE_RESULTS = 'multiple results on one line'
    NO_PROMPTS_OR_RESULTS = 'blocks present but neither prompts nor result markers'

    @property
    def is_error(self) -> bool:
        return self in _ERROR_OUTCOMES


_ERROR_OUTCOMES = frozenset((
    Outcome.MALFORMED,
    Outcome.EMPTY,
    Outcome.NO_COMMAND,
    Outcome.MULTIPLE_RESULTS,
    Outcome.NO_PROMPTS_OR_RESULTS,
))


class Extraction(NamedTuple):
    """Examples extracted from one docstring, with the outcome that produced them."""

    examples: List[Example]
    outcome: Outcome

    @property
    def error(self) -> Optional[str]:
        """Extraction error reason, None if extraction succeeded."""
        return self.outcome.value if self.outcome.is_error else None


@runtime_checkable
class ExtractorProtocol(Protocol):
    """Interface of a documentation dialect extractor."""

    def extract(self, docstring: str) -> Extraction:
        ...


class _State(Enum):
    SEEKING = auto()
    IN_SOURCE = auto()
    IN_CONTINUATION = auto()
    IN_EXPECTED = auto()


class _ExampleBuilder:
    """Accumulates the lines of the example currently being scanned."""

    __slots__ = ('source', 'expected', 'skip', 'pending_blank')

    def __init__(self, prompt_code: str):
        self.source: List[str] = [prompt_code]
        self.expected: List[str] = []
        self.skip: bool = SKIP_RE.search(prompt_code) is not None
        self.pending_blank: bool = False

    def build(self) -> Example:
        return Example('\n'.join(self.source), '\n'.join(self.expected), self.skip)


class PromptExtractor:
    """Extractor for the default ``>>`` prompt dialect.

    The scan is a small state machine over lines:

    - SEEKING: waiting for a prompt line.
    - IN_SOURCE: a prompt line was read; continuation lines may follow.
    - IN_CONTINUATION: at least one continuation line was read.
    - IN_EXPECTED: collecting expected output.
    """

    def extract(self, docstring: str) -> Extraction:
        return Extraction(self.scan(self.narrow(docstring)), Outcome.PROMPTS)

    @staticmethod
    def narrow(docstring: str) -> str:
        """Restrict the text to an ``Examples:`` ... ``See also`` section, if any."""
        if section := SECTION_RE.search(docstring):
            return section.group(1)
        return docstring

    @staticmethod
    def scan(text: str) -> List[Example]:
        """Split text into examples."""
        examples: List[Example] = []
        state = _State.SEEKING
        current: Optional[_ExampleBuilder] = None

        def finish() -> None:
            nonlocal current
            if current is not None:
                examples.append(current.build())
                current = None

        for line in text.splitlines():
            if state in (_State.IN_SOURCE, _State.IN_CONTINUATION):
                if cont := CONTINUATION_RE.match(line):
                    current.source.append(cont.group(1) or '')
                    state = _State.IN_CONTINUATION
                    continue
                state = _State.IN_EXPECTED

            if prompt := PROMPT_RE.match(line):
                finish()
                current = _ExampleBuilder(prompt.group(1))
                state = _State.IN_SOURCE
                continue

            if state is not _State.IN_EXPECTED:
                continue

            if PROMPT_LIKE_RE.match(line):
                finish()
                state = _State.SEEKING
            elif not line.strip():
                if current.pending_blank:
                    finish()
                    state = _State.SEEKING
                else:
                    current.pending_blank = True
            else:
                if current.pending_blank:
                    current.expected.append('')
                    current.pending_blank = False
                current.expected.append(line)

        # End of text terminates output collection
        finish()
        return examples


def extract_examples(docstring: str) -> List[Example]:
    """Extract examples from a docstring written in the prompt dialect."""
    return PromptExtractor().extract(docstring).examples


def is_texinfo(docstring: str) -> bool:
    """Return True if the documentation looks like Texinfo markup."""
    return TEXINFO_RE.search(docstring) is not None


def get_extractor(docstring: str, dialect: str = 'auto') -> ExtractorProtocol:
    """Return the extractor for `docstring`.

    Args:
        docstring: Documentation text, used for sniffing when `dialect` is "auto".
        dialect: "plain", "texinfo" or "auto".

    Raises:
        ValueError: On an unknown dialect.
    """
    # Imported here, texinfo builds on this module
    from py_mdoctest.texinfo import TexinfoExtractor

    if dialect == 'plain':
        return PromptExtractor()
    if dialect == 'texinfo':
        return TexinfoExtractor()
    if dialect == 'auto':
        return TexinfoExtractor() if is_texinfo(docstring) else PromptExtractor()
    raise ValueError(f"Unknown dialect {dialect!r}")
