"""Wildcard-tolerant comparison of expected and captured example output.

Expected text may contain the wildcard `***`, which matches any sequence of
characters (including none). Everything else is matched literally, and the
whole captured text has to be matched.

Examples:

    >> match('abc***xyz', 'abc123xyz')
    True
    >> match('abc***xyz', 'ab123xyz')
    False
    >> match('***', '')
    True
    >> normalize_whitespace('x =\\n\\n   7\\n')
    'x = 7 '
"""
import re

__all__ = (
    'WILDCARD',
    'match',
    'normalize_whitespace',
    'strip_console_markup',
)

WILDCARD = '***'

_HREF_OPEN_RE = re.compile(r'<a +href=".*?>')
_HREF_CLOSE_RE = re.compile(r'</a>')
_BACKSPACE_RE = re.compile(r'.\x08', re.S)
_ESCAPED_WILDCARD_RE = re.compile(r'(\\\*){3}')
_WHITESPACE_RE = re.compile(r'\s+')


def strip_console_markup(text: str) -> str:
    """Remove hyperlink markup and backspace-erase sequences written by consoles."""
    text = _HREF_OPEN_RE.sub('', text)
    text = _HREF_CLOSE_RE.sub('', text)
    return _BACKSPACE_RE.sub('', text)


def normalize_whitespace(text: str) -> str:
    """Collapse every run of whitespace into a single space."""
    return _WHITESPACE_RE.sub(' ', text)


def match(want: str, got: str) -> bool:
    """Return True if captured output `got` satisfies expected output `want`.

    Args:
        want: Expected text, possibly containing `***` wildcards.
        got: Captured transcript.

    Returns:
        bool: Whether the whole of `got` matches `want`. Empty `got` matches an
            empty `want` or a bare wildcard.
    """
    got = strip_console_markup(got).strip()
    want = want.strip()

    if not got:
        return not want or want == WILDCARD

    want_re = _ESCAPED_WILDCARD_RE.sub('.*', re.escape(want))
    return re.fullmatch(want_re, got, re.S) is not None
