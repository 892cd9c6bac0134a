"""Report driver: run doctests for many targets and print a summary.

For every target a progress line is printed, padded with dots::

    py_mdoctest.compare.match ................................ PASS    3/3
    mymodule.broken .......................................... FAIL    1/2

`FAIL` reports the number of failed examples and is followed by the source,
the expected output and the captured output of each failing example.
Targets whose documentation could not be extracted are reported as
`EXTRACTION ERROR` with the reason, and targets without examples as
`NO TESTS`. The summary ends with a line
such as ``3/4 targets passed, 1 without tests, 1 with extraction errors.``

A target without examples counts as passed and as without tests.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO

from typing_extensions import Iterable, List, Optional, Tuple, Union

from py_mdoctest import __version__
from py_mdoctest.collector import Target, collect_many
from py_mdoctest.config import DoctestConfig, get_config
from py_mdoctest.interface import DocTester, ExecutorProtocolEntry
from py_mdoctest.logger import logger
from py_mdoctest.runner import TargetResult

__all__ = ('Summary', 'Colors', 'doctest', 'run_targets', 'get_colors')


@dataclass
class Summary:
    """Counters accumulated over one invocation."""

    num_targets: int = 0
    num_targets_passed: int = 0
    num_targets_without_tests: int = 0
    num_targets_with_extraction_errors: int = 0
    num_tests: int = 0
    num_tests_passed: int = 0

    def add(self, result: TargetResult) -> None:
        self.num_targets += 1
        if result.error is not None:
            self.num_targets_with_extraction_errors += 1
            return
        self.num_tests += result.num_tests
        self.num_tests_passed += result.num_tests_passed
        if result.num_tests_passed == result.num_tests:
            self.num_targets_passed += 1
        if result.num_tests == 0:
            self.num_targets_without_tests += 1

    @property
    def success(self) -> bool:
        return self.num_targets_passed == self.num_targets


@dataclass(frozen=True)
class Colors:
    ok: str = ''
    err: str = ''
    reset: str = ''


ANSI_COLORS = Colors(ok='\x1b[32m', err='\x1b[31m', reset='\x1b[0m')
NO_COLORS = Colors()


def get_colors(stream: TextIO, mode: str = 'auto') -> Colors:
    """Return terminal color codes for `stream`."""
    if mode == 'always':
        return ANSI_COLORS
    if mode == 'auto' and getattr(stream, 'isatty', lambda: False)():
        return ANSI_COLORS
    return NO_COLORS


class _Printer:
    def __init__(self, stream: TextIO, colors: Colors, dots_width: int):
        self.stream = stream
        self.c = colors
        self.dots_width = dots_width

    def write(self, text: str) -> None:
        self.stream.write(text)

    def banner(self) -> None:
        self.write(f"py_mdoctest v{__version__}: this is Free Software without warranty, see source.\n\n")

    def target(self, result: TargetResult) -> None:
        name = result.target.name
        self.write(f"{name} {'.' * max(self.dots_width - len(name), 0)} ")
        c = self.c
        if result.error is not None:
            self.write(f"{c.err}EXTRACTION ERROR{c.reset}\n\n")
            self.write(f"    {result.error}\n\n")
        elif result.num_tests == 0:
            self.write("NO TESTS\n")
        elif result.num_tests_passed == result.num_tests:
            self.write(f"{c.ok}PASS {result.num_tests_passed:4d}/{result.num_tests:<4d}{c.reset}\n")
        else:
            num_failed = result.num_tests - result.num_tests_passed
            self.write(f"{c.err}FAIL {num_failed:4d}/{result.num_tests:<4d}{c.reset}\n\n")
            for failure in result.failures:
                self.write(f"   >> {failure.source}\n\n")
                self.write(f"      expected: {failure.want}\n")
                self.write(f"      got     : {c.err}{failure.got}{c.reset}\n")
                self.write("\n")

    def summary(self, summary: Summary) -> None:
        c = self.c
        self.write("\nSummary:\n\n")
        if summary.num_tests_passed == summary.num_tests:
            self.write(f"   {c.ok}PASS {summary.num_tests_passed:4d}/{summary.num_tests:<4d}{c.reset}\n\n")
        else:
            num_failed = summary.num_tests - summary.num_tests_passed
            self.write(f"   {c.err}FAIL {num_failed:4d}/{summary.num_tests:<4d}{c.reset}\n\n")

        self.write(f"{summary.num_targets_passed}/{summary.num_targets} targets passed, "
                   f"{summary.num_targets_without_tests} without tests")
        if summary.num_targets_with_extraction_errors > 0:
            self.write(f", {c.err}{summary.num_targets_with_extraction_errors} "
                       f"with extraction errors{c.reset}")
        self.write(".\n\n")


def run_targets(targets: Iterable[Target], tester: DocTester,
                stream: Optional[TextIO] = None) -> Summary:
    """Run and report each target in order; return the accumulated Summary."""
    if stream is None:
        stream = sys.stdout
    config = tester.config or get_config()
    printer = _Printer(stream, get_colors(stream, config.color), config.dots_width)
    summary = Summary()
    for target in targets:
        result = tester.run_target(target)
        if result.error is not None:
            logger.debug(f"{target.name}: extraction error: {result.error}")
        summary.add(result)
        printer.target(result)
    printer.summary(summary)
    return summary


def doctest(what: Union[str, List[str]],
            stream: Optional[TextIO] = None,
            *,
            config: Optional[DoctestConfig] = None,
            executor: ExecutorProtocolEntry = None,
            return_summary: bool = False) -> Union[bool, Tuple[int, int, Summary]]:
    """Run the doctests of one or more targets and print a report.

    Args:
        what: Identifier or list of identifiers: dotted Python names or file paths.
        stream: Output stream for the report. Defaults to sys.stdout.
        config: Configuration, defaults to the active one.
        executor: Executor entry point name or class, overrides `config.executor`.
        return_summary: Return counters instead of the success flag.

    Returns:
        True if all targets passed, or `(num_tests_passed, num_tests, summary)`
        when `return_summary` is True.

    Raises:
        CollectionError: If an identifier cannot be resolved.
        ExecutorUnavailableError: If the executor cannot run in this environment.
    """
    if isinstance(what, str):
        what = [what]
    if stream is None:
        stream = sys.stdout
    if config is None:
        config = get_config()

    tester = DocTester(config=config, executor=executor)
    targets = collect_many(what)

    if config.banner:
        _Printer(stream, NO_COLORS, config.dots_width).banner()
    summary = run_targets(targets, tester, stream)

    if return_summary:
        return summary.num_tests_passed, summary.num_tests, summary
    return summary.success
