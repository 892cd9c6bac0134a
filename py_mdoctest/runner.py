"""Doctest runner: extraction, execution and comparison for one docstring.

The runner extracts the examples of a docstring, opens one evaluation
session, executes the non-skipped examples in order in that session and
compares each transcript with the expected output. Whitespace runs are
collapsed in both texts before comparing, while the reported `want` and
`got` keep their original layout (trimmed).

Errors raised by the example code never reach the runner (executors turn
them into transcript text), and extraction errors are returned as data on
the `TargetResult`.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from deprecated import deprecated
from typing_extensions import Any, Dict, List, NamedTuple, Optional

from py_mdoctest.collector import Target
from py_mdoctest.compare import match, normalize_whitespace
from py_mdoctest.extraction import Example, Extraction, get_extractor
from py_mdoctest.generics.executor import ExecutorProtocol
from py_mdoctest.logger import logger

__all__ = ('ComparisonOutcome', 'TargetResult', 'DocTestRunner',)


class ComparisonOutcome(NamedTuple):
    """Result of one executed example.

    Attributes:
        source: Code of the example.
        want: Expected output, trimmed.
        got: Captured transcript, trimmed.
        passed: Whether `got` matched `want`.
    """

    source: str
    want: str
    got: str
    passed: bool

    @property
    @deprecated(reason="`pass_` mirrors the old result field `pass`, use `passed` instead.")
    def pass_(self) -> bool:
        return self.passed


@dataclass
class TargetResult:
    """Doctest results of one target.

    Attributes:
        target: The target that was run.
        results: One outcome per executed example.
        error: Extraction error reason, None if the examples could be extracted.
    """

    target: Target
    results: List[ComparisonOutcome] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def num_tests(self) -> int:
        return len(self.results)

    @property
    def num_tests_passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def passed(self) -> bool:
        return self.error is None and self.num_tests_passed == self.num_tests

    @property
    def failures(self) -> List[ComparisonOutcome]:
        return [r for r in self.results if not r.passed]


class DocTestRunner:
    """Runs the examples of docstrings with one executor.

    Args:
        executor: Executor instance used to evaluate example code.
        dialect: Documentation dialect, "auto", "plain" or "texinfo".
    """

    def __init__(self, executor: ExecutorProtocol[Any], dialect: str = 'auto') -> None:
        self.executor = executor
        self.dialect = dialect

    def extract(self, docstring: str, dialect: Optional[str] = None) -> Extraction:
        extractor = get_extractor(docstring, dialect or self.dialect)
        return extractor.extract(docstring)

    def run(self, docstring: str, globs: Optional[Dict[str, Any]] = None) -> List[ComparisonOutcome]:
        """Run all examples of a docstring.

        Args:
            docstring: Documentation text.
            globs: Initial bindings of the evaluation session.

        Returns:
            List[ComparisonOutcome]: One outcome per non-skipped example. Empty if
                the docstring has no examples or could not be extracted.
        """
        extraction = self.extract(docstring)
        if extraction.error:
            logger.warning(f"Extraction error: {extraction.error}")
            return []
        return self.run_examples(extraction.examples, globs)

    def run_target(self, target: Target) -> TargetResult:
        """Run the examples of one target; never raises for extraction problems."""
        if target.error is not None:
            return TargetResult(target, error=target.error)

        extraction = self.extract(target.docstring or '', target.dialect)
        logger.debug(f"{target.name}: {len(extraction.examples)} examples, {extraction.outcome.value}")
        if extraction.error:
            return TargetResult(target, error=extraction.error)
        return TargetResult(target, self.run_examples(extraction.examples, target.globs))

    def run_examples(self, examples: List[Example],
                     globs: Optional[Dict[str, Any]] = None) -> List[ComparisonOutcome]:
        """Execute examples in order in one fresh session."""
        to_run = []
        for example in examples:
            if example.skip:
                logger.debug(f"Skipping example: {example.source}")
            else:
                to_run.append(example)
        if not to_run:
            return []

        results = []
        with self.executor.open_session(globs) as session:
            for example in to_run:
                got = self.executor.execute(example.source, session)
                results.append(self.compare(example, got))
        return results

    @staticmethod
    def compare(example: Example, got: str) -> ComparisonOutcome:
        passed = match(normalize_whitespace(example.expected), normalize_whitespace(got))
        return ComparisonOutcome(example.source, example.expected.strip(), got.strip(), passed)
