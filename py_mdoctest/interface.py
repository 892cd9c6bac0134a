"""Doctest interface and executor loading system.

This module provides the `DocTester` class, the main entry point for running
doctests programmatically. Executors are plugins loaded through Python entry
points of the `py_mdoctest` group, so third-party packages can add support
for other interpreters. The module relies on the ExecutorProtocol to ensure
that executors offer the necessary methods.

Key Classes:
    - DocTester: Doctest runner facade with pluggable executor support
    - _ExecutorLoader: Internal utility for discovering and loading executor plugins
"""
from dataclasses import dataclass, field
from importlib.metadata import entry_points, EntryPoint
from typing import Any

from typing_extensions import Dict, Generator, List, Optional, Type, Union

from py_mdoctest.collector import Target, collect
from py_mdoctest.config import DoctestConfig, get_config
from py_mdoctest.executors import PythonExecutor
from py_mdoctest.generics.executor import ExecutorProtocol
from py_mdoctest.logger import logger
from py_mdoctest.runner import ComparisonOutcome, DocTestRunner, TargetResult

DEFAULT_ENTRY_SUFFIX = '_executor'
DEFAULT_ENTRY_GROUP = 'py_mdoctest'
DEFAULT_ENTRY: Type[ExecutorProtocol] = PythonExecutor

ExecutorProtocolType = Type[ExecutorProtocol[Any]]
ExecutorProtocolEntry = Union[str, ExecutorProtocolType, None]


@dataclass
class _ExecutorLoader:
    _entry_point_group = DEFAULT_ENTRY_GROUP
    _entry_point_suffix = DEFAULT_ENTRY_SUFFIX

    @classmethod
    def _get_entries_by_group(cls) -> set:
        all_entry_points = entry_points()
        if hasattr(all_entry_points, 'select'):  # for importlib >= 5
            doctest_entry_points = all_entry_points.select(group=cls._entry_point_group)
        elif hasattr(all_entry_points, 'get'):  # for importlib < 5
            doctest_entry_points = all_entry_points.get(cls._entry_point_group, [])  # type: ignore[arg-type]
        else:
            raise RuntimeError('Entry point not supported')
        return set(doctest_entry_points)

    @classmethod
    def iter_executors(cls) -> Generator[EntryPoint, None, None]:
        """Iterate over all available executors in the entry points."""
        for ep in cls._get_entries_by_group():
            if ep.name.endswith(cls._entry_point_suffix):
                yield ep

    @classmethod
    def _load_from_entry(cls, ep: EntryPoint) -> Optional[ExecutorProtocolType]:
        try:
            handle: ExecutorProtocolType = ep.load()
            if not isinstance(handle, ExecutorProtocol):
                raise TypeError(f"Unsupported executor {ep.value} does not implement ExecutorProtocol")
            logger.debug(f"Loaded executor from: {ep.value} (Class: {handle})")
            return handle
        except ImportError as e:
            logger.error(f"Error loading executor from {ep.value}: {e}")
        except AttributeError as e:
            logger.error(f"Error loading attribute from {ep.value}: {e}")
        except Exception as e:
            logger.exception(f"An unexpected error occurred loading {ep.value}: {e}")
        return None

    @classmethod
    def load(cls, entry_point: ExecutorProtocolEntry = DEFAULT_ENTRY) -> ExecutorProtocolType:
        if entry_point is None:
            entry_point = DEFAULT_ENTRY
        if isinstance(entry_point, type) and isinstance(entry_point, ExecutorProtocol):
            return entry_point
        if isinstance(entry_point, str):
            for ep in cls.iter_executors():
                if ep.name == entry_point:
                    if handle := cls._load_from_entry(ep):
                        return handle

            # Not registered, try it as a `module:attr` value
            ep = EntryPoint(entry_point, entry_point, cls._entry_point_group)
            if handle := cls._load_from_entry(ep):
                return handle
            raise ValueError(f"No executor entry point found for '{entry_point}'")
        raise TypeError("Invalid entry_point type, expected 'str' or 'ExecutorProtocol'")


@dataclass
class DocTester:
    """Runs doctests of docstrings, targets or identifiers with a pluggable executor.

    Examples:
        ```python
        from py_mdoctest import DocTester

        tester = DocTester()
        results = tester.run('>> 1 + 3\\n4\\n')
        results[0].passed  # True
        ```
    """

    config: Optional[DoctestConfig] = field(default=None)
    executor: ExecutorProtocolEntry = field(default=None)
    _executor_instance: ExecutorProtocol[Any] = field(init=False, repr=False, compare=False)
    _runner: DocTestRunner = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = get_config()
        entry = self.executor if self.executor is not None else self.config.executor
        self._executor_instance = _ExecutorLoader.load(entry)(self.config)
        self._runner = DocTestRunner(self._executor_instance, self.config.dialect)

    @property
    def executor_instance(self) -> ExecutorProtocol[Any]:
        return self._executor_instance

    def run(self, docstring: str, globs: Optional[Dict[str, Any]] = None) -> List[ComparisonOutcome]:
        """Run the examples of one docstring."""
        return self._runner.run(docstring, globs)

    def run_target(self, target: Target) -> TargetResult:
        """Run the examples of one target."""
        return self._runner.run_target(target)

    def run_identifier(self, identifier: str) -> List[TargetResult]:
        """Collect the targets of `identifier` and run each of them."""
        return [self.run_target(target) for target in collect(identifier)]

    @staticmethod
    def iter_executors() -> Generator[EntryPoint, None, None]:
        """Iterate all available executors in the entry points."""
        yield from _ExecutorLoader.iter_executors()


__all__ = ('DocTester', '_ExecutorLoader',)
