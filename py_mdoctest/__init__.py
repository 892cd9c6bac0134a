"""Doctests for numeric-computing documentation.

Runs the ``>>`` prompt examples embedded in documentation (Python docstrings,
Octave/MATLAB help comments and Texinfo files), compares what the code prints
with the expected output, and reports pass/fail per example and per target.
"""

import importlib.metadata

__version__ = importlib.metadata.version("py_mdoctest")
__credits__ = ["octave-doctest contributors"]

# Local imports
from .logger import logger, enable_file_logging, disable_file_logging
from .config import (DoctestConfig, DoctestConfigDict, create_doctest_config,
                     basic_config, get_config)

basicConfig = basic_config

basicConfig()


from .collector import Target, collect, collect_many
from .compare import match, normalize_whitespace
from .exceptions import (DoctestError, ExtractionError, CollectionError,
                         ExecutorError, ExecutorUnavailableError, SessionClosedError)
from .executors import PythonExecutor, OctaveExecutor
from .extraction import Example, Extraction, Outcome, PromptExtractor, extract_examples, get_extractor
from .generics import ExecutorProtocol, SessionProtocol
from .interface import DocTester
from .report import Summary, doctest, run_targets
from .runner import ComparisonOutcome, DocTestRunner, TargetResult
from .texinfo import TexinfoExtractor

# DRY: build __all__ from global symbols
_SKIP_GLOBALS = {
    # Skip Python builtins
    "__name__", "__doc__", "__package__", "__loader__", "__spec__",
    "__file__", "__cached__", "__builtins__",
    # Skip imported modules
    "importlib",
}
__all__ = [
    name for name in globals()
    if not name.startswith("_") and name not in _SKIP_GLOBALS
]
