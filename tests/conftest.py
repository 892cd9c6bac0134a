import logging
import shutil

import pytest

from py_mdoctest import basicConfig
from py_mdoctest.interface import _ExecutorLoader
from py_mdoctest.logger import logger

logger.setLevel(logging.DEBUG)

HAS_OCTAVE = shutil.which('octave') is not None


def pytest_addoption(parser):
    parser.addoption(
        "--executor",
        action="store",
        default=None,  # be sure to use the default value from _ExecutorLoader
        help="Specify the executor entry point name",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "octave: needs the GNU Octave interpreter on PATH")


def pytest_collection_modifyitems(config, items):
    if HAS_OCTAVE:
        return
    skip_octave = pytest.mark.skip(reason="octave not found on PATH")
    for item in items:
        if "octave" in item.keywords:
            item.add_marker(skip_octave)


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from the default configuration."""
    config = basicConfig(settings=None, filename=None, suppress_warnings=True)
    yield config
    basicConfig(suppress_warnings=True)


@pytest.fixture(scope="class")
def loaded_executor_class(request):
    executor_name = request.config.getoption("--executor", None)
    logger.info(f"Attempting to load executor: '{executor_name}'")
    try:
        executor = _ExecutorLoader.load(executor_name)
        print(f"Successfully loaded executor: {executor}")
        yield executor
    except Exception as e:
        pytest.exit(f"Cannot start tests:\nFailed to load executor via _ExecutorLoader: {e}", returncode=1)


@pytest.fixture
def python_executor():
    from py_mdoctest.executors import PythonExecutor
    return PythonExecutor()
