"""Code executors for doctest examples.

All executors implement the ExecutorProtocol interface and are registered
under the `py_mdoctest` entry point group.

Available Executors:
    - PythonExecutor (python_executor): In-process Python, default.
    - OctaveExecutor (octave_executor): GNU Octave subprocess, requires `octave` on PATH.

Examples:
    ```python
    from py_mdoctest import DocTester
    tester = DocTester(executor="octave_executor")  # By name
    tester = DocTester(executor=PythonExecutor)     # By class
    ```

See Also:
    - py_mdoctest.generics.executor.ExecutorProtocol: Base protocol for executors
    - py_mdoctest.interface.DocTester: Main interface using executors
"""

from .octave_executor import *
from .python_executor import *

__all__ = (
    'OctaveExecutor',
    'OctaveSession',
    'PythonExecutor',
    'PythonSession',
    'build_command',
    'octave_string',
)
