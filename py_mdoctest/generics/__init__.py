"""Generic type definitions for py_mdoctest executors.

Protocol Definitions:
    ExecutorProtocol: Interface of example code executors
    SessionProtocol: Interface of an evaluation context owned by the runner

Type Variables:
    ConfigT: Generic configuration type for executor parameters

See Also:
    py_mdoctest.executors: Concrete executor implementations
    py_mdoctest.interface.DocTester: Main interface using executors
"""

# Local imports
from .executor import ConfigT, ERROR_MARKER, ExecutorProtocol, SessionProtocol

__all__ = (
    'ConfigT',
    'ERROR_MARKER',
    'ExecutorProtocol',
    'SessionProtocol',
)
