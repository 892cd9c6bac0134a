"""Configuration of py_mdoctest.

The configuration is kept in a `DoctestConfig` dataclass. It can be created
from a partial `DoctestConfigDict` with `create_doctest_config()`, or loaded
from the `[mdoctest]` table of a `.mdoctest.toml` / `mdoctest.toml` file
found by walking up from the working directory.

Example `.mdoctest.toml`:
    ```toml
    [mdoctest]
    executor = "octave_executor"
    dialect = "auto"
    color = "never"
    ```

Fields:
    executor: Entry point name (or `module:attr` value) of the executor.
    dialect: Documentation dialect, one of "auto", "plain", "texinfo".
    color: Terminal colors, one of "auto", "always", "never".
    dots_width: Column up to which target names are padded with dots.
    banner: Print the version banner before running.
    octave_binary: Name or path of the Octave interpreter used by `octave_executor`.
"""
import os
import sys
from dataclasses import dataclass, asdict

from typing_extensions import Any, Mapping, Optional, TypedDict

from py_mdoctest.logger import logger

if sys.version_info[:2] < (3, 11):
    import tomli as tomllib
else:
    import tomllib

__all__ = (
    'DoctestConfig',
    'DoctestConfigDict',
    'DEFAULT_DOCTEST_CONFIG',
    'DIALECTS',
    'COLOR_MODES',
    'CONFIG_FILENAMES',
    'create_doctest_config',
    'basic_config',
    'get_config',
    'find_config_file',
)

DIALECTS = ('auto', 'plain', 'texinfo')
COLOR_MODES = ('auto', 'always', 'never')
CONFIG_FILENAMES = ('.mdoctest.toml', 'mdoctest.toml')
CONFIG_SECTION = 'mdoctest'


@dataclass
class DoctestConfig:
    """Settings shared by the runner, the executors and the report driver."""

    executor: str = 'python_executor'
    dialect: str = 'auto'
    color: str = 'auto'
    dots_width: int = 55
    banner: bool = True
    octave_binary: str = 'octave'

    def __post_init__(self) -> None:
        if self.dialect not in DIALECTS:
            raise ValueError(f"Unknown dialect {self.dialect!r}, expected one of {DIALECTS}")
        if self.color not in COLOR_MODES:
            raise ValueError(f"Unknown color mode {self.color!r}, expected one of {COLOR_MODES}")
        if self.dots_width < 0:
            raise ValueError("dots_width has to be >= 0")


#: Default configuration instance
DEFAULT_DOCTEST_CONFIG: DoctestConfig = DoctestConfig()


class DoctestConfigDict(TypedDict, total=False):
    """Partial configuration; missing keys fall back to DEFAULT_DOCTEST_CONFIG."""

    executor: str
    dialect: str
    color: str
    dots_width: int
    banner: bool
    octave_binary: str


def create_doctest_config(config: Optional[Mapping[str, Any]] = None) -> DoctestConfig:
    """Create a DoctestConfig from defaults updated with `config`.

    Args:
        config: Partial configuration. Unknown keys raise ValueError.

    Returns:
        DoctestConfig: New configuration instance.
    """
    result = asdict(DEFAULT_DOCTEST_CONFIG)
    if config is not None:
        if unknown := set(config) - set(result):
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        result.update(config)
    return DoctestConfig(**result)


_MDOCTEST_CONFIG: DoctestConfig = create_doctest_config()


def find_config_file(start_dir: Optional[str] = None) -> Optional[str]:
    """Search for .mdoctest.toml or mdoctest.toml from `start_dir` upwards.

    Args:
        start_dir: Directory to start searching from. Defaults to the working directory.

    Returns:
        Absolute path of the first configuration file found, otherwise None.
    """
    current_dir = os.path.abspath(start_dir if start_dir is not None else os.getcwd())
    while True:
        for name in CONFIG_FILENAMES:
            path = os.path.join(current_dir, name)
            if os.path.exists(path):
                return os.path.abspath(path)

        parent_dir = os.path.dirname(current_dir)
        # Reached the root directory
        if parent_dir == current_dir:
            return None
        current_dir = parent_dir


def _load_config(filepath: Optional[str] = None, suppress_warnings: bool = False) -> DoctestConfig:
    if filepath is None:
        filepath = find_config_file()

    if filepath is None:
        logger.debug("No mdoctest config file found, defaults loaded")
        return create_doctest_config()

    logger.debug(f"Found {os.path.basename(filepath)} at {os.path.dirname(filepath)}")
    with open(filepath, "rb") as fp:
        _config = tomllib.load(fp)

    if (section := _config.get(CONFIG_SECTION)) is None:
        if not suppress_warnings:
            logger.warning(f"Config has no `{CONFIG_SECTION}` section")
        return create_doctest_config()
    return create_doctest_config(section)


def basic_config(filename: Optional[str] = None,
                 settings: Optional[Mapping[str, Any]] = None,
                 suppress_warnings: bool = False) -> DoctestConfig:
    """Load the active configuration from a file or a mapping.

    Args:
        filename: Configuration file path. If None, `.mdoctest.toml` is searched for.
        settings: Mapping of configuration values.
        suppress_warnings: If True, suppress warning messages.

    Returns:
        DoctestConfig: The configuration now active.

    Raises:
        ValueError: If both filename and settings are provided.
    """
    global _MDOCTEST_CONFIG
    if filename and settings:
        raise ValueError("Can't use settings and config file at same time")
    if settings:
        _MDOCTEST_CONFIG = create_doctest_config(settings)
    else:
        _MDOCTEST_CONFIG = _load_config(filename, suppress_warnings)
    logger.debug("mdoctest config load success")
    return _MDOCTEST_CONFIG


def get_config() -> DoctestConfig:
    """Return the active configuration."""
    return _MDOCTEST_CONFIG
