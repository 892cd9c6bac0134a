"""Collection of doctest targets.

A target is a documented unit with a docstring: a module, a class, a
function or method, or a documentation file. `collect()` turns one
identifier into a list of targets:

- Existing files are read directly. Texinfo files (``.texi``, ``.texinfo``,
  ``.txi``) become one Texinfo target, Octave/MATLAB ``.m`` files contribute
  their help text (the first comment block), ``.py`` files are loaded and
  collected as a module, and other files are used as plain text.
- Anything else is resolved as a dotted Python name. Modules yield their own
  docstring plus the public functions and classes defined in them, classes
  yield their docstring plus their public methods and properties.

Python targets carry a copy of their module's globals, so examples can use
the module's names without importing them.
"""
import importlib
import importlib.util
import inspect
import os
import re
import sys
import types
import uuid
from dataclasses import dataclass, field

from typing_extensions import Any, Dict, List, Optional

from py_mdoctest.exceptions import CollectionError
from py_mdoctest.logger import logger

__all__ = ('Target', 'collect', 'collect_many', 'm_file_help', 'TEXINFO_SUFFIXES')

TEXINFO_SUFFIXES = ('.texi', '.texinfo', '.txi')

_COMMENT_RE = re.compile(r'^\s*[%#]')
_COMMENT_PREFIX_RE = re.compile(r'^\s*[%#]+ ?')


@dataclass
class Target:
    """A documented unit to run doctests for.

    Attributes:
        name: Display name.
        docstring: Documentation text, None when it could not be retrieved.
        error: Reason the documentation could not be retrieved, otherwise None.
        dialect: Dialect to extract with, None to use the configured one.
        globs: Initial bindings of the evaluation session.
    """

    name: str
    docstring: Optional[str] = None
    error: Optional[str] = None
    dialect: Optional[str] = None
    globs: Optional[Dict[str, Any]] = field(default=None, repr=False, compare=False)


def _docstring(obj: Any) -> str:
    doc = getattr(obj, '__doc__', None)
    return inspect.cleandoc(doc) if isinstance(doc, str) else ''


def _module_globals(obj: Any) -> Optional[Dict[str, Any]]:
    module = obj if inspect.ismodule(obj) else sys.modules.get(getattr(obj, '__module__', None) or '')
    return dict(vars(module)) if module is not None else None


def _is_public(name: str) -> bool:
    return not name.startswith('_')


def _collect_class(cls: type, name: str) -> List[Target]:
    globs = _module_globals(cls)
    targets = [Target(name, _docstring(cls), globs=globs)]
    for attr, value in vars(cls).items():
        if not _is_public(attr):
            continue
        if isinstance(value, (staticmethod, classmethod)):
            value = value.__func__
        if inspect.isfunction(value) or isinstance(value, property):
            targets.append(Target(f"{name}.{attr}", _docstring(value), globs=globs))
    return targets


def _collect_module(module: types.ModuleType, name: str) -> List[Target]:
    globs = _module_globals(module)
    targets = [Target(name, _docstring(module), globs=globs)]
    for attr, value in vars(module).items():
        if not _is_public(attr) or getattr(value, '__module__', None) != module.__name__:
            continue
        if inspect.isclass(value):
            targets.extend(_collect_class(value, f"{name}.{attr}"))
        elif inspect.isfunction(value):
            targets.append(Target(f"{name}.{attr}", _docstring(value), globs=globs))
    return targets


def _collect_object(obj: Any, name: str) -> List[Target]:
    if inspect.ismodule(obj):
        return _collect_module(obj, name)
    if inspect.isclass(obj):
        return _collect_class(obj, name)
    return [Target(name, _docstring(obj), globs=_module_globals(obj))]


def _resolve(identifier: str) -> Any:
    parts = identifier.split('.')
    for i in range(len(parts), 0, -1):
        module_name = '.'.join(parts[:i])
        try:
            obj = importlib.import_module(module_name)
        except ImportError as exc:
            logger.debug(f"Cannot import {module_name}: {exc}")
            continue
        for attr in parts[i:]:
            try:
                obj = getattr(obj, attr)
            except AttributeError:
                raise CollectionError(identifier, f"'{module_name}' has no attribute path '{attr}'")
        return obj
    raise CollectionError(identifier, "no such file, module or object")


def m_file_help(text: str) -> str:
    """Return the help text of an Octave/MATLAB ``.m`` file.

    The help text is the first block of consecutive comment lines, skipping
    blank lines, ``function`` lines and a leading copyright block. Comment
    markers and one following space are removed.
    """
    def is_copyright(block: List[str]) -> bool:
        return block[0].strip().startswith('Copyright')

    blocks: List[List[str]] = []
    current: List[str] = []
    for line in text.splitlines():
        if _COMMENT_RE.match(line):
            current.append(_COMMENT_PREFIX_RE.sub('', line))
            continue
        if current:
            blocks.append(current)
            current = []
        if blocks and not is_copyright(blocks[-1]):
            break
        # Code after a copyright block, the file has no help text
        if blocks and line.strip() and not line.lstrip().startswith('function'):
            break
    if current:
        blocks.append(current)

    for block in blocks:
        if not is_copyright(block):
            return '\n'.join(block)
    return ''


def _load_python_file(path: str) -> types.ModuleType:
    # Private name, a file called json.py must not replace the json package
    module_name = f"_mdoctest_file_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise CollectionError(path, "cannot load Python file")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        del sys.modules[module_name]
        raise CollectionError(path, f"import failed: {exc}") from exc
    return module


def _collect_file(path: str) -> List[Target]:
    suffix = os.path.splitext(path)[1].lower()
    if suffix == '.py':
        module = _load_python_file(path)
        return _collect_module(module, os.path.splitext(os.path.basename(path))[0])

    try:
        with open(path, encoding='utf-8') as fp:
            text = fp.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.error(f"Cannot read {path}: {exc}")
        return [Target(path, error=f"cannot read file: {exc}")]

    if suffix in TEXINFO_SUFFIXES:
        return [Target(path, text, dialect='texinfo')]
    if suffix == '.m':
        return [Target(os.path.splitext(os.path.basename(path))[0], m_file_help(text))]
    return [Target(path, text)]


def collect(identifier: str) -> List[Target]:
    """Collect the doctest targets named by `identifier`.

    Args:
        identifier: File path or dotted Python name.

    Returns:
        List[Target]: Targets in definition order.

    Raises:
        CollectionError: If `identifier` is neither a file nor an importable name.
    """
    if os.path.isfile(identifier):
        targets = _collect_file(identifier)
    else:
        targets = _collect_object(_resolve(identifier), identifier)
    logger.debug(f"Collected {len(targets)} targets from {identifier}")
    return targets


def collect_many(identifiers: List[str]) -> List[Target]:
    """Collect targets of several identifiers, keeping their order."""
    targets: List[Target] = []
    for identifier in identifiers:
        targets.extend(collect(identifier))
    return targets
