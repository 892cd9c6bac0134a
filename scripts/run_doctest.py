"""Run py_mdoctest over the py_mdoctest package itself.

This helper discovers all non-package modules under `py_mdoctest` and runs
the ``>>`` examples of their docstrings with the default Python executor.
Package `__init__.py` files are skipped.

Usage (run from repo root):
        - python scripts/run_doctest.py
        - python -m scripts.run_doctest

Behavior:
        - Imports each module via importlib; on import error, prints
            `IMPORT-ERROR <module> <exception>` and continues.
        - Prints the py_mdoctest report for all modules and a final summary line
            `TOTAL <failures> <attempted>`.
        - Exits with code 1 if any doctests fail, else exits with 0.
"""

import importlib, pkgutil, pathlib

from py_mdoctest import doctest


def main() -> int:
    root = pathlib.Path(__file__).resolve().parents[1] / 'py_mdoctest'
    mods = [m.name for m in pkgutil.walk_packages([str(root)], prefix='py_mdoctest.') if not m.ispkg]
    names = []
    for name in sorted(mods):
        if name.endswith('__init__') or name.endswith('__main__'):
            continue
        try:
            importlib.import_module(name)
        except Exception as e:
            print('IMPORT-ERROR', name, e)
            continue
        names.append(name)
    passed, tried, _ = doctest(names, return_summary=True)
    print('TOTAL', tried - passed, tried)
    return int(passed < tried)


if __name__ == '__main__':
    raise SystemExit(main())
