# #!/usr/bin/env python

"""setup.py script for py_mdoctest library"""

from setuptools import setup, find_packages

setup(
    name='py_mdoctest',
    version='0.4.0',
    description='Doctests for >> prompt examples in Python, Octave and Texinfo documentation',
    license='BSD-3-Clause',
    packages=find_packages(include=['py_mdoctest', 'py_mdoctest.*']),
    python_requires='>=3.9',
    install_requires=[
        'typing_extensions>=4.7.0',
        'Deprecated>=1.2',
        'tomli>=2.0; python_version<"3.11"',
    ],
    extras_require={
        'test': ['pytest>=7'],
    },
    entry_points={
        'console_scripts': [
            'pymdoctest = py_mdoctest.__main__:main',
        ],
        'py_mdoctest': [
            'python_executor = py_mdoctest.executors:PythonExecutor',
            'octave_executor = py_mdoctest.executors:OctaveExecutor',
        ],
    },
)
