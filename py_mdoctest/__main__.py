import argparse
import logging
import sys
from dataclasses import asdict
from importlib import metadata

from py_mdoctest import logger
from py_mdoctest.config import DIALECTS, basic_config, create_doctest_config
from py_mdoctest.exceptions import DoctestError
from py_mdoctest.report import doctest

version = metadata.metadata("py_mdoctest")['Version']


def add_run_arguments(parser):
    run = parser.add_argument_group('Run', 'Doctest run parameters')
    run.add_argument("-e", "--executor", action="store",
                     help="Executor entry point name or 'module:Class' (default from config)")
    run.add_argument("--dialect", action="store", choices=DIALECTS,
                     help="Documentation dialect (default from config)")
    run.add_argument("-c", "--config", action="store", help="Path of a .mdoctest.toml file")


def add_output_arguments(parser):
    output = parser.add_argument_group('Output', 'Report parameters')
    output.add_argument("-o", "--output", action="store", help="Write the report to a file")
    output.add_argument("--no-color", action="store_true", help="Disable terminal colors")
    output.add_argument("--no-banner", action="store_true", help="Do not print the version banner")


def get_arg_parser():
    parser = argparse.ArgumentParser(
        prog=f'pymdoctest v{version}',
        description="Run the examples embedded in documentation and check their output"
    )
    parser.add_argument('targets', help="Dotted Python names or documentation files to test",
                        nargs='+', type=str)
    parser.add_argument("-v", "--version", action='version',
                        version=f'pymdoctest v{version}', help="Show version")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug messages")

    add_run_arguments(parser)
    add_output_arguments(parser)
    return parser


def main(args=None) -> int:
    parser = get_arg_parser()
    argv = parser.parse_args(args)

    if argv.debug:
        logger.setLevel(logging.DEBUG)
        logger.info("Debug messages enabled")

    try:
        settings = asdict(basic_config(argv.config))
        if argv.dialect:
            settings['dialect'] = argv.dialect
        if argv.no_color:
            settings['color'] = 'never'
        if argv.no_banner:
            settings['banner'] = False
        config = create_doctest_config(settings)

        if argv.output:
            with open(argv.output, 'w', encoding='utf-8') as stream:
                success = doctest(argv.targets, stream, config=config, executor=argv.executor)
        else:
            success = doctest(argv.targets, config=config, executor=argv.executor)
    except (DoctestError, ValueError, TypeError) as exc:
        logger.error(exc)
        return 2
    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
