"""
The command-line parsing.
"""
from argparse import Namespace
from pathlib import Path
from typing import List, Optional, Sequence

from configargparse import ArgumentParser
import attr

from tsdoc import __version__
from tsdoc._configparser import TomlConfigParser, ValidatorParser
from tsdoc.utils import error

DEFAULT_CONFIG_FILES = ['./pyproject.toml']
CONFIG_SECTIONS = ['tool.tsdoc']

__all__ = ("Options", )

# CONFIGURATION PARSING

TSDocConfigParser = TomlConfigParser(CONFIG_SECTIONS)

# ARGUMENTS PARSING

def get_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog='tsdoc',
        description="Check the TSDoc comments of source files.",
        usage="tsdoc [options] PATH...",
        default_config_files=DEFAULT_CONFIG_FILES,
        config_file_parser_class=TSDocConfigParser)

    # Warn about unknown keys of the config file.
    parser._config_file_parser = ValidatorParser(parser._config_file_parser, parser)

    parser.add_argument(
        '-c', '--config', is_config_file=True,
        help=("Load config from this file (any command line "
              "options override settings from the file)."), metavar="PATH",)
    parser.add_argument(
        '--tsdoc-config', dest='tsdocconfig', metavar='PATH', default=None,
        help=("A tsdoc.json file, or a folder where to look for one. "
              "By default, the tsdoc.json that applies to each input file is used."))
    parser.add_argument(
        '--dump', dest='dump', action='store_true', default=False,
        help=("Print the tree of each parsed comment."))
    parser.add_argument(
        '--warnings-as-errors', '-W', action='store_true',
        dest='warnings_as_errors', default=False,
        help=("Return exit code 2 when a comment produces messages."))
    parser.add_argument(
        '--verbose', '-v', action='count', dest='verbosity',
        default=0,
        help=("Be noisier.  Can be repeated for more noise."))
    parser.add_argument(
        '--quiet', '-q', action='count', dest='quietness',
        default=0,
        help=("Be quieter."))
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        'sourcepath', metavar='PATH',
        help=("Source files to check."),
        nargs="*", default=[],
    )
    return parser

def parse_args(args: Sequence[str]) -> Namespace:
    parser = get_parser()
    options = parser.parse_args(args)
    assert isinstance(options, Namespace)
    options.verbosity -= options.quietness
    return options

# CONVERTERS

def _convert_sourcepath(l: List[str]) -> List[Path]:
    paths = []
    for p in l:
        path = Path(p)
        if not path.is_file():
            error(f"SOURCEPATH: File not found: {p!r}")
        paths.append(path)
    return paths

def _convert_tsdocconfig(s: Optional[str]) -> Optional[Path]:
    if not s:
        return None
    path = Path(s)
    if not path.exists():
        error(f"--tsdoc-config: File not found: {s!r}")
    return path

# TYPED OPTIONS CONTAINER

@attr.s
class Options:
    """
    Container for all possible tsdoc options.
    See C{tsdoc --help} for more informations.
    """

    sourcepath:         List[Path]          = attr.ib(converter=_convert_sourcepath)
    tsdocconfig:        Optional[Path]      = attr.ib(converter=_convert_tsdocconfig)
    dump:               bool                = attr.ib()
    warnings_as_errors: bool                = attr.ib()
    verbosity:          int                 = attr.ib()
    quietness:          int                 = attr.ib()

    # HIGH LEVEL FACTORY METHODS

    @classmethod
    def defaults(cls,) -> 'Options':
        return cls.from_args([])

    @classmethod
    def from_args(cls, args: Sequence[str]) -> 'Options':
        return cls.from_namespace(parse_args(args))

    @classmethod
    def from_namespace(cls, args: Namespace) -> 'Options':
        argsdict = vars(args)
        # remove the config argument
        argsdict.pop('config')
        return cls(**argsdict)
