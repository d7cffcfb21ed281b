"""TSDoc, a parser for the standardized documentation comments of TypeScript code.

The main entry points are L{tsdoc.parser.TSDocParser} and L{tsdoc.config.TSDocConfigFile}.
"""
import importlib.metadata as importlib_metadata


__version__ = importlib_metadata.version('tsdoc')

__all__ = ["__version__"]
