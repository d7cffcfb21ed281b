"""
Reading the C{[tool.tsdoc]} table of C{pyproject.toml} as C{tsdoc} options.
"""
import argparse
import warnings
from typing import Any, Dict, List, Optional, TextIO

from configargparse import ArgumentParser, ConfigFileParser, ConfigFileParserException
import toml


def get_toml_table(data: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    """
    @return: The table named C{name}, like C{"tool.tsdoc"}, or C{None}.
    """
    table: Any = data
    for key in name.split('.'):
        if not isinstance(table, dict):
            return None
        table = table.get(key.strip().strip('"\''))
    return table if isinstance(table, dict) else None


class TomlConfigParser(ConfigFileParser):
    """
    Returns the options of the first table found among C{sections}.
    """

    def __init__(self, sections: List[str]) -> None:
        super().__init__()
        self.sections = sections

    def __call__(self) -> ConfigFileParser:
        return self

    def parse(self, stream: TextIO) -> Dict[str, Any]:
        try:
            config = toml.load(stream)
        except toml.TomlDecodeError as e:
            raise ConfigFileParserException(f"Couldn't parse TOML file: {e}") from e

        result: Dict[str, Any] = {}
        for section in self.sections:
            data = get_toml_table(config, section)
            if data:
                # Values go back through argparse, which expects strings or lists of strings.
                for key, value in data.items():
                    if isinstance(value, list):
                        result[key] = [str(i) for i in value]
                    elif isinstance(value, bool):
                        result[key] = 'true' if value else 'false'
                    elif value is not None:
                        result[key] = str(value)
                break
        return result

    def get_syntax_description(self) -> str:
        return ("Config file syntax is Tom's Obvious, Minimal Language. "
                "See https://toml.io/ for details.")


class ValidatorParser(ConfigFileParser):
    """
    Drops, with a warning, the config keys that match no option.
    """

    def __init__(self, config_parser: ConfigFileParser, argument_parser: ArgumentParser) -> None:
        super().__init__()
        self.config_parser = config_parser
        self.argument_parser = argument_parser

    def get_syntax_description(self) -> str:
        return self.config_parser.get_syntax_description()  # type:ignore[no-any-return]

    def parse(self, stream: TextIO) -> Dict[str, Any]:
        data: Dict[str, Any] = self.config_parser.parse(stream)

        known_config_keys: Dict[str, argparse.Action] = {
            config_key: action for action in self.argument_parser._actions
            for config_key in self.argument_parser.get_possible_config_keys(action)}

        result = {}
        for key, value in data.items():
            if key in known_config_keys:
                result[key] = value
            else:
                warnings.warn(f"No such config option: {key!r}")
        return result
