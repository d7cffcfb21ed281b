"""The entry point."""

import logging
import re
import sys
from pathlib import Path
from typing import Dict, Iterator, Sequence, Tuple

from tsdoc.config import TSDocConfigFile
from tsdoc.configuration import ConfigurationError, TSDocConfiguration, get_default_configuration
from tsdoc.dump import dump_node
from tsdoc.messages import ParserMessage
from tsdoc.options import Options
from tsdoc.parser import TSDocParser
from tsdoc.textrange import TextRange
from tsdoc.utils import error

logger = logging.getLogger(__name__)

# "/**/" is an empty regular comment, not a doc comment.
_DOC_COMMENT_RE = re.compile(r'/\*\*(?!/).*?\*/', re.DOTALL)


def extract_doc_comments(text: str) -> Iterator[Tuple[int, str]]:
    """
    Find the C{/** ... */} comments of a source file.

    @return: The offset and the text of each comment, delimiters included.
    """
    for match in _DOC_COMMENT_RE.finditer(text):
        yield match.start(), match.group()


def setup_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR
    logging.basicConfig(format='%(levelname)s: %(message)s', level=level)


class ConfigurationLoader:
    """
    Load and cache the configuration that applies to each source file.
    """

    def __init__(self, options: Options):
        self.options = options
        self.had_errors = False
        self._cache: Dict[Path, TSDocConfiguration] = {}

    def _find_config_path(self, source: Path) -> Path:
        explicit = self.options.tsdocconfig
        if explicit is None:
            return TSDocConfigFile.find_config_path_for_folder(source.parent)
        if explicit.is_dir():
            return TSDocConfigFile.find_config_path_for_folder(explicit)
        return explicit

    def get_configuration(self, source: Path) -> TSDocConfiguration:
        config_path = self._find_config_path(source)
        configuration = self._cache.get(config_path)
        if configuration is None:
            configuration = self._load(config_path)
            self._cache[config_path] = configuration
        return configuration

    def _load(self, config_path: Path) -> TSDocConfiguration:
        config_file = TSDocConfigFile.load_file(config_path)

        if config_file.file_not_found and self.options.tsdocconfig is None:
            logger.info('No tsdoc.json found for %s, using the standard tags', config_path.parent)
            return get_default_configuration()

        if config_file.has_errors:
            self.had_errors = True
            print(config_file.get_error_summary(), file=sys.stderr)

        try:
            configuration = config_file.to_configuration()
        except ConfigurationError as e:
            self.had_errors = True
            print(f'{config_file.file_path}: {e}', file=sys.stderr)
            return get_default_configuration()

        logger.info('Using the TSDoc configuration %s', config_file.file_path)
        return configuration


def format_message(path: Path, file_range: TextRange, offset: int, message: ParserMessage) -> str:
    """
    Format a message as C{path:line:column: message-id: text}, the location
    being relative to the start of the source file.
    """
    text_range = message.text_range
    position = offset + (text_range.pos if text_range.buffer else 0)
    location = file_range.get_location(position)
    return f'{path}:{location.line}:{location.column}: {message.message_id}: {message.unformatted_text}'


def check_file(path: Path, parser: TSDocParser, dump: bool = False) -> int:
    """
    Parse the doc comments of a file and print the messages.

    @return: The number of messages.
    """
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        error(f"{path}: {e}")

    file_range = TextRange.from_string(text)
    count = 0
    for offset, comment in extract_doc_comments(text):
        parser_context = parser.parse_string(comment)
        if dump:
            location = file_range.get_location(offset)
            print(f'{path}:{location.line}:{location.column}:')
            print(dump_node(parser_context.doc_comment))
        for message in parser_context.log:
            print(format_message(path, file_range, offset, message))
            count += 1
    return count


def main(args: Sequence[str] = sys.argv[1:]) -> int:
    """
    This is the console_scripts entry point for tsdoc CLI.

    @param args: Command line arguments to run the CLI.
    """
    options = Options.from_args(args)
    setup_logging(options.verbosity)

    # Check that we're actually going to accomplish something here
    if not options.sourcepath:
        error("No source paths given.")

    loader = ConfigurationLoader(options)
    message_count = 0
    for path in options.sourcepath:
        parser = TSDocParser(loader.get_configuration(path))
        message_count += check_file(path, parser, dump=options.dump)

    logger.info('%d message(s) in %d file(s)', message_count, len(options.sourcepath))

    exitcode = 0
    if loader.had_errors:
        exitcode = 2
    if message_count and options.warnings_as_errors:
        exitcode = 2
    return exitcode


if __name__ == '__main__':
    sys.exit(main())
