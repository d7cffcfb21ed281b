"""
Diagnostics reported by the parser and by the config file loader.

Parsing never raises: anything unexpected in the input is recorded as a
L{ParserMessage} in the L{ParserMessageLog} of the parse result.
"""
import enum
from typing import TYPE_CHECKING, Iterator, List, Optional

from tsdoc.textrange import TextRange

if TYPE_CHECKING:
    from tsdoc.nodes import DocNode
    from tsdoc.tokenreader import TokenSequence


class TSDocMessageId(str, enum.Enum):
    """
    Stable identifiers of the messages, tools can filter on them.
    """

    # Config files
    CONFIG_FILE_NOT_FOUND = 'tsdoc-config-file-not-found'
    CONFIG_READ_ERROR = 'tsdoc-config-read-error'
    CONFIG_INVALID_JSON = 'tsdoc-config-invalid-json'
    CONFIG_SCHEMA_ERROR = 'tsdoc-config-schema-error'
    CONFIG_UNSUPPORTED_SCHEMA = 'tsdoc-config-unsupported-schema'
    CONFIG_CYCLIC_EXTENDS = 'tsdoc-config-cyclic-extends'
    CONFIG_UNRESOLVED_EXTENDS = 'tsdoc-config-unresolved-extends'
    CONFIG_DUPLICATE_TAG_NAME = 'tsdoc-config-duplicate-tag-name'
    CONFIG_INVALID_TAG_NAME = 'tsdoc-config-invalid-tag-name'

    # Comment delimiters
    COMMENT_MISSING_OPENING_DELIMITER = 'tsdoc-comment-missing-opening-delimiter'
    COMMENT_MISSING_CLOSING_DELIMITER = 'tsdoc-comment-missing-closing-delimiter'

    # Escaping
    UNNECESSARY_BACKSLASH = 'tsdoc-unnecessary-backslash'
    ESCAPE_RIGHT_BRACE = 'tsdoc-escape-right-brace'
    ESCAPE_GREATER_THAN = 'tsdoc-escape-greater-than'

    # Tags
    AT_SIGN_WITHOUT_TAG_NAME = 'tsdoc-at-sign-without-tag-name'
    CHARACTERS_AFTER_BLOCK_TAG = 'tsdoc-characters-after-block-tag'
    UNDEFINED_TAG = 'tsdoc-undefined-tag'
    UNSUPPORTED_TAG = 'tsdoc-unsupported-tag'
    TAG_SHOULD_NOT_BE_REPEATED = 'tsdoc-tag-should-not-be-repeated'
    TAG_REQUIRES_BRACES = 'tsdoc-tag-requires-braces'
    TAG_NOT_INLINE = 'tsdoc-tag-not-inline'
    PARAM_TAG_WITH_INVALID_NAME = 'tsdoc-param-tag-with-invalid-name'
    PARAM_TAG_MISSING_HYPHEN = 'tsdoc-param-tag-missing-hyphen'
    MISSING_DEPRECATION_MESSAGE = 'tsdoc-missing-deprecation-message'
    INHERITDOC_INCOMPATIBLE_SUMMARY = 'tsdoc-inheritdoc-incompatible-summary'

    # Inline tags
    MALFORMED_INLINE_TAG = 'tsdoc-malformed-inline-tag'
    INLINE_TAG_MISSING_RIGHT_BRACE = 'tsdoc-inline-tag-missing-right-brace'
    LINK_TAG_EMPTY = 'tsdoc-link-tag-empty'

    # Code
    CODE_SPAN_MISSING_DELIMITER = 'tsdoc-code-span-missing-delimiter'
    CODE_SPAN_EMPTY = 'tsdoc-code-span-empty'
    CODE_FENCE_MISSING_DELIMITER = 'tsdoc-code-fence-missing-delimiter'

    # HTML
    MALFORMED_HTML_TAG = 'tsdoc-malformed-html-tag'

    def __str__(self) -> str:
        return self.value


class ParserMessage:
    """
    One diagnostic.

    When L{token_sequence} is given, it pinpoints the tokens involved,
    otherwise L{text_range} is authoritative.
    """

    def __init__(self,
                 message_id: TSDocMessageId,
                 message_text: str,
                 text_range: TextRange,
                 token_sequence: Optional['TokenSequence'] = None,
                 doc_node: Optional['DocNode'] = None):
        self.message_id = message_id
        self.unformatted_text = message_text
        self.text_range = text_range
        self.token_sequence = token_sequence
        self.doc_node = doc_node
        self._text: Optional[str] = None

    @property
    def text(self) -> str:
        """
        The message text, prefixed with the 1-based line and column, i.e. C{(12,5): Message}.
        """
        if self._text is None:
            if self.text_range.buffer:
                location = self.text_range.get_location(self.text_range.pos)
                if location.line:
                    self._text = f'{location}: {self.unformatted_text}'
            if self._text is None:
                self._text = self.unformatted_text
        return self._text

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f'<ParserMessage {self.message_id.value} {self.text!r}>'


class ParserMessageLog:
    """
    The ordered list of messages produced while parsing a comment or loading a config file.
    """

    def __init__(self) -> None:
        self.messages: List[ParserMessage] = []

    def __iter__(self) -> Iterator[ParserMessage]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def __bool__(self) -> bool:
        return bool(self.messages)

    def add_message(self, message: ParserMessage) -> None:
        self.messages.append(message)

    def add_message_for_text_range(self, message_id: TSDocMessageId,
                                   message_text: str, text_range: TextRange) -> None:
        self.add_message(ParserMessage(message_id, message_text, text_range))

    def add_message_for_token_sequence(self, message_id: TSDocMessageId,
                                       message_text: str, token_sequence: 'TokenSequence',
                                       doc_node: Optional['DocNode'] = None) -> None:
        self.add_message(ParserMessage(message_id, message_text,
                                       token_sequence.get_containing_text_range(),
                                       token_sequence=token_sequence,
                                       doc_node=doc_node))
