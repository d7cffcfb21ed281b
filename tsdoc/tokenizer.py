"""
Splits the lines of a doc comment into tokens.

Runs of letters, digits, spacing or other characters are merged into a
single token; punctuation characters are always emitted one by one, the
way CommonMark treats them.
"""
import enum
import types
from typing import Iterable, List, Mapping, Optional

import attr

from tsdoc.textrange import TextRange


class TokenKind(enum.Enum):
    """
    Distinguishes different types of L{Token} objects.
    """

    END_OF_INPUT = 'EndOfInput'
    """
    The end of the input. The range is an empty range at the end of the last line.
    """

    NEWLINE = 'Newline'
    """
    A virtual newline. The range is an empty range at the end of the line, since
    the actual newline character may be noncontiguous after the comment
    delimiters were trimmed.
    """

    SPACING = 'Spacing'
    """One or more spaces and tabs."""

    ASCII_WORD = 'AsciiWord'
    """One or more ASCII letters and numbers."""

    OTHER_PUNCTUATION = 'OtherPunctuation'
    """A single ASCII punctuation character that has no dedicated kind."""

    OTHER = 'Other'
    """A sequence of characters that are neither ASCII words, spacing nor punctuation."""

    BACKSLASH = 'Backslash'
    LESS_THAN = 'LessThan'
    GREATER_THAN = 'GreaterThan'
    EQUALS = 'Equals'
    SINGLE_QUOTE = 'SingleQuote'
    DOUBLE_QUOTE = 'DoubleQuote'
    SLASH = 'Slash'


@attr.s(frozen=True, eq=False, repr=False)
class Token:
    """
    A contiguous range of characters extracted from one line.
    Apart from L{TokenKind.NEWLINE}, a token never spans several lines.
    """

    kind: TokenKind = attr.ib()
    range: TextRange = attr.ib()
    """The input range of the token, it never contains a newline character."""

    line: TextRange = attr.ib()
    """The line this token was extracted from."""

    def __str__(self) -> str:
        return str(self.range)

    def __repr__(self) -> str:
        return f'<Token {self.kind.value} {str(self)!r}>'


# CommonMark's ASCII punctuation characters
_PUNCTUATION_CHARACTERS = '!"#$%&\'()*+,-./:;<=>?@[\\]^_`{|}~'
_WORD_CHARACTERS = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'
_SPACING_CHARACTERS = ' \t'

_SPECIAL_SYMBOLS = {
    '\\': TokenKind.BACKSLASH,
    '<': TokenKind.LESS_THAN,
    '>': TokenKind.GREATER_THAN,
    '=': TokenKind.EQUALS,
    "'": TokenKind.SINGLE_QUOTE,
    '"': TokenKind.DOUBLE_QUOTE,
    '/': TokenKind.SLASH,
}

_char_map: Optional[Mapping[str, TokenKind]] = None
_punctuation_kinds = frozenset([TokenKind.OTHER_PUNCTUATION, *_SPECIAL_SYMBOLS.values()])


def _get_char_map() -> Mapping[str, TokenKind]:
    global _char_map
    if _char_map is None:
        table = {}
        for char in _PUNCTUATION_CHARACTERS:
            table[char] = TokenKind.OTHER_PUNCTUATION
        table.update(_SPECIAL_SYMBOLS)
        for char in _WORD_CHARACTERS:
            table[char] = TokenKind.ASCII_WORD
        for char in _SPACING_CHARACTERS:
            table[char] = TokenKind.SPACING
        _char_map = types.MappingProxyType(table)
    return _char_map


def is_punctuation(kind: TokenKind) -> bool:
    """
    Whether the token kind is one of the CommonMark punctuation characters,
    basically all the ASCII punctuation characters.
    """
    return kind in _punctuation_kinds


def read_tokens(lines: Iterable[TextRange]) -> List[Token]:
    """
    Given a list of input lines, returns the list of extracted tokens.
    The list always ends with a L{TokenKind.END_OF_INPUT} token.
    """
    tokens: List[Token] = []
    last_line: Optional[TextRange] = None

    for line in lines:
        _push_tokens_for_line(tokens, line)
        last_line = line

    if last_line is not None:
        tokens.append(Token(TokenKind.END_OF_INPUT,
                            last_line.get_new_range(last_line.end, last_line.end),
                            last_line))
    else:
        tokens.append(Token(TokenKind.END_OF_INPUT, TextRange.empty, TextRange.empty))
    return tokens


def _push_tokens_for_line(tokens: List[Token], line: TextRange) -> None:
    char_map = _get_char_map()
    buffer = line.buffer

    token_kind: Optional[TokenKind] = None
    token_pos = line.pos

    for index in range(line.pos, line.end):
        char_kind = char_map.get(buffer[index], TokenKind.OTHER)

        # Merge with the previous character if it's the same kind, except punctuation.
        if token_kind is not None and char_kind is token_kind \
                and token_kind not in _punctuation_kinds:
            continue

        if token_kind is not None:
            tokens.append(Token(token_kind, line.get_new_range(token_pos, index), line))
        token_pos = index
        token_kind = char_kind

    if token_kind is not None:
        tokens.append(Token(token_kind, line.get_new_range(token_pos, line.end), line))

    tokens.append(Token(TokenKind.NEWLINE, line.get_new_range(line.end, line.end), line))
