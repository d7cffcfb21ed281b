"""
Cursor over the token list, used by the L{NodeParser <tsdoc.parser.NodeParser>}.
"""
from typing import TYPE_CHECKING, List, Optional, Sequence

import attr

from tsdoc.textrange import TextRange
from tsdoc.tokenizer import Token, TokenKind

if TYPE_CHECKING:
    from tsdoc.parser import ParserContext


@attr.s(frozen=True, repr=False)
class TokenSequence:
    """
    An immutable, contiguous run of tokens of a L{ParserContext}.
    """

    parser_context: 'ParserContext' = attr.ib(eq=False)
    start_index: int = attr.ib()
    end_index: int = attr.ib()

    def __attrs_post_init__(self) -> None:
        if self.start_index < 0 or self.end_index < self.start_index \
                or self.end_index > len(self.parser_context.tokens):
            raise ValueError(f'Invalid token sequence [{self.start_index}:{self.end_index}]')

    @classmethod
    def create_empty(cls, parser_context: 'ParserContext') -> 'TokenSequence':
        return cls(parser_context, 0, 0)

    @property
    def tokens(self) -> Sequence[Token]:
        return self.parser_context.tokens[self.start_index:self.end_index]

    def get_new_sequence(self, start_index: int, end_index: int) -> 'TokenSequence':
        return TokenSequence(self.parser_context, start_index, end_index)

    def get_containing_text_range(self) -> TextRange:
        """
        The range from the start of the first token to the end of the last one.
        For an empty sequence this is L{TextRange.empty}.
        """
        if self.start_index == self.end_index:
            return TextRange.empty
        tokens = self.parser_context.tokens
        first = tokens[self.start_index].range
        return first.get_new_range(first.pos, tokens[self.end_index - 1].range.end)

    def is_empty(self) -> bool:
        return self.start_index == self.end_index

    def to_string(self) -> str:
        """
        The source text of the tokens. Newline tokens contribute nothing.
        """
        return ''.join(str(token) for token in self.tokens)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f'<TokenSequence [{self.start_index}:{self.end_index}] {self.to_string()!r}>'


class TokenReader:
    """
    Reads the tokens one by one. The tokens that were read since the last
    extraction form the I{accumulated sequence}, which is what the parser
    turns into nodes. Markers allow backtracking when some syntax turns out
    to be malformed.
    """

    def __init__(self, parser_context: 'ParserContext', embedded: Optional[TokenSequence] = None):
        self._parser_context = parser_context
        self._tokens: List[Token] = parser_context.tokens
        if embedded is not None:
            self._read_index = embedded.start_index
            self._max_index = embedded.end_index
        else:
            self._read_index = 0
            self._max_index = len(self._tokens)
        self._accumulated_start_index = self._read_index

    def extract_accumulated_sequence(self) -> TokenSequence:
        """
        Extract the tokens read since the previous extraction.

        @raises AssertionError: If nothing was accumulated.
        """
        assert self._accumulated_start_index != self._read_index, \
            'Parser assertion failed: the queue should not be empty'
        sequence = TokenSequence(self._parser_context,
                                 self._accumulated_start_index, self._read_index)
        self._accumulated_start_index = self._read_index
        return sequence

    def try_extract_accumulated_sequence(self) -> Optional[TokenSequence]:
        if self.is_accumulated_sequence_empty():
            return None
        return self.extract_accumulated_sequence()

    def is_accumulated_sequence_empty(self) -> bool:
        return self._accumulated_start_index == self._read_index

    def assert_accumulated_sequence_is_empty(self) -> None:
        assert self.is_accumulated_sequence_empty(), \
            'Parser assertion failed: the queue should be empty'

    def peek_token(self) -> Token:
        return self._tokens[self._read_index]

    def peek_token_kind(self) -> TokenKind:
        if self._read_index >= self._max_index:
            return TokenKind.END_OF_INPUT
        return self._tokens[self._read_index].kind

    def peek_token_after_kind(self, offset: int = 1) -> TokenKind:
        index = self._read_index + offset
        if index >= self._max_index:
            return TokenKind.END_OF_INPUT
        return self._tokens[index].kind

    def peek_text(self, offset: int = 0) -> str:
        """
        The text of an upcoming token, or C{''} past the end of the input.
        """
        index = self._read_index + offset
        if index >= self._max_index:
            return ''
        return str(self._tokens[index])

    def peek_previous_token_kind(self) -> Optional[TokenKind]:
        """
        The kind of the token just before the current one, C{None} at the start of the input.
        """
        if self._read_index == 0:
            return None
        return self._tokens[self._read_index - 1].kind

    def read_token(self) -> Token:
        """
        Read the current token and advance.
        The L{TokenKind.END_OF_INPUT} token is never consumed.
        """
        if self._read_index >= self._max_index:
            raise AssertionError('Cannot read past end of stream')
        token = self._tokens[self._read_index]
        if token.kind is TokenKind.END_OF_INPUT:
            raise AssertionError('The end of the input was reached')
        self._read_index += 1
        return token

    def is_at_end(self) -> bool:
        return self.peek_token_kind() is TokenKind.END_OF_INPUT

    def create_marker(self) -> int:
        """
        Remember the current position, see L{backtrack_to_marker}.
        """
        return self._read_index

    def backtrack_to_marker(self, marker: int) -> None:
        """
        Rewind to a position returned by L{create_marker}. The accumulated
        sequence is truncated accordingly.
        """
        self._read_index = marker
        if self._accumulated_start_index > marker:
            self._accumulated_start_index = marker
