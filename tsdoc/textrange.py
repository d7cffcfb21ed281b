"""
Zero-copy views over the text of a doc comment.

Every token, node excerpt and diagnostic refers back to the original input
through a L{TextRange}, so positions survive all the transformations
performed by the parser.
"""
from typing import ClassVar

import attr


@attr.s(auto_attribs=True, frozen=True)
class TextLocation:
    """
    A 1-based line/column position, as reported to humans.
    """
    line: int
    column: int

    def __str__(self) -> str:
        return f'({self.line},{self.column})'


@attr.s(frozen=True, repr=False)
class TextRange:
    """
    An immutable slice of a larger string buffer.

    Two ranges are equal if they have the same bounds, the buffer itself
    is not compared.
    """

    buffer: str = attr.ib(eq=False)
    """The complete input text."""

    pos: int = attr.ib()
    """The starting index into the buffer."""

    end: int = attr.ib()
    """The (non-inclusive) ending index into the buffer."""

    empty: ClassVar['TextRange']
    """A range over the empty string."""

    def __attrs_post_init__(self) -> None:
        if self.pos < 0 or self.pos > len(self.buffer):
            raise ValueError(f'Invalid pos: {self.pos}')
        if self.end < self.pos or self.end > len(self.buffer):
            raise ValueError(f'Invalid end: {self.end}')

    @classmethod
    def from_string(cls, buffer: str) -> 'TextRange':
        return cls(buffer, 0, len(buffer))

    @classmethod
    def from_string_range(cls, buffer: str, pos: int, end: int) -> 'TextRange':
        return cls(buffer, pos, end)

    @property
    def length(self) -> int:
        return self.end - self.pos

    def get_new_range(self, pos: int, end: int) -> 'TextRange':
        """
        Create a new range over the same buffer.

        @raises ValueError: If the new bounds do not fit in the buffer.
        """
        return TextRange(self.buffer, pos, end)

    def is_empty(self) -> bool:
        return self.pos == self.end

    def get_location(self, index: int) -> TextLocation:
        """
        Compute the line and column of an index into the buffer.
        A CRLF pair counts as a single line break.

        @param index: An absolute index into L{buffer}.
        @return: The location, or C{(0,0)} if the index is out of bounds.
        """
        if index < 0 or index > len(self.buffer):
            return TextLocation(0, 0)

        line = 1
        column = 1
        current = 0
        while current < index:
            char = self.buffer[current]
            current += 1
            if char == '\r':
                if current < len(self.buffer) and self.buffer[current] == '\n':
                    # treated together with the following '\n'
                    continue
                line += 1
                column = 1
            elif char == '\n':
                line += 1
                column = 1
            else:
                column += 1
        return TextLocation(line, column)

    def get_debug_dump(self, pos_delimiter: str, end_delimiter: str) -> str:
        """
        Return the whole buffer with the delimiters inserted at L{pos} and
        L{end}, with newlines made visible.
        """
        return (self._escape(self.buffer[:self.pos]) + pos_delimiter
                + self._escape(self.buffer[self.pos:self.end]) + end_delimiter
                + self._escape(self.buffer[self.end:]))

    @staticmethod
    def _escape(text: str) -> str:
        return text.replace('\n', '[n]').replace('\r', '[r]')

    def __str__(self) -> str:
        return self.buffer[self.pos:self.end]

    def __repr__(self) -> str:
        return f'TextRange({self.pos}, {self.end}, {str(self)!r})'


TextRange.empty = TextRange('', 0, 0)
