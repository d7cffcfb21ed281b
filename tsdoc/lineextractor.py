"""
Extract the content lines of a C{/** ... */} comment.
"""
import re
from typing import TYPE_CHECKING, List

from tsdoc.messages import TSDocMessageId
from tsdoc.textrange import TextRange

if TYPE_CHECKING:
    from tsdoc.parser import ParserContext

_NEWLINE_RE = re.compile(r'\r\n|\n|\r')
_SPACING = ' \t'


def extract_lines(parser_context: 'ParserContext') -> bool:
    """
    Find the comment delimiters in C{parser_context.source_range} and store the
    ranges of the content lines into C{parser_context.lines}.

    On each line, the leading spacing and C{*} (plus one space after it) are
    excluded, as well as the trailing spacing. The first and the last lines
    are dropped when they are empty, i.e. the lines holding the delimiters.

    @return: C{False} if the comment delimiters were not found, the reason
        is logged in C{parser_context.log}.
    """
    source = parser_context.source_range
    buffer = source.buffer

    pos = source.pos
    while pos < source.end and buffer[pos] in ' \t\r\n':
        pos += 1

    if not buffer.startswith('/**', pos) or pos + 3 > source.end:
        parser_context.log.add_message_for_text_range(
            TSDocMessageId.COMMENT_MISSING_OPENING_DELIMITER,
            'Expecting a "/**" comment',
            source.get_new_range(pos, min(pos + 1, source.end)))
        return False
    opening = pos
    body_start = pos + 3

    closing = buffer.find('*/', body_start, source.end)
    if closing < 0:
        parser_context.log.add_message_for_text_range(
            TSDocMessageId.COMMENT_MISSING_CLOSING_DELIMITER,
            'Expecting a closing "*/" for the doc comment',
            source.get_new_range(opening, body_start))
        return False
    parser_context.comment_range = source.get_new_range(opening, closing + 2)

    lines: List[TextRange] = []
    line_start = body_start
    first = True
    for match in _NEWLINE_RE.finditer(buffer, body_start, closing):
        lines.append(_trim_line(source, line_start, match.start(), first))
        line_start = match.end()
        first = False
    lines.append(_trim_line(source, line_start, closing, first))

    if lines and lines[0].is_empty():
        del lines[0]
    if lines and lines[-1].is_empty():
        del lines[-1]

    parser_context.lines = lines
    return True


def _trim_line(source: TextRange, start: int, end: int, first: bool) -> TextRange:
    buffer = source.buffer
    while start < end and buffer[start] in _SPACING:
        start += 1
    if not first and start < end and buffer[start] == '*':
        start += 1
        if start < end and buffer[start] == ' ':
            start += 1
    while end > start and buffer[end - 1] in _SPACING:
        end -= 1
    return source.get_new_range(start, end)
