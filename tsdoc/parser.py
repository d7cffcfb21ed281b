"""
Parse documentation comments into a L{DocComment} tree.

The parser is tolerant: problems are recorded as L{ParserMessage}s and the
offending input is kept in L{DocErrorText} nodes, parsing always goes on.

    >>> from tsdoc.parser import parse
    >>> context = parse('/** Returns the sum. @beta */')
    >>> context.doc_comment.modifier_tag_set.is_beta()
    True
"""
import re
from typing import List, Optional, Sequence, Union

from tsdoc.configuration import (
    TSDocConfiguration, TSDocTagDefinition, TSDocTagSyntaxKind, explain_if_invalid_tag_name,
    get_default_configuration
)
from tsdoc.lineextractor import extract_lines
from tsdoc.messages import ParserMessageLog, TSDocMessageId
from tsdoc.nodes import (
    DocBlock, DocBlockTag, DocCodeSpan, DocComment, DocErrorText, DocEscapedText, DocExcerpt,
    DocFencedCode, DocHtmlAttribute, DocHtmlEndTag, DocHtmlStartTag, DocInheritDocTag,
    DocInlineTag, DocInlineTagBase, DocLinkTag, DocNode, DocNodeKind, DocParagraph,
    DocParamBlock, DocPlainText, DocSection, DocSoftBreak, ExcerptKind
)
from tsdoc.textrange import TextRange
from tsdoc.tokenizer import Token, TokenKind, is_punctuation, read_tokens
from tsdoc.tokenreader import TokenReader, TokenSequence


class ParserContext:
    """
    The input and the output of a parse operation.
    """

    def __init__(self, configuration: TSDocConfiguration, source_range: TextRange):
        self.configuration = configuration

        self.source_range = source_range
        """The text that was given to the parser."""

        self.comment_range = TextRange.empty
        """The range of the comment, from C{/**} to C{*/} inclusive."""

        self.lines: Sequence[TextRange] = []
        """The content lines, without the comment delimiters and the leading stars."""

        self.tokens: List[Token] = []

        self.doc_comment = DocComment(configuration)
        """The resulting tree. It is never C{None}, even if the comment was not found."""

        self.log = ParserMessageLog()


class TSDocParser:
    """
    The main API for parsing documentation comments.

    @param configuration: The tag vocabulary, defaults to the standard tags.
    """

    def __init__(self, configuration: Optional[TSDocConfiguration] = None):
        if configuration is None:
            configuration = get_default_configuration()
        self.configuration = configuration

    def parse_string(self, text: str) -> ParserContext:
        """
        Parse a comment, including its C{/**} and C{*/} delimiters.
        """
        return self.parse_range(TextRange.from_string(text))

    def parse_range(self, range: TextRange) -> ParserContext:
        parser_context = ParserContext(self.configuration, range)
        if extract_lines(parser_context):
            parser_context.tokens = read_tokens(parser_context.lines)
        else:
            parser_context.tokens = read_tokens(())
        NodeParser(parser_context).parse()
        return parser_context

    def parse_lines(self, lines: Sequence[str]) -> ParserContext:
        """
        Parse the content lines of a comment that were already extracted
        by the caller: the lines have no delimiters nor leading stars.
        """
        split: List[str] = []
        for line in lines:
            split.extend(line.splitlines() or [''])
        buffer = '\n'.join(split)

        source = TextRange.from_string(buffer)
        ranges = []
        pos = 0
        for line in split:
            ranges.append(source.get_new_range(pos, pos + len(line)))
            pos += len(line) + 1

        parser_context = ParserContext(self.configuration, source)
        parser_context.comment_range = source
        parser_context.lines = ranges
        parser_context.tokens = read_tokens(ranges)
        NodeParser(parser_context).parse()
        return parser_context


def parse(text_or_lines: Union[str, Sequence[str]],
          configuration: Optional[TSDocConfiguration] = None) -> ParserContext:
    """
    Parse a comment given as a string with delimiters, or as a list of content lines.
    """
    parser = TSDocParser(configuration)
    if isinstance(text_or_lines, str):
        return parser.parse_string(text_or_lines)
    return parser.parse_lines(text_or_lines)


_PARAM_NAME_RE = re.compile(r'^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$')
_URL_SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*://')

# Block tags that fill a dedicated slot of the DocComment.
_BLOCK_SLOTS = {
    '@REMARKS': 'remarks_block',
    '@PRIVATEREMARKS': 'private_remarks',
    '@DEPRECATED': 'deprecated_block',
    '@RETURNS': 'returns_block',
}

_PARAM_COLLECTIONS = {
    '@PARAM': 'params',
    '@TYPEPARAM': 'type_params',
}

_TAG_END_KINDS = (TokenKind.SPACING, TokenKind.NEWLINE, TokenKind.END_OF_INPUT)


class NodeParser:
    """
    Recursive-descent parser turning the tokens of a L{ParserContext} into
    the nodes of its L{DocComment}.

    Every token except the last L{TokenKind.END_OF_INPUT} ends up in the
    excerpt of exactly one leaf node.
    """

    def __init__(self, parser_context: ParserContext):
        self._parser_context = parser_context
        self._configuration = parser_context.configuration
        self._log = parser_context.log
        self._comment = parser_context.doc_comment
        self._current_section: DocSection = self._comment.summary_section
        self._paragraph_closed = False

    def parse(self) -> None:
        reader = TokenReader(self._parser_context)

        while True:
            kind = reader.peek_token_kind()

            if kind is TokenKind.END_OF_INPUT:
                self._push_accumulated_plain_text(reader)
                break

            elif kind is TokenKind.NEWLINE:
                self._push_accumulated_plain_text(reader)
                self._push_soft_break(reader)

            elif kind is TokenKind.BACKSLASH:
                self._push_accumulated_plain_text(reader)
                self._push_node(self._parse_backslash_escape(reader))

            elif kind is TokenKind.LESS_THAN:
                self._push_accumulated_plain_text(reader)
                self._push_node(self._parse_html_tag(reader))

            elif kind is TokenKind.GREATER_THAN:
                self._push_accumulated_plain_text(reader)
                self._push_node(self._create_error(
                    reader, reader.create_marker(), 1, TSDocMessageId.ESCAPE_GREATER_THAN,
                    'The ">" character should be escaped using a backslash '
                    'to avoid confusion with an HTML tag'))

            elif kind is TokenKind.OTHER_PUNCTUATION and reader.peek_text() == '@':
                if self._is_at_word_boundary(reader):
                    self._push_accumulated_plain_text(reader)
                    self._parse_block_tag(reader)
                else:
                    reader.read_token()

            elif kind is TokenKind.OTHER_PUNCTUATION and reader.peek_text() == '{':
                self._push_accumulated_plain_text(reader)
                self._push_node(self._parse_inline_tag(reader))

            elif kind is TokenKind.OTHER_PUNCTUATION and reader.peek_text() == '}':
                self._push_accumulated_plain_text(reader)
                self._push_node(self._create_error(
                    reader, reader.create_marker(), 1, TSDocMessageId.ESCAPE_RIGHT_BRACE,
                    'The "}" character should be escaped using a backslash '
                    'to avoid confusion with a TSDoc inline tag'))

            elif kind is TokenKind.OTHER_PUNCTUATION and reader.peek_text() == '`':
                self._push_accumulated_plain_text(reader)
                if self._is_code_fence(reader):
                    self._push_node(self._parse_fenced_code(reader))
                else:
                    self._push_node(self._parse_code_span(reader))

            else:
                reader.read_token()

        self._perform_validation_checks()

    ##################################################
    ## Tree building
    ##################################################

    def _push_node(self, node: DocNode) -> None:
        if node.kind is DocNodeKind.FENCED_CODE:
            self._current_section.append_node(node)
            self._paragraph_closed = False
            return
        if self._paragraph_closed:
            self._current_section.append_node(DocParagraph(self._configuration))
            self._paragraph_closed = False
        self._current_section.append_node_in_paragraph(node)

    def _push_accumulated_plain_text(self, reader: TokenReader) -> None:
        excerpt = reader.try_extract_accumulated_sequence()
        if excerpt is not None:
            self._push_node(DocPlainText(self._configuration, excerpt))

    def _push_soft_break(self, reader: TokenReader) -> None:
        reader.read_token()
        soft_break = DocSoftBreak(self._configuration, reader.extract_accumulated_sequence())
        if self._paragraph_closed:
            # More blank lines, they stay in the paragraph they follow.
            self._current_section.append_node_in_paragraph(soft_break)
            return
        self._push_node(soft_break)

        # A blank line ends the paragraph: the soft break we just pushed
        # follows another one, with nothing but spacing in between.
        last = self._current_section.nodes[-1]
        nodes = last.get_child_nodes()
        index = len(nodes) - 2
        previous = nodes[index] if index >= 0 else None
        if isinstance(previous, DocPlainText) and not previous.text.strip():
            index -= 1
        if index >= 0 and nodes[index].kind is DocNodeKind.SOFT_BREAK:
            self._paragraph_closed = True

    def _start_section(self, section: DocSection) -> None:
        self._current_section = section
        self._paragraph_closed = False

    def _get_text(self, start_index: int, end_index: int, newline: str = '') -> str:
        return ''.join(newline if token.kind is TokenKind.NEWLINE else str(token)
                       for token in self._parser_context.tokens[start_index:end_index])

    def _sequence(self, start_index: int, end_index: int) -> TokenSequence:
        return TokenSequence(self._parser_context, start_index, end_index)

    ##################################################
    ## Errors
    ##################################################

    def _create_error(self, reader: TokenReader, marker: int, token_count: int,
                      message_id: TSDocMessageId, message_text: str) -> DocErrorText:
        """
        Backtrack to the marker and turn the next C{token_count} tokens into a L{DocErrorText}.
        """
        reader.backtrack_to_marker(marker)
        for _ in range(token_count):
            reader.read_token()
        excerpt = reader.extract_accumulated_sequence()
        return self._error_text(excerpt, message_id, message_text, excerpt)

    def _error_text(self, excerpt: TokenSequence, message_id: TSDocMessageId,
                    message_text: str, error_location: TokenSequence) -> DocErrorText:
        node = DocErrorText(self._configuration, excerpt, message_id, message_text, error_location)
        self._log.add_message_for_token_sequence(message_id, message_text, error_location, node)
        return node

    def _log_for_node(self, message_id: TSDocMessageId, message_text: str,
                      excerpt: TokenSequence, node: DocNode) -> None:
        self._log.add_message_for_token_sequence(message_id, message_text, excerpt, node)

    ##################################################
    ## Escapes
    ##################################################

    def _parse_backslash_escape(self, reader: TokenReader) -> DocNode:
        marker = reader.create_marker()
        reader.read_token()
        if is_punctuation(reader.peek_token_kind()):
            reader.read_token()
            return DocEscapedText(self._configuration, reader.extract_accumulated_sequence())
        return self._create_error(
            reader, marker, 1, TSDocMessageId.UNNECESSARY_BACKSLASH,
            'A backslash must precede another character that is being escaped')

    ##################################################
    ## Block and modifier tags
    ##################################################

    def _is_at_word_boundary(self, reader: TokenReader) -> bool:
        return reader.peek_previous_token_kind() not in (TokenKind.ASCII_WORD, TokenKind.OTHER)

    def _parse_block_tag(self, reader: TokenReader) -> None:
        marker = reader.create_marker()
        reader.read_token()

        if reader.peek_token_kind() is not TokenKind.ASCII_WORD:
            self._push_node(self._create_error(
                reader, marker, 1, TSDocMessageId.AT_SIGN_WITHOUT_TAG_NAME,
                'Expecting a TSDoc tag name after "@"; if it is not a tag, '
                'use a backslash to escape this character'))
            return

        tag_name = '@' + str(reader.read_token())
        explanation = explain_if_invalid_tag_name(tag_name)
        if explanation is not None:
            self._push_node(self._create_error(
                reader, marker, 2, TSDocMessageId.AT_SIGN_WITHOUT_TAG_NAME,
                f'{explanation}; if it is not a tag, use a backslash to escape the "@"'))
            return

        if reader.peek_token_kind() not in _TAG_END_KINDS:
            self._push_node(self._create_error(
                reader, marker, 2, TSDocMessageId.CHARACTERS_AFTER_BLOCK_TAG,
                f'The token "{tag_name}" looks like a TSDoc tag but is followed by '
                f'the character "{reader.peek_text()}"; if it is not a tag, '
                f'use a backslash to escape the "@"'))
            return

        excerpt = reader.extract_accumulated_sequence()
        definition = self._configuration.try_get_tag_definition(tag_name)
        block_tag = DocBlockTag(self._configuration, excerpt, tag_name, definition)

        if definition is None:
            if not self._configuration.validation.ignore_undefined_tags:
                self._log_for_node(TSDocMessageId.UNDEFINED_TAG,
                                   f'The TSDoc tag "{tag_name}" is not defined in this configuration',
                                   excerpt, block_tag)
            self._push_node(block_tag)
            return

        self._check_supported(definition, excerpt, block_tag)

        if definition.syntax_kind is TSDocTagSyntaxKind.BLOCK_TAG:
            if definition.tag_name_with_upper_case in _PARAM_COLLECTIONS:
                block: DocBlock = self._parse_param_block(reader, block_tag)
            else:
                block = DocBlock(self._configuration, block_tag)
            self._add_block(block, definition)
            self._start_section(block.content)

        elif definition.syntax_kind is TSDocTagSyntaxKind.MODIFIER_TAG:
            if not self._comment.modifier_tag_set.add_tag(block_tag) \
                    and not definition.allow_multiple:
                self._log_repeated(definition, excerpt, block_tag)
            self._push_node(block_tag)

        else:
            self._log_for_node(TSDocMessageId.TAG_REQUIRES_BRACES,
                               f'The TSDoc tag "{tag_name}" is an inline tag; '
                               f'it must be enclosed in "{{ }}" braces',
                               excerpt, block_tag)
            self._push_node(block_tag)

    def _check_supported(self, definition: TSDocTagDefinition,
                         excerpt: TokenSequence, node: DocNode) -> None:
        if self._configuration.validation.report_unsupported_tags \
                and not self._configuration.is_tag_supported(definition):
            self._log_for_node(TSDocMessageId.UNSUPPORTED_TAG,
                               f'The TSDoc tag "{definition.tag_name}" is not supported '
                               f'by this tool',
                               excerpt, node)

    def _log_repeated(self, definition: TSDocTagDefinition,
                      excerpt: TokenSequence, node: DocNode) -> None:
        self._log_for_node(TSDocMessageId.TAG_SHOULD_NOT_BE_REPEATED,
                           f'The "{definition.tag_name}" tag should not be used more than '
                           f'once in a comment',
                           excerpt, node)

    def _add_block(self, block: DocBlock, definition: TSDocTagDefinition) -> None:
        comment = self._comment
        name = definition.tag_name_with_upper_case

        if isinstance(block, DocParamBlock):
            getattr(comment, _PARAM_COLLECTIONS[name]).add(block)

        elif name in _BLOCK_SLOTS:
            slot = _BLOCK_SLOTS[name]
            if getattr(comment, slot) is None:
                setattr(comment, slot, block)
            else:
                self._log_repeated(definition, block.block_tag.excerpt, block.block_tag)
                comment.append_custom_block(block)

        elif name == '@SEE':
            comment.see_blocks.append(block)

        else:
            if not definition.allow_multiple and any(
                    b.block_tag.definition == definition for b in comment.custom_blocks):
                self._log_repeated(definition, block.block_tag.excerpt, block.block_tag)
            comment.append_custom_block(block)

    def _try_read_spacing_and_newlines(self, reader: TokenReader) -> Optional[DocExcerpt]:
        reader.assert_accumulated_sequence_is_empty()
        while reader.peek_token_kind() in (TokenKind.SPACING, TokenKind.NEWLINE):
            reader.read_token()
        excerpt = reader.try_extract_accumulated_sequence()
        if excerpt is None:
            return None
        return DocExcerpt(self._configuration, ExcerptKind.SPACING, excerpt)

    def _parse_param_block(self, reader: TokenReader, block_tag: DocBlockTag) -> DocParamBlock:
        """
        Parse C{name - } after a C{@param} or C{@typeParam} tag. If the syntax
        is wrong, the tokens are left for the block content.
        """
        marker = reader.create_marker()
        excerpts: List[DocExcerpt] = []

        spacing = self._try_read_spacing_and_newlines(reader)
        if spacing is not None:
            excerpts.append(spacing)

        name_start = reader.create_marker()
        while reader.peek_token_kind() is TokenKind.ASCII_WORD or (
                reader.peek_token_kind() is TokenKind.OTHER_PUNCTUATION
                and reader.peek_text() in ('_', '$', '.')):
            reader.read_token()
        parameter_name = self._get_text(name_start, reader.create_marker())

        if not _PARAM_NAME_RE.match(parameter_name) \
                or reader.peek_token_kind() not in _TAG_END_KINDS:
            reader.backtrack_to_marker(marker)
            if parameter_name:
                message = (f'The {block_tag.tag_name} block should be followed by a valid '
                           f'parameter name: "{parameter_name}" is not valid')
            else:
                message = (f'The {block_tag.tag_name} block should be followed by a '
                           f'parameter name')
            self._log_for_node(TSDocMessageId.PARAM_TAG_WITH_INVALID_NAME, message,
                               block_tag.excerpt, block_tag)
            return DocParamBlock(self._configuration, block_tag, '')

        excerpts.append(DocExcerpt(self._configuration, ExcerptKind.PARAM_BLOCK_PARAMETER_NAME,
                                   reader.extract_accumulated_sequence()))

        spacing = self._try_read_spacing_and_newlines(reader)
        if spacing is not None:
            excerpts.append(spacing)

        if not (reader.peek_token_kind() is TokenKind.OTHER_PUNCTUATION
                and reader.peek_text() == '-'):
            reader.backtrack_to_marker(marker)
            self._log_for_node(TSDocMessageId.PARAM_TAG_MISSING_HYPHEN,
                               f'The {block_tag.tag_name} block should be followed by a parameter '
                               f'name and then a hyphen',
                               block_tag.excerpt, block_tag)
            return DocParamBlock(self._configuration, block_tag, '')

        reader.read_token()
        excerpts.append(DocExcerpt(self._configuration, ExcerptKind.PARAM_BLOCK_HYPHEN,
                                   reader.extract_accumulated_sequence()))

        spacing = self._try_read_spacing_and_newlines(reader)
        if spacing is not None:
            excerpts.append(spacing)

        return DocParamBlock(self._configuration, block_tag, parameter_name, excerpts)

    ##################################################
    ## Inline tags
    ##################################################

    def _parse_inline_tag(self, reader: TokenReader) -> DocNode:
        marker = reader.create_marker()
        reader.read_token()

        if not (reader.peek_token_kind() is TokenKind.OTHER_PUNCTUATION
                and reader.peek_text() == '@'
                and reader.peek_token_after_kind() is TokenKind.ASCII_WORD):
            return self._create_error(
                reader, marker, 1, TSDocMessageId.MALFORMED_INLINE_TAG,
                'Expecting a TSDoc tag starting with "{@"; if it is not a tag, '
                'use a backslash to escape the "{" character')

        reader.read_token()
        tag_name = '@' + str(reader.read_token())
        explanation = explain_if_invalid_tag_name(tag_name)
        if explanation is None and reader.peek_token_kind() not in (
                TokenKind.SPACING, TokenKind.NEWLINE) and reader.peek_text() != '}':
            explanation = (f'The tag name "{tag_name}" is followed by '
                           f'the character "{reader.peek_text()}"')
        if explanation is not None:
            return self._create_error(
                reader, marker, 1, TSDocMessageId.MALFORMED_INLINE_TAG,
                f'Malformed TSDoc inline tag: {explanation}')

        content_start = reader.create_marker()
        depth = 0
        while True:
            kind = reader.peek_token_kind()
            if kind is TokenKind.END_OF_INPUT:
                return self._parse_unterminated_inline_tag(reader, marker)
            if kind is TokenKind.BACKSLASH and is_punctuation(reader.peek_token_after_kind()):
                reader.read_token()
                reader.read_token()
                continue
            if kind is TokenKind.OTHER_PUNCTUATION:
                text = reader.peek_text()
                if text == '{':
                    depth += 1
                elif text == '}':
                    if depth == 0:
                        break
                    depth -= 1
            reader.read_token()
        content_end = reader.create_marker()
        reader.read_token()
        excerpt = reader.extract_accumulated_sequence()

        tag_content = self._get_text(content_start, content_end, newline=' ').strip()
        definition = self._configuration.try_get_tag_definition(tag_name)

        if definition is None:
            node: DocInlineTagBase = DocInlineTag(self._configuration, excerpt, tag_name, tag_content)
            if not self._configuration.validation.ignore_undefined_tags:
                self._log_for_node(TSDocMessageId.UNDEFINED_TAG,
                                   f'The TSDoc tag "{tag_name}" is not defined in this configuration',
                                   excerpt, node)
            return node

        if definition.syntax_kind is not TSDocTagSyntaxKind.INLINE_TAG:
            node = DocInlineTag(self._configuration, excerpt, tag_name, tag_content, definition)
            self._log_for_node(TSDocMessageId.TAG_NOT_INLINE,
                               f'The TSDoc tag "{tag_name}" is not an inline tag; '
                               f'it must not be enclosed in "{{ }}" braces',
                               excerpt, node)
            return node

        upper = definition.tag_name_with_upper_case
        if upper == '@LINK':
            node = self._create_link_tag(excerpt, tag_name, tag_content, definition)
        elif upper == '@INHERITDOC':
            node = DocInheritDocTag(self._configuration, excerpt, tag_name, tag_content, definition)
            if self._comment.inherit_doc_tag is None:
                self._comment.inherit_doc_tag = node
            else:
                self._log_repeated(definition, excerpt, node)
        else:
            node = DocInlineTag(self._configuration, excerpt, tag_name, tag_content, definition)

        self._check_supported(definition, excerpt, node)
        return node

    def _parse_unterminated_inline_tag(self, reader: TokenReader, marker: int) -> DocErrorText:
        reader.backtrack_to_marker(marker)
        while not reader.is_at_end():
            reader.read_token()
        excerpt = reader.extract_accumulated_sequence()
        return self._error_text(excerpt, TSDocMessageId.INLINE_TAG_MISSING_RIGHT_BRACE,
                                'The TSDoc inline tag is missing its closing "}"',
                                self._sequence(marker, marker + 1))

    def _create_link_tag(self, excerpt: TokenSequence, tag_name: str, tag_content: str,
                         definition: TSDocTagDefinition) -> DocLinkTag:
        destination = tag_content
        link_text: Optional[str] = None
        escaped = False
        for index, char in enumerate(tag_content):
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '|':
                destination = tag_content[:index].strip()
                link_text = tag_content[index + 1:].strip()
                break

        code_destination: Optional[str] = None
        url_destination: Optional[str] = None
        if _URL_SCHEME_RE.match(destination):
            url_destination = destination
        elif destination:
            code_destination = destination

        node = DocLinkTag(self._configuration, excerpt, tag_name, tag_content, definition,
                          code_destination=code_destination,
                          url_destination=url_destination,
                          link_text=link_text)
        if not destination:
            self._log_for_node(TSDocMessageId.LINK_TAG_EMPTY,
                               'The @link tag content is missing a declaration reference or an URL',
                               excerpt, node)
        return node

    ##################################################
    ## Code
    ##################################################

    def _is_backtick(self, reader: TokenReader, offset: int) -> bool:
        return reader.peek_token_after_kind(offset) is TokenKind.OTHER_PUNCTUATION \
            and reader.peek_text(offset) == '`'

    def _is_code_fence(self, reader: TokenReader) -> bool:
        if not all(self._is_backtick(reader, offset) for offset in range(3)):
            return False
        # Only spacing may precede the fence on its line.
        tokens = self._parser_context.tokens
        index = reader.create_marker() - 1
        while index >= 0 and tokens[index].kind is TokenKind.SPACING:
            index -= 1
        return index < 0 or tokens[index].kind is TokenKind.NEWLINE

    def _parse_code_span(self, reader: TokenReader) -> DocNode:
        marker = reader.create_marker()
        reader.read_token()

        code_start = reader.create_marker()
        while not self._is_backtick(reader, 0):
            if reader.peek_token_kind() in (TokenKind.NEWLINE, TokenKind.END_OF_INPUT):
                return self._create_error(
                    reader, marker, 1, TSDocMessageId.CODE_SPAN_MISSING_DELIMITER,
                    'The code span is missing its closing backtick')
            reader.read_token()
        code_end = reader.create_marker()
        reader.read_token()

        excerpt = reader.extract_accumulated_sequence()
        node = DocCodeSpan(self._configuration, excerpt, self._get_text(code_start, code_end))
        if code_start == code_end:
            self._log_for_node(TSDocMessageId.CODE_SPAN_EMPTY, 'The code span is empty',
                               excerpt, node)
        return node

    def _parse_fenced_code(self, reader: TokenReader) -> DocNode:
        marker = reader.create_marker()
        for _ in range(3):
            reader.read_token()

        language_start = reader.create_marker()
        while reader.peek_token_kind() not in (TokenKind.NEWLINE, TokenKind.END_OF_INPUT):
            reader.read_token()
        language = self._get_text(language_start, reader.create_marker()).strip()

        if reader.is_at_end():
            return self._create_error(
                reader, marker, 3, TSDocMessageId.CODE_FENCE_MISSING_DELIMITER,
                'The opening code fence is missing its closing fence')
        reader.read_token()

        code_start = reader.create_marker()
        while True:
            line_start = reader.create_marker()
            offset = 0
            while reader.peek_token_after_kind(offset) is TokenKind.SPACING:
                offset += 1
            if all(self._is_backtick(reader, offset + i) for i in range(3)):
                break
            while reader.peek_token_kind() not in (TokenKind.NEWLINE, TokenKind.END_OF_INPUT):
                reader.read_token()
            if reader.is_at_end():
                return self._create_error(
                    reader, marker, 3, TSDocMessageId.CODE_FENCE_MISSING_DELIMITER,
                    'The opening code fence is missing its closing fence')
            reader.read_token()

        code = self._get_text(code_start, line_start, newline='\n')

        # The closing fence line, including its line break.
        while reader.peek_token_kind() not in (TokenKind.NEWLINE, TokenKind.END_OF_INPUT):
            reader.read_token()
        if reader.peek_token_kind() is TokenKind.NEWLINE:
            reader.read_token()

        return DocFencedCode(self._configuration, reader.extract_accumulated_sequence(),
                             language, code)

    ##################################################
    ## HTML
    ##################################################

    def _read_html_name(self, reader: TokenReader) -> Optional[str]:
        if reader.peek_token_kind() is not TokenKind.ASCII_WORD \
                or not reader.peek_text()[0].isalpha():
            return None
        start = reader.create_marker()
        while reader.peek_token_kind() is TokenKind.ASCII_WORD or (
                reader.peek_token_kind() is TokenKind.OTHER_PUNCTUATION
                and reader.peek_text() == '-'):
            reader.read_token()
        return self._get_text(start, reader.create_marker())

    def _skip_spacing(self, reader: TokenReader) -> None:
        while reader.peek_token_kind() is TokenKind.SPACING:
            reader.read_token()

    def _malformed_html(self, reader: TokenReader, marker: int, reason: str) -> DocErrorText:
        return self._create_error(
            reader, marker, 1, TSDocMessageId.MALFORMED_HTML_TAG,
            f'Invalid HTML element: {reason}; if it is not HTML, '
            f'use a backslash to escape the "<" character')

    def _parse_html_tag(self, reader: TokenReader) -> DocNode:
        marker = reader.create_marker()
        if reader.peek_token_after_kind() is TokenKind.SLASH:
            return self._parse_html_end_tag(reader, marker)

        reader.read_token()
        children: List[DocNode] = [DocExcerpt(
            self._configuration, ExcerptKind.HTML_START_TAG_OPENING_DELIMITER,
            reader.extract_accumulated_sequence())]

        name = self._read_html_name(reader)
        if name is None:
            return self._malformed_html(reader, marker, 'an HTML name must be an ASCII letter '
                                        'followed by optional letters, numbers or hyphens')
        children.append(DocExcerpt(self._configuration, ExcerptKind.HTML_START_TAG_NAME,
                                   reader.extract_accumulated_sequence()))

        while True:
            spacing = self._try_read_spacing_and_newlines(reader)
            kind = reader.peek_token_kind()
            if kind is TokenKind.GREATER_THAN or (
                    kind is TokenKind.SLASH
                    and reader.peek_token_after_kind() is TokenKind.GREATER_THAN):
                if spacing is not None:
                    children.append(spacing)
                break
            if spacing is None:
                return self._malformed_html(reader, marker, f'the <{name}> tag is not closed by ">"')
            attribute = self._parse_html_attribute(reader)
            if attribute is None:
                return self._malformed_html(reader, marker,
                                            f'the <{name}> tag has a malformed attribute')
            children.append(spacing)
            children.append(attribute)

        self_closing = kind is TokenKind.SLASH
        if self_closing:
            reader.read_token()
        reader.read_token()
        children.append(DocExcerpt(self._configuration, ExcerptKind.HTML_START_TAG_CLOSING_DELIMITER,
                                   reader.extract_accumulated_sequence()))
        return DocHtmlStartTag(self._configuration, name, children, self_closing)

    def _parse_html_attribute(self, reader: TokenReader) -> Optional[DocHtmlAttribute]:
        name = self._read_html_name(reader)
        if name is None:
            return None
        self._skip_spacing(reader)
        if reader.peek_token_kind() is not TokenKind.EQUALS:
            return None
        reader.read_token()
        self._skip_spacing(reader)

        quote = reader.peek_token_kind()
        if quote not in (TokenKind.DOUBLE_QUOTE, TokenKind.SINGLE_QUOTE):
            return None
        value_start = reader.create_marker()
        reader.read_token()
        while reader.peek_token_kind() is not quote:
            if reader.peek_token_kind() in (TokenKind.NEWLINE, TokenKind.END_OF_INPUT):
                return None
            reader.read_token()
        reader.read_token()
        value = self._get_text(value_start, reader.create_marker())

        return DocHtmlAttribute(self._configuration, reader.extract_accumulated_sequence(),
                                name, value)

    def _parse_html_end_tag(self, reader: TokenReader, marker: int) -> DocNode:
        reader.read_token()
        reader.read_token()
        name = self._read_html_name(reader)
        if name is None:
            return self._malformed_html(reader, marker, 'expecting an HTML name after "</"')
        self._skip_spacing(reader)
        if reader.peek_token_kind() is not TokenKind.GREATER_THAN:
            return self._malformed_html(reader, marker, f'the </{name}> tag is not closed by ">"')
        reader.read_token()
        return DocHtmlEndTag(self._configuration, reader.extract_accumulated_sequence(), name)

    ##################################################
    ## Validation
    ##################################################

    def _perform_validation_checks(self) -> None:
        comment = self._comment

        deprecated = comment.deprecated_block
        if deprecated is not None and deprecated.content.is_empty():
            self._log_for_node(TSDocMessageId.MISSING_DEPRECATION_MESSAGE,
                               f'The {deprecated.block_tag.tag_name} block must include a '
                               f'deprecation message, e.g. describing the recommended alternative',
                               deprecated.block_tag.excerpt, deprecated)

        inherit_doc = comment.inherit_doc_tag
        if inherit_doc is not None and not comment.summary_section.is_empty(ignored=(inherit_doc,)):
            self._log_for_node(TSDocMessageId.INHERITDOC_INCOMPATIBLE_SUMMARY,
                               f'The summary section must not have any content, because that '
                               f'content will be replaced by the "{inherit_doc.tag_name}" tag',
                               inherit_doc.excerpt, inherit_doc)
