"""
Tests for the doc comment parser.
"""
from typing import List, Type, TypeVar

import pytest

from tsdoc.configuration import TSDocConfiguration, TSDocTagDefinition, TSDocTagSyntaxKind
from tsdoc.dump import dump_node, dump_parser_context
from tsdoc.messages import TSDocMessageId
from tsdoc.nodes import (
    DocBlockTag, DocCodeSpan, DocErrorText, DocEscapedText, DocFencedCode, DocHtmlEndTag,
    DocHtmlStartTag, DocInlineTag, DocLinkTag, DocNode, DocNodeKind, DocParagraph,
    DocPlainText, iter_leaves, walk
)
from tsdoc.parser import ParserContext, TSDocParser, parse
from tsdoc.standardtags import StandardTags
from tsdoc.tokenizer import TokenKind

from . import message_ids

N = TypeVar('N', bound=DocNode)

def find_all(node: DocNode, cls: Type[N]) -> List[N]:
    return [n for n in walk(node) if isinstance(n, cls)]

def paragraph_text(paragraph: DocNode) -> str:
    """
    The source text of a paragraph, with soft breaks as newlines.
    """
    return ''.join('\n' if leaf.kind is DocNodeKind.SOFT_BREAK else leaf.excerpt.to_string()
                   for leaf in iter_leaves(paragraph))

def assert_tokens_covered(parser_context: ParserContext) -> None:
    """
    Every token except the end of input belongs to exactly one leaf node.
    """
    covered = [id(token) for leaf in iter_leaves(parser_context.doc_comment)
               for token in leaf.excerpt.tokens]
    expected = [id(token) for token in parser_context.tokens
                if token.kind is not TokenKind.END_OF_INPUT]
    assert len(covered) == len(set(covered))
    assert set(covered) == set(expected)


EXAMPLE = '''\
/**
 * Returns the average of two numbers.
 *
 * @remarks
 * This method is part of the {@link core-library#Statistics | Statistics subsystem}.
 *
 * @param x - The first input number
 * @param y - The second input number
 * @returns The arithmetic mean of `x` and `y`
 *
 * @beta
 */'''

def test_example_comment() -> None:
    parser_context = parse(EXAMPLE)
    assert message_ids(parser_context) == []
    comment = parser_context.doc_comment

    summary, = comment.summary_section.nodes
    assert isinstance(summary, DocParagraph)
    assert paragraph_text(summary) == 'Returns the average of two numbers.\n\n'

    assert comment.remarks_block is not None
    link, = find_all(comment.remarks_block, DocLinkTag)
    assert link.code_destination == 'core-library#Statistics'
    assert link.url_destination is None
    assert link.link_text == 'Statistics subsystem'

    assert [block.parameter_name for block in comment.params.blocks] == ['x', 'y']
    y = comment.params.try_get_block_by_name('y')
    assert y is not None
    assert paragraph_text(y.content).strip() == 'The second input number'
    assert comment.params.try_get_block_by_name('z') is None

    assert comment.returns_block is not None
    codes = [code.code for code in find_all(comment.returns_block, DocCodeSpan)]
    assert codes == ['x', 'y']

    assert comment.modifier_tag_set.is_beta()
    assert not comment.modifier_tag_set.is_internal()
    assert '@BETA' in comment.modifier_tag_set

    assert_tokens_covered(parser_context)

def test_example_lines() -> None:
    lines = [line[3:] for line in EXAMPLE.splitlines()[1:-1]]
    parser_context = TSDocParser().parse_lines(lines)
    assert message_ids(parser_context) == []
    assert dump_node(parser_context.doc_comment) == dump_node(parse(EXAMPLE).doc_comment)

def test_dump() -> None:
    parser_context = parse('/** Hello @beta */')
    assert dump_parser_context(parser_context) == '\n'.join([
        "- Comment",
        "  - Section",
        "    - Paragraph",
        "      - PlainText: 'Hello '",
        "      - BlockTag: '@beta'",
        "      - SoftBreak: ''",
    ])

def test_dump_messages() -> None:
    parser_context = parse('/** Hello @foo */')
    assert dump_parser_context(parser_context).splitlines()[-1] == (
        'tsdoc-undefined-tag: (1,11): The TSDoc tag "@foo" is not defined in this configuration')

def test_parsing_is_repeatable() -> None:
    parser = TSDocParser()
    assert dump_node(parser.parse_string(EXAMPLE).doc_comment) == \
        dump_node(parser.parse_string(EXAMPLE).doc_comment)

def test_paragraphs() -> None:
    parser_context = parse('/**\n * One\n * still one\n *\n *   \n * Two\n */')
    one, two = parser_context.doc_comment.summary_section.nodes
    assert paragraph_text(one).startswith('One\nstill one\n')
    assert paragraph_text(two) == 'Two\n'

def test_synonyms() -> None:
    configuration = TSDocConfiguration()
    configuration.add_synonym(StandardTags.param, '@arg', '@argument')
    configuration.add_synonym(StandardTags.returns, '@return')
    configuration.add_synonym(StandardTags.readonly, '@readonly2')

    parser_context = parse('''/**
 * @arg x - The first
 * @argument y - The second
 * @return The result
 * @readonly2
 */''', configuration)
    assert message_ids(parser_context) == []
    comment = parser_context.doc_comment
    assert [block.parameter_name for block in comment.params.blocks] == ['x', 'y']
    assert [block.block_tag.tag_name for block in comment.params.blocks] == ['@arg', '@argument']
    assert comment.returns_block is not None
    assert comment.returns_block.block_tag.tag_name == '@return'
    assert comment.modifier_tag_set.is_readonly()
    assert comment.modifier_tag_set.has_tag_name('@readonly')
    assert comment.modifier_tag_set.has_tag_name('@READONLY2')

def test_synonyms_mixed_with_canonical_names() -> None:
    configuration = TSDocConfiguration()
    configuration.add_synonym(StandardTags.param, '@arg')
    parser_context = parse('/**\n * @arg b - The second\n * @param a - The first\n */',
                           configuration)
    assert message_ids(parser_context) == []
    blocks = parser_context.doc_comment.params.blocks
    assert [block.parameter_name for block in blocks] == ['b', 'a']
    assert [block.block_tag.tag_name for block in blocks] == ['@arg', '@param']
    assert all(block.block_tag.definition is StandardTags.param for block in blocks)

def test_modifiers_with_unknown_and_repeated_tags() -> None:
    parser_context = parse('/**\n * START @beta\n * @unknownTag\n * @internal @internal END\n */')
    assert message_ids(parser_context) == [
        'tsdoc-undefined-tag',
        'tsdoc-tag-should-not-be-repeated',
    ]
    modifiers = parser_context.doc_comment.modifier_tag_set
    assert modifiers.is_beta()
    assert modifiers.is_internal()
    assert not modifiers.is_alpha()
    assert_tokens_covered(parser_context)

    lines = ['START @beta', '@unknownTag', '@internal @internal END']
    from_lines = TSDocParser().parse_lines(lines)
    assert message_ids(from_lines) == message_ids(parser_context)
    assert dump_node(from_lines.doc_comment) == dump_node(parser_context.doc_comment)

def test_blocks_in_any_order() -> None:
    parser_context = parse('''/**
 * @returns the result
 * @param b - second
 * @remarks details
 * @param a - first
 * @typeParam T - the type
 */''')
    assert message_ids(parser_context) == []
    comment = parser_context.doc_comment
    assert comment.summary_section.is_empty()
    assert [block.parameter_name for block in comment.params.blocks] == ['b', 'a']
    assert [block.parameter_name for block in comment.type_params.blocks] == ['T']
    assert comment.remarks_block is not None
    assert paragraph_text(comment.remarks_block.content) == ' details\n'
    assert [node.kind for node in comment.get_child_nodes()] == [
        DocNodeKind.SECTION, DocNodeKind.BLOCK, DocNodeKind.PARAM_COLLECTION,
        DocNodeKind.PARAM_COLLECTION, DocNodeKind.BLOCK]
    assert_tokens_covered(parser_context)

def test_param_names() -> None:
    parser_context = parse('/**\n * @param options.name - dotted\n * @param $el - dollar\n */')
    assert message_ids(parser_context) == []
    assert [block.parameter_name for block in parser_context.doc_comment.params.blocks] == [
        'options.name', '$el']

def test_incomplete_param() -> None:
    parser_context = parse('''/**
 * @param - The first
 * @param x The second
 * @param 1x - The third
 */''')
    assert message_ids(parser_context) == [
        'tsdoc-param-tag-with-invalid-name',
        'tsdoc-param-tag-missing-hyphen',
        'tsdoc-param-tag-with-invalid-name',
    ]
    blocks = parser_context.doc_comment.params.blocks
    assert [block.parameter_name for block in blocks] == ['', '', '']
    # the unparsed text is kept as the block content
    assert paragraph_text(blocks[1].content).strip() == 'x The second'
    assert_tokens_covered(parser_context)

def test_custom_blocks() -> None:
    parser_context = parse('''/**
 * Summary.
 * @example
 * First
 * @example
 * Second
 * @see other
 * @throws Error
 */''')
    assert message_ids(parser_context) == []
    comment = parser_context.doc_comment
    assert [block.block_tag.tag_name for block in comment.custom_blocks] == [
        '@example', '@example', '@throws']
    assert [block.block_tag.tag_name for block in comment.see_blocks] == ['@see']

def test_repeated_tags() -> None:
    parser_context = parse('/**\n * @remarks one\n * @remarks two\n * @beta @beta\n */')
    assert message_ids(parser_context) == [
        'tsdoc-tag-should-not-be-repeated',
        'tsdoc-tag-should-not-be-repeated',
    ]
    comment = parser_context.doc_comment
    assert comment.remarks_block is not None
    assert paragraph_text(comment.remarks_block.content) == ' one\n'
    assert len(comment.custom_blocks) == 1
    assert len(comment.modifier_tag_set) == 1
    assert len(find_all(comment, DocBlockTag)) == 4
    assert_tokens_covered(parser_context)

def test_custom_tags() -> None:
    configuration = TSDocConfiguration()
    configuration.add_tag_definitions([
        TSDocTagDefinition('@customBlock', TSDocTagSyntaxKind.BLOCK_TAG),
        TSDocTagDefinition('@customModifier', TSDocTagSyntaxKind.MODIFIER_TAG),
        TSDocTagDefinition('@customInline', TSDocTagSyntaxKind.INLINE_TAG),
    ])
    parser_context = parse('/**\n * {@customInline some content} @customModifier\n'
                           ' * @customBlock\n * Content\n * @customBlock\n */', configuration)
    assert message_ids(parser_context) == ['tsdoc-tag-should-not-be-repeated']
    comment = parser_context.doc_comment
    inline, = find_all(comment.summary_section, DocInlineTag)
    assert inline.tag_name == '@customInline'
    assert inline.tag_content == 'some content'
    assert comment.modifier_tag_set.has_tag_name('@custommodifier')
    assert len(comment.custom_blocks) == 2

def test_unsupported_tags() -> None:
    configuration = TSDocConfiguration()
    configuration.add_tag_definition(
        TSDocTagDefinition('@customModifier', TSDocTagSyntaxKind.MODIFIER_TAG))
    assert message_ids(parse('/** @customModifier */', configuration)) == []

    configuration.validation.report_unsupported_tags = True
    assert message_ids(parse('/** @customModifier */', configuration)) == [
        'tsdoc-unsupported-tag']
    configuration.set_support_for_tag('@customModifier', True)
    assert message_ids(parse('/** @customModifier */', configuration)) == []

def test_undefined_tags() -> None:
    parser_context = parse('/** @foo {@bar baz} */')
    assert message_ids(parser_context) == ['tsdoc-undefined-tag', 'tsdoc-undefined-tag']
    comment = parser_context.doc_comment
    block_tag, = find_all(comment, DocBlockTag)
    assert block_tag.tag_name == '@foo'
    assert block_tag.definition is None
    inline_tag, = find_all(comment, DocInlineTag)
    assert inline_tag.tag_name == '@bar'
    assert inline_tag.tag_content == 'baz'

    configuration = TSDocConfiguration()
    configuration.validation.ignore_undefined_tags = True
    assert message_ids(parse('/** @foo {@bar baz} */', configuration)) == []

@pytest.mark.parametrize('text, message_id', [
    ('/** @ */', 'tsdoc-at-sign-without-tag-name'),
    ('/** @1abc */', 'tsdoc-at-sign-without-tag-name'),
    ('/** @beta-x */', 'tsdoc-characters-after-block-tag'),
    ('/** @link */', 'tsdoc-tag-requires-braces'),
    ('/** {@remarks x} */', 'tsdoc-tag-not-inline'),
    ('/** { */', 'tsdoc-malformed-inline-tag'),
    ('/** {@ */', 'tsdoc-malformed-inline-tag'),
    ('/** {@link! x} */', 'tsdoc-malformed-inline-tag'),
    ('/** {@link x */', 'tsdoc-inline-tag-missing-right-brace'),
    ('/** {@link} */', 'tsdoc-link-tag-empty'),
    ('/** } */', 'tsdoc-escape-right-brace'),
    ('/** > */', 'tsdoc-escape-greater-than'),
    ('/** \\a */', 'tsdoc-unnecessary-backslash'),
    ('/** `x */', 'tsdoc-code-span-missing-delimiter'),
    ('/** `` */', 'tsdoc-code-span-empty'),
    ('/** ```ts */', 'tsdoc-code-fence-missing-delimiter'),
    ('/** <1a> */', 'tsdoc-malformed-html-tag'),
    ('/** <a */', 'tsdoc-malformed-html-tag'),
    ('/** <a b="c> */', 'tsdoc-malformed-html-tag'),
    ('/** </a */', 'tsdoc-malformed-html-tag'),
    ('/**\n * @deprecated\n */', 'tsdoc-missing-deprecation-message'),
    ('/** Summary {@inheritDoc Base} */', 'tsdoc-inheritdoc-incompatible-summary'),
    ('/** {@inheritDoc} {@inheritDoc} */', 'tsdoc-tag-should-not-be-repeated'),
    ('Hello', 'tsdoc-comment-missing-opening-delimiter'),
    ('/** Hello', 'tsdoc-comment-missing-closing-delimiter'),
    ])
def test_messages(text: str, message_id: str) -> None:
    parser_context = parse(text)
    assert message_id in message_ids(parser_context)
    assert_tokens_covered(parser_context)

def test_error_text() -> None:
    parser_context = parse('/** a } b */')
    error, = find_all(parser_context.doc_comment, DocErrorText)
    assert error.text == '}'
    assert error.message_id is TSDocMessageId.ESCAPE_RIGHT_BRACE
    message, = parser_context.log
    assert message.doc_node is error
    assert message.text.startswith('(1,7): ')

def test_unterminated_inline_tag() -> None:
    parser_context = parse('/**\n * See {@link Foo\n * for details.\n */')
    error, = find_all(parser_context.doc_comment, DocErrorText)
    # line breaks have no text
    assert error.text == '{@link Foofor details.'
    # the message points at the opening brace
    message, = parser_context.log
    assert message.message_id is TSDocMessageId.INLINE_TAG_MISSING_RIGHT_BRACE
    assert message.text.startswith('(2,8): ')

def test_escapes() -> None:
    parser_context = parse('/** \\@foo \\{ \\} user@example.com */')
    assert message_ids(parser_context) == []
    escaped = find_all(parser_context.doc_comment, DocEscapedText)
    assert [e.decoded_text for e in escaped] == ['@', '{', '}']
    assert [e.encoded_text for e in escaped] == ['\\@', '\\{', '\\}']
    assert find_all(parser_context.doc_comment, DocBlockTag) == []
    assert find_all(parser_context.doc_comment, DocPlainText)[-1].text == ' user@example.com'

def test_link_tags() -> None:
    parser_context = parse('/** {@link https://example.com/a?b | Example} '
                           '{@link Foo.bar} {@link a\\|b | text} */')
    assert message_ids(parser_context) == []
    url, code, escaped = find_all(parser_context.doc_comment, DocLinkTag)
    assert url.url_destination == 'https://example.com/a?b'
    assert url.code_destination is None
    assert url.link_text == 'Example'
    assert code.code_destination == 'Foo.bar'
    assert code.link_text is None
    assert escaped.code_destination == 'a\\|b'
    assert escaped.link_text == 'text'

def test_inline_tag_nested_braces() -> None:
    parser_context = parse('/** {@label {a} b} */')
    assert message_ids(parser_context) == []
    tag, = find_all(parser_context.doc_comment, DocInlineTag)
    assert tag.tag_content == '{a} b'

def test_inherit_doc() -> None:
    parser_context = parse('/**\n * {@inheritDoc Base.method}\n * @param x - The x\n */')
    assert message_ids(parser_context) == []
    comment = parser_context.doc_comment
    assert comment.inherit_doc_tag is not None
    assert comment.inherit_doc_tag.declaration_reference == 'Base.method'
    assert parse('/** {@inheritDoc} */').doc_comment.inherit_doc_tag.declaration_reference is None

def test_code_span() -> None:
    parser_context = parse('/** Use `a {@b} <c>` here */')
    assert message_ids(parser_context) == []
    code, = find_all(parser_context.doc_comment, DocCodeSpan)
    assert code.code == 'a {@b} <c>'

def test_fenced_code() -> None:
    parser_context = parse('''/**
 * Example:
 * ```ts
 * const x = {@link y};
 *   indented
 * ```
 * After.
 */''')
    assert message_ids(parser_context) == []
    section = parser_context.doc_comment.summary_section
    before, fence, after = section.nodes
    assert isinstance(fence, DocFencedCode)
    assert fence.language == 'ts'
    assert fence.code == 'const x = {@link y};\n  indented\n'
    assert isinstance(before, DocParagraph)
    assert isinstance(after, DocParagraph)
    assert paragraph_text(after) == 'After.\n'
    assert_tokens_covered(parser_context)

def test_backticks_inside_a_line_are_not_a_fence() -> None:
    parser_context = parse('/** a ```b``` */')
    assert find_all(parser_context.doc_comment, DocFencedCode) == []

def test_html() -> None:
    parser_context = parse('/** <b>bold</b> <img src="a.png" alt=\'A\'/> */')
    assert message_ids(parser_context) == []
    comment = parser_context.doc_comment
    b, img = find_all(comment, DocHtmlStartTag)
    assert b.name == 'b'
    assert not b.self_closing_tag
    assert b.html_attributes == ()
    assert img.name == 'img'
    assert img.self_closing_tag
    assert [(a.name, a.value) for a in img.html_attributes] == [
        ('src', '"a.png"'), ('alt', "'A'")]
    end, = find_all(comment, DocHtmlEndTag)
    assert end.name == 'b'
    assert_tokens_covered(parser_context)

@pytest.mark.parametrize('text', [
    '', '/**/', '/***/', '/** */', '/** @ */', '/** @param */', '/** @param x */',
    '/** {@link */', '/** {@ */', '/** } > < </ <a <a b <a b= <a b="c */',
    '/** ``` */', '/**\n * ```\n */', '/** \\ */', '/** `` ` */', '/** <a\n * b="c"> */',
    '/**\n * {@link\n */', '/** @remarks @remarks @deprecated */', '/** é @é {@é} */',
    '/**\n\n\n */', '/** * */', 'not a comment', '/** unterminated',
    ])
def test_never_raises(text: str) -> None:
    parser_context = parse(text)
    assert parser_context.doc_comment is not None
    assert_tokens_covered(parser_context)
    assert dump_parser_context(parser_context).startswith('- Comment')
