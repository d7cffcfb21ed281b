"""
Human readable dump of a documentation tree.

Each node is printed on its own line, indented by its depth, leaves are
followed by the source text of their excerpt::

    - Comment
      - Section
        - Paragraph
          - PlainText: 'Returns the average of two numbers.'
          - SoftBreak: ''
"""
from typing import List

from tsdoc.nodes import DocExcerpt, DocLeaf, DocNode
from tsdoc.parser import ParserContext


def _describe(node: DocNode) -> str:
    label = node.kind.value
    if isinstance(node, DocExcerpt):
        label = f'{label}({node.excerpt_kind.value})'
    if isinstance(node, DocLeaf):
        return f'{label}: {node.excerpt.to_string()!r}'
    return label


def _dump(node: DocNode, depth: int, lines: List[str]) -> None:
    lines.append('{}- {}'.format('  ' * depth, _describe(node)))
    for child in node.get_child_nodes():
        _dump(child, depth + 1, lines)


def dump_node(node: DocNode) -> str:
    """
    Dump a node and all its descendants, in document order.
    """
    lines: List[str] = []
    _dump(node, 0, lines)
    return '\n'.join(lines)


def dump_messages(parser_context: ParserContext) -> str:
    """
    One line per message: C{message-id: (line,column): text}.
    """
    return '\n'.join(f'{message.message_id}: {message.text}'
                     for message in parser_context.log)


def dump_parser_context(parser_context: ParserContext) -> str:
    """
    Dump the tree of a parse result, followed by its messages if any.
    """
    text = dump_node(parser_context.doc_comment)
    if parser_context.log:
        text += '\n' + dump_messages(parser_context)
    return text
