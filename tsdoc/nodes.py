"""
The documentation AST.

The node types form a closed set, each node carries its L{DocNodeKind} in
the C{kind} attribute and consumers dispatch on it. Leaf nodes keep the
L{TokenSequence} they were parsed from in L{DocLeaf.excerpt}, container
nodes expose their children with L{DocNode.get_child_nodes()}, in document
order. A tree is built once by the parser and is not modified afterwards.
"""
import enum
from typing import TYPE_CHECKING, ClassVar, Dict, Iterator, List, Optional, Sequence

if TYPE_CHECKING:
    from tsdoc.configuration import TSDocConfiguration, TSDocTagDefinition
    from tsdoc.messages import TSDocMessageId
    from tsdoc.tokenreader import TokenSequence


class DocNodeKind(enum.Enum):
    BLOCK = 'Block'
    BLOCK_TAG = 'BlockTag'
    CODE_SPAN = 'CodeSpan'
    COMMENT = 'Comment'
    ERROR_TEXT = 'ErrorText'
    ESCAPED_TEXT = 'EscapedText'
    EXCERPT = 'Excerpt'
    FENCED_CODE = 'FencedCode'
    HTML_ATTRIBUTE = 'HtmlAttribute'
    HTML_END_TAG = 'HtmlEndTag'
    HTML_START_TAG = 'HtmlStartTag'
    INHERIT_DOC_TAG = 'InheritDocTag'
    INLINE_TAG = 'InlineTag'
    LINK_TAG = 'LinkTag'
    PARAGRAPH = 'Paragraph'
    PARAM_BLOCK = 'ParamBlock'
    PARAM_COLLECTION = 'ParamCollection'
    PLAIN_TEXT = 'PlainText'
    SECTION = 'Section'
    SOFT_BREAK = 'SoftBreak'


class ExcerptKind(enum.Enum):
    """
    Names the token spans that container nodes own directly.
    """
    SPACING = 'Spacing'
    PARAM_BLOCK_PARAMETER_NAME = 'ParamBlock_ParameterName'
    PARAM_BLOCK_HYPHEN = 'ParamBlock_Hyphen'
    HTML_START_TAG_OPENING_DELIMITER = 'HtmlStartTag_OpeningDelimiter'
    HTML_START_TAG_NAME = 'HtmlStartTag_Name'
    HTML_START_TAG_CLOSING_DELIMITER = 'HtmlStartTag_ClosingDelimiter'


##################################################
## Base classes
##################################################

class DocNode:
    """
    Base class of all the nodes.
    """

    kind: ClassVar[DocNodeKind]

    def __init__(self, configuration: 'TSDocConfiguration'):
        self.configuration = configuration

    @property
    def is_leaf(self) -> bool:
        return False

    def get_child_nodes(self) -> Sequence['DocNode']:
        """
        The children, in document order. Leaves have none.
        """
        return ()

    def __repr__(self) -> str:
        return f'<{type(self).__name__}>'


class DocLeaf(DocNode):
    """
    A node without children, parsed from a known run of tokens.
    """

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence'):
        super().__init__(configuration)
        self.excerpt = excerpt
        """The tokens this node was parsed from."""

    @property
    def is_leaf(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.excerpt.to_string()!r}>'


class DocNodeContainer(DocNode):
    """
    A node that holds an ordered list of child nodes.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 child_nodes: Sequence[DocNode] = ()):
        super().__init__(configuration)
        self._nodes: List[DocNode] = list(child_nodes)

    @property
    def nodes(self) -> Sequence[DocNode]:
        return tuple(self._nodes)

    def get_child_nodes(self) -> Sequence[DocNode]:
        return tuple(self._nodes)

    def append_node(self, node: DocNode) -> None:
        self._nodes.append(node)

    def append_nodes(self, nodes: Sequence[DocNode]) -> None:
        self._nodes.extend(nodes)


##################################################
## Text content
##################################################

class DocExcerpt(DocLeaf):
    """
    Syntax owned by a container node, i.e. the hyphen of a C{@param} block.
    """
    kind = DocNodeKind.EXCERPT

    def __init__(self, configuration: 'TSDocConfiguration',
                 excerpt_kind: ExcerptKind, excerpt: 'TokenSequence'):
        super().__init__(configuration, excerpt)
        self.excerpt_kind = excerpt_kind

    @property
    def content(self) -> str:
        return self.excerpt.to_string()


class DocPlainText(DocLeaf):
    """
    Text without any special meaning. It never contains newlines.
    """
    kind = DocNodeKind.PLAIN_TEXT

    @property
    def text(self) -> str:
        return self.excerpt.to_string()


class DocSoftBreak(DocLeaf):
    """
    A line break inside a paragraph, that may be rendered as a space.
    """
    kind = DocNodeKind.SOFT_BREAK


class DocEscapedText(DocLeaf):
    """
    A backslash followed by a punctuation character: C{\\@} stands for C{@}.
    """
    kind = DocNodeKind.ESCAPED_TEXT

    @property
    def encoded_text(self) -> str:
        return self.excerpt.to_string()

    @property
    def decoded_text(self) -> str:
        return self.encoded_text[1:]


class DocErrorText(DocLeaf):
    """
    Input that could not be parsed. The text is kept so that nothing is lost.
    """
    kind = DocNodeKind.ERROR_TEXT

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence',
                 message_id: 'TSDocMessageId', error_message: str,
                 error_location: 'TokenSequence'):
        super().__init__(configuration, excerpt)
        self.message_id = message_id
        self.error_message = error_message
        self.error_location = error_location
        """The tokens to underline, which can be narrower than the excerpt."""

    @property
    def text(self) -> str:
        return self.excerpt.to_string()


class DocCodeSpan(DocLeaf):
    """
    Code between single backticks.
    """
    kind = DocNodeKind.CODE_SPAN

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence', code: str):
        super().__init__(configuration, excerpt)
        self.code = code


class DocFencedCode(DocLeaf):
    """
    A block of code between lines of triple backticks.
    """
    kind = DocNodeKind.FENCED_CODE

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence',
                 language: str, code: str):
        super().__init__(configuration, excerpt)
        self.language = language
        self.code = code


##################################################
## Tags
##################################################

class DocBlockTag(DocLeaf):
    """
    A tag written as C{@name}, outside of braces: a block tag, a modifier
    tag or a tag that is not defined.
    """
    kind = DocNodeKind.BLOCK_TAG

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence',
                 tag_name: str, definition: Optional['TSDocTagDefinition'] = None):
        super().__init__(configuration, excerpt)
        self.tag_name = tag_name
        self.tag_name_with_upper_case = tag_name.upper()
        self.definition = definition
        """The definition the name resolved to, C{None} for undefined tags."""


class DocInlineTagBase(DocLeaf):
    """
    Common base of the tags written between braces: C{{@name content}}.
    """

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence',
                 tag_name: str, tag_content: str,
                 definition: Optional['TSDocTagDefinition'] = None):
        super().__init__(configuration, excerpt)
        self.tag_name = tag_name
        self.tag_name_with_upper_case = tag_name.upper()
        self.tag_content = tag_content
        """The raw text between the tag name and the closing brace, without surrounding spacing."""
        self.definition = definition


class DocInlineTag(DocInlineTagBase):
    kind = DocNodeKind.INLINE_TAG


class DocLinkTag(DocInlineTagBase):
    """
    The C{{@link}} tag. The destination is either a declaration reference
    (not resolved) or an URL, and may be followed by C{|} and a link text.
    """
    kind = DocNodeKind.LINK_TAG

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence',
                 tag_name: str, tag_content: str,
                 definition: Optional['TSDocTagDefinition'] = None,
                 code_destination: Optional[str] = None,
                 url_destination: Optional[str] = None,
                 link_text: Optional[str] = None):
        super().__init__(configuration, excerpt, tag_name, tag_content, definition)
        self.code_destination = code_destination
        self.url_destination = url_destination
        self.link_text = link_text


class DocInheritDocTag(DocInlineTagBase):
    """
    The C{{@inheritDoc}} tag, with an optional declaration reference.
    """
    kind = DocNodeKind.INHERIT_DOC_TAG

    @property
    def declaration_reference(self) -> Optional[str]:
        return self.tag_content or None


##################################################
## HTML
##################################################

class DocHtmlAttribute(DocLeaf):
    """
    An attribute of an HTML start tag: C{name="value"}.
    """
    kind = DocNodeKind.HTML_ATTRIBUTE

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence',
                 name: str, value: str):
        super().__init__(configuration, excerpt)
        self.name = name
        self.value = value
        """The value, including the quotes."""


class DocHtmlStartTag(DocNodeContainer):
    kind = DocNodeKind.HTML_START_TAG

    def __init__(self, configuration: 'TSDocConfiguration', name: str,
                 child_nodes: Sequence[DocNode], self_closing_tag: bool = False):
        super().__init__(configuration, child_nodes)
        self.name = name
        self.self_closing_tag = self_closing_tag

    @property
    def html_attributes(self) -> Sequence[DocHtmlAttribute]:
        return tuple(n for n in self._nodes if isinstance(n, DocHtmlAttribute))


class DocHtmlEndTag(DocLeaf):
    kind = DocNodeKind.HTML_END_TAG

    def __init__(self, configuration: 'TSDocConfiguration', excerpt: 'TokenSequence', name: str):
        super().__init__(configuration, excerpt)
        self.name = name


##################################################
## Structure
##################################################

class DocParagraph(DocNodeContainer):
    """
    A run of inline content. Paragraphs are separated by blank lines.
    """
    kind = DocNodeKind.PARAGRAPH


class DocSection(DocNodeContainer):
    """
    A sequence of paragraphs and fenced code blocks.
    """
    kind = DocNodeKind.SECTION

    def append_node_in_paragraph(self, node: DocNode) -> None:
        """
        Append an inline node to the last paragraph, starting a new one if needed.
        """
        last = self._nodes[-1] if self._nodes else None
        if not isinstance(last, DocParagraph):
            last = DocParagraph(self.configuration)
            self._nodes.append(last)
        last.append_node(node)

    def is_empty(self, ignored: Sequence[DocNode] = ()) -> bool:
        """
        Whether the section has no content besides spacing and line breaks.

        @param ignored: Nodes that do not count as content.
        """
        for node in walk(self):
            if node.kind is DocNodeKind.SOFT_BREAK or node in ignored:
                continue
            if isinstance(node, DocPlainText) and not node.text.strip():
                continue
            if node.is_leaf:
                return False
        return True


class DocBlock(DocNode):
    """
    A block tag followed by its content.
    """
    kind = DocNodeKind.BLOCK

    def __init__(self, configuration: 'TSDocConfiguration', block_tag: DocBlockTag):
        super().__init__(configuration)
        self.block_tag = block_tag
        self.content = DocSection(configuration)

    def get_child_nodes(self) -> Sequence[DocNode]:
        return (self.block_tag, self.content)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.block_tag.tag_name}>'


class DocParamBlock(DocBlock):
    """
    A C{@param} or C{@typeParam} block: C{@param name - description}.
    """
    kind = DocNodeKind.PARAM_BLOCK

    def __init__(self, configuration: 'TSDocConfiguration', block_tag: DocBlockTag,
                 parameter_name: str, excerpts: Sequence[DocExcerpt] = ()):
        super().__init__(configuration, block_tag)
        self.parameter_name = parameter_name
        """The parameter name, C{''} if it could not be parsed."""
        self._excerpts = tuple(excerpts)

    def get_child_nodes(self) -> Sequence[DocNode]:
        return (self.block_tag, *self._excerpts, self.content)


class DocParamCollection(DocNode):
    kind = DocNodeKind.PARAM_COLLECTION

    def __init__(self, configuration: 'TSDocConfiguration'):
        super().__init__(configuration)
        self._blocks: List[DocParamBlock] = []

    @property
    def blocks(self) -> Sequence[DocParamBlock]:
        return tuple(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def add(self, block: DocParamBlock) -> None:
        self._blocks.append(block)

    def try_get_block_by_name(self, parameter_name: str) -> Optional[DocParamBlock]:
        for block in self._blocks:
            if block.parameter_name == parameter_name:
                return block
        return None

    def get_child_nodes(self) -> Sequence[DocNode]:
        return tuple(self._blocks)


##################################################
## Modifier tags
##################################################

class ModifierTagSet:
    """
    The modifier tags of a comment, keyed by their canonical name: a tag and
    its synonyms are interchangeable for membership tests.
    """

    def __init__(self, configuration: 'TSDocConfiguration'):
        self._configuration = configuration
        self._nodes: List[DocBlockTag] = []
        self._nodes_by_name: Dict[str, DocBlockTag] = {}

    @property
    def nodes(self) -> Sequence[DocBlockTag]:
        """The tags in the order they were added, without duplicates."""
        return tuple(self._nodes)

    def _canonical_name(self, tag_name: str) -> str:
        definition = self._configuration.try_get_tag_definition(tag_name)
        if definition is None:
            return tag_name.upper()
        return definition.tag_name_with_upper_case

    def has_tag_name(self, tag_name: str) -> bool:
        return self._canonical_name(tag_name) in self._nodes_by_name

    def has_tag(self, definition: 'TSDocTagDefinition') -> bool:
        return self.try_get_tag(definition) is not None

    def try_get_tag(self, definition: 'TSDocTagDefinition') -> Optional[DocBlockTag]:
        return self._nodes_by_name.get(definition.tag_name_with_upper_case)

    def add_tag(self, block_tag: DocBlockTag) -> bool:
        """
        @return: C{False} if a tag with the same canonical name was already present.
        """
        if block_tag.definition is not None:
            name = block_tag.definition.tag_name_with_upper_case
        else:
            name = self._canonical_name(block_tag.tag_name)
        if name in self._nodes_by_name:
            return False
        self._nodes_by_name[name] = block_tag
        self._nodes.append(block_tag)
        return True

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, tag_name: str) -> bool:
        return self.has_tag_name(tag_name)


class StandardModifierTagSet(ModifierTagSet):
    """
    Shortcuts for the standard modifier tags.
    """

    def _has(self, attr_name: str) -> bool:
        from tsdoc.standardtags import StandardTags
        return self.has_tag(getattr(StandardTags, attr_name))

    def is_alpha(self) -> bool:
        return self._has('alpha')

    def is_beta(self) -> bool:
        return self._has('beta')

    def is_event_property(self) -> bool:
        return self._has('eventProperty')

    def is_experimental(self) -> bool:
        return self._has('experimental')

    def is_internal(self) -> bool:
        return self._has('internal')

    def is_override(self) -> bool:
        return self._has('override')

    def is_package_documentation(self) -> bool:
        return self._has('packageDocumentation')

    def is_public(self) -> bool:
        return self._has('public')

    def is_readonly(self) -> bool:
        return self._has('readonly')

    def is_sealed(self) -> bool:
        return self._has('sealed')

    def is_virtual(self) -> bool:
        return self._has('virtual')


##################################################
## Comment
##################################################

class DocComment(DocNode):
    """
    The root of the tree. Blocks are sorted into dedicated slots based on
    their tag, whatever their position in the comment.
    """
    kind = DocNodeKind.COMMENT

    def __init__(self, configuration: 'TSDocConfiguration'):
        super().__init__(configuration)

        self.summary_section = DocSection(configuration)
        """The content before the first block tag."""

        self.remarks_block: Optional[DocBlock] = None
        self.private_remarks: Optional[DocBlock] = None
        self.deprecated_block: Optional[DocBlock] = None
        self.params = DocParamCollection(configuration)
        self.type_params = DocParamCollection(configuration)
        self.returns_block: Optional[DocBlock] = None
        self.inherit_doc_tag: Optional[DocInheritDocTag] = None
        """The C{{@inheritDoc}} tag, which also appears in its paragraph."""

        self.see_blocks: List[DocBlock] = []
        self.custom_blocks: List[DocBlock] = []
        """Other blocks, in document order."""

        self.modifier_tag_set = StandardModifierTagSet(configuration)
        """The modifier tags, which also appear in their paragraphs."""

    def append_custom_block(self, block: DocBlock) -> None:
        self.custom_blocks.append(block)

    def get_child_nodes(self) -> Sequence[DocNode]:
        nodes: List[DocNode] = [self.summary_section]
        for block in (self.remarks_block, self.private_remarks, self.deprecated_block):
            if block is not None:
                nodes.append(block)
        if self.params.blocks:
            nodes.append(self.params)
        if self.type_params.blocks:
            nodes.append(self.type_params)
        if self.returns_block is not None:
            nodes.append(self.returns_block)
        nodes.extend(self.custom_blocks)
        nodes.extend(self.see_blocks)
        return tuple(nodes)


def walk(node: DocNode) -> Iterator[DocNode]:
    """
    Depth-first, pre-order traversal: the node, then each child in order.
    """
    yield node
    for child in node.get_child_nodes():
        yield from walk(child)

def iter_leaves(node: DocNode) -> Iterator[DocLeaf]:
    for n in walk(node):
        if isinstance(n, DocLeaf):
            yield n

