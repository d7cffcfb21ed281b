"""
The tag vocabulary used by the parser: tag definitions, synonyms and
validation settings.

Mistakes in the configuration are programming errors, not properties of the
parsed text, so they raise L{ConfigurationError} at the offending call.
"""
import enum
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

import attr


class ConfigurationError(Exception):
    """
    Raised when a tag definition or synonym cannot be added to a L{TSDocConfiguration}.
    """


class TSDocTagSyntaxKind(enum.IntEnum):
    """
    Determines the syntax of a tag.
    """

    INLINE_TAG = 0
    """The tag is used inside text content, between braces: C{{@link}}."""

    BLOCK_TAG = 1
    """The tag starts a new block of content: C{@remarks}."""

    MODIFIER_TAG = 2
    """The tag has no content, it only asserts a property: C{@beta}."""


class Standardization(enum.Enum):
    """
    The governance tier of a tag. It does not influence the parsing.
    """
    CORE = 'Core'
    EXTENDED = 'Extended'
    DISCRETIONARY = 'Discretionary'
    NONE = 'None'


_TAG_NAME_RE = re.compile(r'^@[A-Za-z][A-Za-z0-9]*$')

def explain_if_invalid_tag_name(tag_name: str) -> Optional[str]:
    """
    @return: An explanation if the tag name is not valid, C{None} otherwise.
    """
    if not tag_name.startswith('@'):
        return 'A tag name must start with the "@" symbol'
    if not _TAG_NAME_RE.match(tag_name):
        return ('A tag name must start with a letter and contain only '
                'letters and numbers')
    return None

def validate_tag_name(tag_name: str) -> None:
    """
    @raises ConfigurationError: If the tag name is invalid.
    """
    explanation = explain_if_invalid_tag_name(tag_name)
    if explanation is not None:
        raise ConfigurationError(f'{explanation}: {tag_name!r}')


@attr.s(frozen=True, repr=False)
class TSDocTagDefinition:
    """
    Defines a tag. Tags are identified by their name, case-insensitively.
    """

    tag_name: str = attr.ib()
    """The name of the tag, including the C{@} prefix."""

    syntax_kind: TSDocTagSyntaxKind = attr.ib(converter=TSDocTagSyntaxKind)

    allow_multiple: bool = attr.ib(default=False)
    """Whether the tag may appear more than once in a comment."""

    standardization: Standardization = attr.ib(default=Standardization.NONE)

    synonyms: Tuple[str, ...] = attr.ib(default=(), converter=tuple)
    """Alternative names registered together with this definition."""

    tag_name_with_upper_case: str = attr.ib(init=False)

    @tag_name.validator
    def _check_tag_name(self, attribute: 'attr.Attribute[str]', value: str) -> None:
        validate_tag_name(value)

    @synonyms.validator
    def _check_synonyms(self, attribute: 'attr.Attribute[Tuple[str, ...]]',
                        value: Tuple[str, ...]) -> None:
        for synonym in value:
            validate_tag_name(synonym)

    @tag_name_with_upper_case.default
    def _upper(self) -> str:
        return self.tag_name.upper()

    def __repr__(self) -> str:
        return (f'<TSDocTagDefinition {self.tag_name} {self.syntax_kind.name}'
                f'{" allowMultiple" if self.allow_multiple else ""}>')


@attr.s(auto_attribs=True)
class TSDocValidationConfiguration:
    """
    Optional checks performed by the parser.
    """

    ignore_undefined_tags: bool = False
    """Do not report C{tsdoc-undefined-tag} messages."""

    report_unsupported_tags: bool = False
    """Report C{tsdoc-unsupported-tag} for defined tags that are not marked as supported."""


TagReference = Union[str, TSDocTagDefinition]

class TSDocConfiguration:
    """
    A registry of tag definitions and their synonyms.

    A new configuration contains all the L{standard tags <tsdoc.standardtags.StandardTags>},
    marked as supported.
    """

    def __init__(self) -> None:
        self._definitions: List[TSDocTagDefinition] = []
        self._definitions_by_name: Dict[str, TSDocTagDefinition] = {}
        self._synonyms: Dict[TSDocTagDefinition, List[str]] = {}
        self._definitions_by_synonym: Dict[str, TSDocTagDefinition] = {}
        self._supported: Set[TSDocTagDefinition] = set()
        self._frozen = False
        self.validation = TSDocValidationConfiguration()

        from tsdoc.standardtags import StandardTags
        self.add_tag_definitions(StandardTags.all_definitions, supported=True)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> 'TSDocConfiguration':
        """
        Forbid any further modification of this configuration.
        """
        self._frozen = True
        return self

    def _check_not_frozen(self) -> None:
        if self._frozen:
            raise ConfigurationError('This configuration is frozen and cannot be modified')

    @property
    def tag_definitions(self) -> Sequence[TSDocTagDefinition]:
        """The tag definitions, in the order they were added."""
        return tuple(self._definitions)

    @property
    def supported_tag_definitions(self) -> Sequence[TSDocTagDefinition]:
        return tuple(d for d in self._definitions if d in self._supported)

    def clear(self, no_standard_tags: bool = False) -> None:
        """
        Reset this configuration to its initial state.

        @param no_standard_tags: If true, the standard tags are not added back.
        """
        self._check_not_frozen()
        self._definitions.clear()
        self._definitions_by_name.clear()
        self._synonyms.clear()
        self._definitions_by_synonym.clear()
        self._supported.clear()
        self.validation = TSDocValidationConfiguration()
        if not no_standard_tags:
            from tsdoc.standardtags import StandardTags
            self.add_tag_definitions(StandardTags.all_definitions, supported=True)

    def try_get_tag_definition(self, tag_name: str) -> Optional[TSDocTagDefinition]:
        """
        Look up a tag by its name or one of its synonyms, case-insensitively.

        @return: The definition or C{None} if the tag is unknown.
        """
        return self.try_get_tag_definition_with_upper_case(tag_name.upper())

    def try_get_tag_definition_with_upper_case(self, tag_name_with_upper_case: str
                                               ) -> Optional[TSDocTagDefinition]:
        definition = self._definitions_by_name.get(tag_name_with_upper_case)
        if definition is None:
            definition = self._definitions_by_synonym.get(tag_name_with_upper_case)
        return definition

    def _resolve(self, tag: TagReference) -> TSDocTagDefinition:
        if isinstance(tag, TSDocTagDefinition):
            registered = self._definitions_by_name.get(tag.tag_name_with_upper_case)
            if registered is None or registered != tag:
                raise ConfigurationError(f'The tag {tag.tag_name!r} is not defined in this configuration')
            return registered
        definition = self._definitions_by_name.get(tag.upper())
        if definition is None:
            raise ConfigurationError(f'The tag {tag!r} is not defined in this configuration')
        return definition

    def add_tag_definition(self, definition: TSDocTagDefinition, supported: Optional[bool] = None) -> None:
        """
        Define a new tag, or replace the definition of a tag that has the same name
        and syntax kind. The synonyms of the definition are registered as well.

        @param supported: Mark the tag as supported or not, C{None} keeps the
            support of a replaced definition.
        @raises ConfigurationError: If a tag with the same name but another syntax kind
            exists, or if the name is already used as a synonym of another tag.
        """
        self._check_not_frozen()
        upper = definition.tag_name_with_upper_case
        existing = self._definitions_by_name.get(upper)
        if existing is definition:
            if supported is not None:
                self.set_support_for_tag(definition, supported)
            return
        if upper in self._definitions_by_synonym:
            raise ConfigurationError(
                f'The tag name {definition.tag_name!r} is already used as a synonym of '
                f'{self._definitions_by_synonym[upper].tag_name!r}')

        was_supported = False
        if existing is not None:
            if existing.syntax_kind is not definition.syntax_kind:
                raise ConfigurationError(
                    f'The tag {definition.tag_name!r} is already defined as a '
                    f'{existing.syntax_kind.name}, it cannot be redefined as a '
                    f'{definition.syntax_kind.name}')
            was_supported = existing in self._supported
            synonyms = self._synonyms.pop(existing)
            self._supported.discard(existing)
            self._definitions[self._definitions.index(existing)] = definition
            self._synonyms[definition] = synonyms
            for synonym in synonyms:
                self._definitions_by_synonym[synonym.upper()] = definition
        else:
            self._definitions.append(definition)
            self._synonyms[definition] = []
        self._definitions_by_name[upper] = definition

        if supported is None:
            supported = was_supported
        if supported:
            self._supported.add(definition)

        if definition.synonyms:
            self.add_synonym(definition, *definition.synonyms)

    def add_tag_definitions(self, definitions: Iterable[TSDocTagDefinition],
                            supported: Optional[bool] = None) -> None:
        for definition in definitions:
            self.add_tag_definition(definition, supported)

    def remove_tag_definition(self, tag: TagReference) -> None:
        """
        Remove a tag definition together with its synonyms.

        @raises ConfigurationError: If the tag is not defined.
        """
        self._check_not_frozen()
        definition = self._resolve(tag)
        for synonym in self._synonyms.pop(definition):
            del self._definitions_by_synonym[synonym.upper()]
        del self._definitions_by_name[definition.tag_name_with_upper_case]
        self._definitions.remove(definition)
        self._supported.discard(definition)

    def get_synonyms(self, tag: TagReference) -> Sequence[str]:
        """
        @return: The synonyms of a tag, in the order they were added.
        """
        return tuple(self._synonyms[self._resolve(tag)])

    def add_synonym(self, tag: TagReference, *synonyms: str) -> None:
        """
        Add alternative names for a defined tag.

        @raises ConfigurationError: If the tag is unknown, or if a synonym
            collides with another tag name or another tag's synonym.
        """
        self._check_not_frozen()
        definition = self._resolve(tag)
        for synonym in synonyms:
            validate_tag_name(synonym)
            upper = synonym.upper()
            other = self._definitions_by_name.get(upper) or self._definitions_by_synonym.get(upper)
            if other is definition:
                if upper == definition.tag_name_with_upper_case:
                    raise ConfigurationError(
                        f'The synonym {synonym!r} is the name of the tag itself')
                # already a synonym of this tag
                continue
            if other is not None:
                raise ConfigurationError(
                    f'The synonym {synonym!r} is already used by the tag {other.tag_name!r}')
            self._synonyms[definition].append(synonym)
            self._definitions_by_synonym[upper] = definition

    def remove_synonym(self, tag: TagReference, *synonyms: str) -> None:
        """
        Remove synonyms of a tag. Unknown synonyms are ignored.

        @raises ConfigurationError: If the tag is unknown.
        """
        self._check_not_frozen()
        definition = self._resolve(tag)
        current = self._synonyms[definition]
        for synonym in synonyms:
            upper = synonym.upper()
            for existing in current:
                if existing.upper() == upper:
                    current.remove(existing)
                    del self._definitions_by_synonym[upper]
                    break

    def is_known_tag(self, tag: TagReference) -> bool:
        if isinstance(tag, TSDocTagDefinition):
            return self._definitions_by_name.get(tag.tag_name_with_upper_case) == tag
        return self.try_get_tag_definition(tag) is not None

    def is_tag_supported(self, tag: TagReference) -> bool:
        return self._resolve(tag) in self._supported

    def set_support_for_tag(self, tag: TagReference, supported: bool) -> None:
        """
        Mark a defined tag as supported or unsupported by the tooling.
        Unsupported tags are reported when
        L{TSDocValidationConfiguration.report_unsupported_tags} is enabled.
        """
        self._check_not_frozen()
        definition = self._resolve(tag)
        if supported:
            self._supported.add(definition)
        else:
            self._supported.discard(definition)

    def set_support_for_tags(self, tags: Iterable[TagReference], supported: bool) -> None:
        for tag in tags:
            self.set_support_for_tag(tag, supported)

    def __repr__(self) -> str:
        return f'<TSDocConfiguration with {len(self._definitions)} tags>'


_default_configuration: Optional[TSDocConfiguration] = None

def get_default_configuration() -> TSDocConfiguration:
    """
    The frozen configuration used when none is given to the parser.
    """
    global _default_configuration
    if _default_configuration is None:
        _default_configuration = TSDocConfiguration().freeze()
    return _default_configuration
