"""
The tags defined by the TSDoc standard.
"""
from typing import Sequence

from tsdoc.configuration import Standardization, TSDocTagDefinition, TSDocTagSyntaxKind

_BLOCK = TSDocTagSyntaxKind.BLOCK_TAG
_INLINE = TSDocTagSyntaxKind.INLINE_TAG
_MODIFIER = TSDocTagSyntaxKind.MODIFIER_TAG

_CORE = Standardization.CORE
_EXTENDED = Standardization.EXTENDED
_DISCRETIONARY = Standardization.DISCRETIONARY


class StandardTags:
    """
    Namespace for the standard tag definitions.
    """

    alpha = TSDocTagDefinition('@alpha', _MODIFIER, standardization=_DISCRETIONARY)
    """Release stage: the API is in an early stage of development."""

    beta = TSDocTagDefinition('@beta', _MODIFIER, standardization=_DISCRETIONARY)
    """Release stage: the API is experimental and may change."""

    decorator = TSDocTagDefinition('@decorator', _BLOCK, allow_multiple=True, standardization=_EXTENDED)
    """Documents a decorator applied to the declaration."""

    defaultValue = TSDocTagDefinition('@defaultValue', _BLOCK, standardization=_EXTENDED)
    """The default value of a field or property."""

    deprecated = TSDocTagDefinition('@deprecated', _BLOCK, standardization=_CORE)
    """The API is no longer supported; the content explains the alternative."""

    eventProperty = TSDocTagDefinition('@eventProperty', _MODIFIER, standardization=_EXTENDED)

    example = TSDocTagDefinition('@example', _BLOCK, allow_multiple=True, standardization=_EXTENDED)

    experimental = TSDocTagDefinition('@experimental', _MODIFIER, standardization=_DISCRETIONARY)

    inheritDoc = TSDocTagDefinition('@inheritDoc', _INLINE, standardization=_EXTENDED)
    """Copy the documentation from another declaration."""

    internal = TSDocTagDefinition('@internal', _MODIFIER, standardization=_DISCRETIONARY)

    label = TSDocTagDefinition('@label', _INLINE, standardization=_CORE)

    link = TSDocTagDefinition('@link', _INLINE, allow_multiple=True, standardization=_CORE)
    """A hyperlink to a declaration or an URL."""

    override = TSDocTagDefinition('@override', _MODIFIER, standardization=_EXTENDED)

    packageDocumentation = TSDocTagDefinition('@packageDocumentation', _MODIFIER, standardization=_CORE)

    param = TSDocTagDefinition('@param', _BLOCK, allow_multiple=True, standardization=_CORE)
    """Documents a function parameter, followed by the name and a hyphen."""

    privateRemarks = TSDocTagDefinition('@privateRemarks', _BLOCK, standardization=_CORE)

    public = TSDocTagDefinition('@public', _MODIFIER, standardization=_DISCRETIONARY)

    readonly = TSDocTagDefinition('@readonly', _MODIFIER, standardization=_EXTENDED)

    remarks = TSDocTagDefinition('@remarks', _BLOCK, standardization=_CORE)
    """Ends the summary section and starts the detailed documentation."""

    returns = TSDocTagDefinition('@returns', _BLOCK, standardization=_CORE)

    sealed = TSDocTagDefinition('@sealed', _MODIFIER, standardization=_EXTENDED)

    see = TSDocTagDefinition('@see', _BLOCK, allow_multiple=True, standardization=_EXTENDED)

    throws = TSDocTagDefinition('@throws', _BLOCK, allow_multiple=True, standardization=_EXTENDED)

    typeParam = TSDocTagDefinition('@typeParam', _BLOCK, allow_multiple=True, standardization=_CORE)
    """Documents a generic type parameter, followed by the name and a hyphen."""

    virtual = TSDocTagDefinition('@virtual', _MODIFIER, standardization=_EXTENDED)

    all_definitions: Sequence[TSDocTagDefinition] = (
        alpha, beta, decorator, defaultValue, deprecated, eventProperty, example,
        experimental, inheritDoc, internal, label, link, override, packageDocumentation,
        param, privateRemarks, public, readonly, remarks, returns, sealed, see, throws,
        typeParam, virtual,
    )
