"""
Load C{tsdoc.json} configuration files.

A configuration file can extend other files, the chain is resolved when the
file is loaded and flattened into a L{TSDocConfiguration} by
L{TSDocConfigFile.configure_parser}. Loading never raises: problems are
recorded in the L{TSDocConfigFile.log} of the file they concern.

Example of a C{tsdoc.json}::

    {
      "$schema": "https://developer.microsoft.com/json-schemas/tsdoc/v0/tsdoc.schema.json",
      "extends": ["./base/tsdoc-base.json", "my-package/dist/tsdoc.json"],
      "tagDefinitions": [{"tagName": "@myTag", "syntaxKind": "modifier"}],
      "synonyms": {"add": {"@readonly": ["@readonly2"]}},
      "supportForTags": {"@myTag": true}
    }
"""
import importlib.resources
import importlib.util
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Union

import attr
from jsonschema import Draft202012Validator

from tsdoc.configuration import (
    TSDocConfiguration, TSDocTagDefinition, TSDocTagSyntaxKind, explain_if_invalid_tag_name
)
from tsdoc.messages import ParserMessageLog, TSDocMessageId
from tsdoc.textrange import TextRange

logger = logging.getLogger(__name__)

CONFIG_FILENAME = 'tsdoc.json'

CURRENT_SCHEMA_URL = 'https://developer.microsoft.com/json-schemas/tsdoc/v0/tsdoc.schema.json'

# Files that mark the root of a project, the search for a tsdoc.json stops there.
PROJECT_ROOT_MARKERS = ('package.json', 'tsconfig.json', 'pyproject.toml')

_SYNTAX_KINDS = {
    'inline': TSDocTagSyntaxKind.INLINE_TAG,
    'block': TSDocTagSyntaxKind.BLOCK_TAG,
    'modifier': TSDocTagSyntaxKind.MODIFIER_TAG,
}

_validator: Optional[Draft202012Validator] = None

def _get_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        schema_file = importlib.resources.files('tsdoc.config') / 'tsdoc.schema.json'
        schema = json.loads(schema_file.read_text(encoding='utf-8'))
        Draft202012Validator.check_schema(schema)
        _validator = Draft202012Validator(schema)
    return _validator


class TSDocConfigFile:
    """
    The contents of a C{tsdoc.json} file, along with the files it extends.

    Use L{load_for_folder} or L{load_file} to create instances.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path
        self.file_not_found = False
        self.tsdoc_schema = ''
        """The C{$schema} value, C{''} when the file was not loaded."""

        self.extends_paths: List[str] = []
        """The C{extends} entries, as written."""

        self.extends_files: List['TSDocConfigFile'] = []
        """The files that were resolved from L{extends_paths}, in the same order."""

        self.no_standard_tags: Optional[bool] = None
        self.tag_definitions: List[TSDocTagDefinition] = []
        self.synonym_additions: Dict[str, List[str]] = {}
        self.synonym_deletions: Dict[str, List[str]] = {}
        self.support_for_tags: Dict[str, bool] = {}
        self.log = ParserMessageLog()

    def __repr__(self) -> str:
        return f'<TSDocConfigFile {self.file_path!r}>'

    ##################################################
    ## Loading
    ##################################################

    @classmethod
    def find_config_path_for_folder(cls, folder: Union[str, 'os.PathLike[str]']) -> Path:
        """
        Look for the nearest C{tsdoc.json}, from the folder upward. The search
        stops at the first folder holding one of the L{PROJECT_ROOT_MARKERS}.

        @return: The path of the file found, or C{<folder>/tsdoc.json} if none exists.
        """
        start = Path(os.path.abspath(folder))
        current = start
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.is_file():
                return candidate
            if any((current / marker).exists() for marker in PROJECT_ROOT_MARKERS):
                break
            if current.parent == current:
                break
            current = current.parent
        return start / CONFIG_FILENAME

    @classmethod
    def load_for_folder(cls, folder: Union[str, 'os.PathLike[str]']) -> 'TSDocConfigFile':
        """
        Load the configuration that applies to the files of a folder.
        """
        return cls.load_file(cls.find_config_path_for_folder(folder))

    @classmethod
    def load_file(cls, file_path: Union[str, 'os.PathLike[str]']) -> 'TSDocConfigFile':
        """
        Load a configuration file and the files it extends.
        """
        return cls._load(os.path.abspath(file_path), frozenset())

    @classmethod
    def _load(cls, file_path: str, ancestors: FrozenSet[str]) -> 'TSDocConfigFile':
        config_file = cls(file_path)
        config_file._load_contents()
        config_file._load_extends(ancestors | {file_path})
        return config_file

    def _report(self, message_id: TSDocMessageId, message_text: str,
                text_range: TextRange = TextRange.empty) -> None:
        logger.debug('%s: %s: %s', self.file_path, message_id, message_text)
        self.log.add_message_for_text_range(message_id, message_text, text_range)

    def _load_contents(self) -> None:
        logger.debug('Loading TSDoc configuration %s', self.file_path)
        try:
            with open(self.file_path, encoding='utf-8') as f:
                text = f.read()
        except FileNotFoundError:
            self.file_not_found = True
            self._report(TSDocMessageId.CONFIG_FILE_NOT_FOUND, 'File not found')
            return
        except UnicodeDecodeError as e:
            self._report(TSDocMessageId.CONFIG_INVALID_JSON,
                         f'Error parsing JSON input: the file is not valid UTF-8 ({e.reason})')
            return
        except OSError as e:
            self._report(TSDocMessageId.CONFIG_READ_ERROR,
                         f'Error reading file: {e.strerror or e}')
            return

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            self._report(TSDocMessageId.CONFIG_INVALID_JSON,
                         f'Error parsing JSON input: {e.msg}',
                         TextRange.from_string_range(text, e.pos, e.pos))
            return

        errors = sorted(_get_validator().iter_errors(data), key=lambda e: e.json_path)
        if errors:
            for error in errors:
                self._report(TSDocMessageId.CONFIG_SCHEMA_ERROR,
                             f'Error loading config file: {error.json_path}: {error.message}')
            return

        schema = data.get('$schema', '')
        if schema and schema != CURRENT_SCHEMA_URL:
            self._report(TSDocMessageId.CONFIG_UNSUPPORTED_SCHEMA,
                         f'Unsupported JSON "$schema" value; expecting "{CURRENT_SCHEMA_URL}"')
            return
        self.tsdoc_schema = schema

        self.extends_paths = list(data.get('extends', ()))
        self.no_standard_tags = data.get('noStandardTags')

        synonyms = data.get('synonyms', {})
        self._load_tag_definitions(data.get('tagDefinitions', ()), dict(synonyms.get('add', {})))
        for tag_name, deleted in synonyms.get('remove', {}).items():
            if self._check_tag_names([tag_name]) and deleted:
                self.synonym_deletions[tag_name] = self._check_tag_names(deleted)

        for tag_name, supported in data.get('supportForTags', {}).items():
            if self._check_tag_names([tag_name]):
                self.support_for_tags[tag_name] = supported

    def _check_tag_names(self, tag_names: Sequence[str]) -> List[str]:
        """
        Report the invalid names and return the valid ones.
        """
        valid = []
        for tag_name in tag_names:
            explanation = explain_if_invalid_tag_name(tag_name)
            if explanation is None:
                valid.append(tag_name)
            else:
                self._report(TSDocMessageId.CONFIG_INVALID_TAG_NAME,
                             f'Error loading config file: {explanation}: "{tag_name}"')
        return valid

    def _load_tag_definitions(self, definitions: Sequence[Mapping[str, Any]],
                              synonym_additions: Dict[str, List[str]]) -> None:
        """
        Create the tag definitions. The synonyms that are added to a tag
        defined in this same file become part of its definition, the others
        are kept in L{synonym_additions}.
        """
        seen = set()
        for entry in definitions:
            tag_name = entry['tagName']
            if not self._check_tag_names([tag_name]):
                continue
            if tag_name.upper() in seen:
                self._report(TSDocMessageId.CONFIG_DUPLICATE_TAG_NAME,
                             f'The "tagDefinitions" field specifies more than one tag '
                             f'with the name "{tag_name}"')
                continue
            seen.add(tag_name.upper())

            synonyms = self._check_tag_names(entry.get('synonyms', ()))
            for added_to in list(synonym_additions):
                if added_to.upper() == tag_name.upper():
                    synonyms.extend(self._check_tag_names(synonym_additions.pop(added_to)))

            self.tag_definitions.append(TSDocTagDefinition(
                tag_name, _SYNTAX_KINDS[entry['syntaxKind']],
                allow_multiple=entry.get('allowMultiple', False),
                synonyms=synonyms))

        for tag_name, added in synonym_additions.items():
            if self._check_tag_names([tag_name]) and added:
                self.synonym_additions[tag_name] = self._check_tag_names(added)

    def _load_extends(self, ancestors: FrozenSet[str]) -> None:
        for extends_path in self.extends_paths:
            resolved = self._resolve_extends_path(extends_path)
            if resolved is None:
                self._report(TSDocMessageId.CONFIG_UNRESOLVED_EXTENDS,
                             f'Unable to resolve "extends" reference to "{extends_path}"')
                continue
            if resolved in ancestors:
                self._report(TSDocMessageId.CONFIG_CYCLIC_EXTENDS,
                             f'Circular reference encountered for "extends" field of "{resolved}"')
                continue
            logger.debug('%s extends %s', self.file_path, resolved)
            self.extends_files.append(self._load(resolved, ancestors))

    def _resolve_extends_path(self, extends_path: str) -> Optional[str]:
        """
        Paths starting with C{.} or absolute are relative to this file, other
        paths name a file inside a package: they are looked up in the
        C{node_modules} folders from this file's folder upward, then in the
        installed Python packages.
        """
        folder = os.path.dirname(self.file_path)
        if extends_path.startswith('.') or os.path.isabs(extends_path):
            return os.path.normpath(os.path.join(folder, extends_path))

        current = folder
        while True:
            candidate = os.path.join(current, 'node_modules', extends_path)
            if os.path.isfile(candidate):
                return os.path.normpath(candidate)
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent

        package, _, inner_path = extends_path.partition('/')
        if not inner_path or not package.isidentifier():
            return None
        try:
            spec = importlib.util.find_spec(package)
        except (ImportError, ValueError):
            return None
        if spec is None or not spec.submodule_search_locations:
            return None
        for location in spec.submodule_search_locations:
            candidate = os.path.join(location, inner_path)
            if os.path.isfile(candidate):
                return os.path.normpath(candidate)
        return None

    ##################################################
    ## Results
    ##################################################

    @property
    def has_errors(self) -> bool:
        """
        Whether this file or one of the files it extends has reported problems.
        """
        return bool(self.log) or any(f.has_errors for f in self.extends_files)

    def get_error_summary(self) -> str:
        """
        A readable report of the problems of this file and the files it extends.
        """
        lines = self._get_error_lines()
        if not lines:
            return 'No errors.'
        return '\n'.join(lines)

    def _get_error_lines(self) -> List[str]:
        lines = [f'{self.file_path}: {message.text}' for message in self.log]
        for extends_file in self.extends_files:
            lines.extend(extends_file._get_error_lines())
        return lines

    def _find_no_standard_tags(self) -> Optional[bool]:
        if self.no_standard_tags is not None:
            return self.no_standard_tags
        for extends_file in reversed(self.extends_files):
            value = extends_file._find_no_standard_tags()
            if value is not None:
                return value
        return None

    def configure_parser(self, configuration: TSDocConfiguration) -> None:
        """
        Reset the configuration and apply this file to it.

        The extended files are applied first, in order, so that this file can
        override their settings. C{noStandardTags} is taken from the nearest
        file that specifies it.

        @raises ConfigurationError: If the definitions conflict with each
            other, or with the standard tags.
        """
        configuration.clear(bool(self._find_no_standard_tags()))
        self._apply(configuration)

    def _apply(self, configuration: TSDocConfiguration) -> None:
        for extends_file in self.extends_files:
            extends_file._apply(configuration)

        configuration.add_tag_definitions(self.tag_definitions)

        for tag_name, synonyms in self.synonym_additions.items():
            configuration.add_synonym(tag_name, *synonyms)
        for tag_name, synonyms in self.synonym_deletions.items():
            configuration.remove_synonym(tag_name, *synonyms)

        if self.support_for_tags:
            configuration.validation.report_unsupported_tags = True
            for tag_name, supported in self.support_for_tags.items():
                configuration.set_support_for_tag(tag_name, supported)

    def to_configuration(self) -> TSDocConfiguration:
        """
        Build a new L{TSDocConfiguration} from this file.
        """
        configuration = TSDocConfiguration()
        self.configure_parser(configuration)
        return configuration

    def to_dict(self) -> Dict[str, Any]:
        """
        A JSON-like view of the loaded data, including the extended files.
        """
        return {
            'file_path': self.file_path,
            'file_not_found': self.file_not_found,
            'tsdoc_schema': self.tsdoc_schema,
            'extends_paths': list(self.extends_paths),
            'extends_files': [f.to_dict() for f in self.extends_files],
            'no_standard_tags': self.no_standard_tags,
            'tag_definitions': [attr.asdict(d, filter=lambda a, _: a.init) for d in self.tag_definitions],
            'synonym_additions': dict(self.synonym_additions),
            'synonym_deletions': dict(self.synonym_deletions),
            'support_for_tags': dict(self.support_for_tags),
            'messages': [(m.message_id.value, m.text) for m in self.log],
        }
