import json
import os
from pathlib import Path
from typing import Any, List

import pytest

from tsdoc.config import CURRENT_SCHEMA_URL, TSDocConfigFile
from tsdoc.configuration import ConfigurationError, Standardization, TSDocTagSyntaxKind
from tsdoc.messages import TSDocMessageId
from tsdoc.parser import parse
from tsdoc.standardtags import StandardTags

from . import MonkeyPatch, message_ids

ASSETS = Path(os.path.abspath(os.path.dirname(__file__))) / 'configfiles'

def relative(file_path: str) -> str:
    return Path(file_path).relative_to(ASSETS).as_posix()

def ids(config_file: TSDocConfigFile) -> List[TSDocMessageId]:
    return [message.message_id for message in config_file.log]

def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


def test_schema_only() -> None:
    config_file = TSDocConfigFile.load_for_folder(ASSETS / 'p1')
    assert relative(config_file.file_path) == 'p1/tsdoc.json'
    assert not config_file.file_not_found
    assert not config_file.has_errors
    assert config_file.get_error_summary() == 'No errors.'
    assert config_file.tsdoc_schema == CURRENT_SCHEMA_URL
    assert config_file.to_dict() == {
        'file_path': config_file.file_path,
        'file_not_found': False,
        'tsdoc_schema': CURRENT_SCHEMA_URL,
        'extends_paths': [],
        'extends_files': [],
        'no_standard_tags': None,
        'tag_definitions': [],
        'synonym_additions': {},
        'synonym_deletions': {},
        'support_for_tags': {},
        'messages': [],
    }
    configuration = config_file.to_configuration()
    assert configuration.tag_definitions == tuple(StandardTags.all_definitions)

def test_file_not_found() -> None:
    # the package.json stops the search
    config_file = TSDocConfigFile.load_for_folder(ASSETS / 'p2')
    assert relative(config_file.file_path) == 'p2/tsdoc.json'
    assert config_file.file_not_found
    assert config_file.has_errors
    assert ids(config_file) == [TSDocMessageId.CONFIG_FILE_NOT_FOUND]
    assert config_file.get_error_summary() == f'{config_file.file_path}: File not found'

def test_search_upward() -> None:
    config_file = TSDocConfigFile.load_for_folder(ASSETS / 'p3' / 'base1')
    assert relative(config_file.file_path) == 'p3/tsdoc.json'

def test_extends_relative_paths() -> None:
    config_file = TSDocConfigFile.load_for_folder(ASSETS / 'p3')
    assert not config_file.has_errors
    assert config_file.extends_paths == ['./base1/tsdoc-base1.json', './base2/tsdoc-base2.json']
    assert [relative(f.file_path) for f in config_file.extends_files] == [
        'p3/base1/tsdoc-base1.json', 'p3/base2/tsdoc-base2.json']

    configuration = config_file.to_configuration()
    for tag_name in ('@base1', '@base2', '@root'):
        definition = configuration.try_get_tag_definition(tag_name)
        assert definition is not None
        assert definition.syntax_kind is TSDocTagSyntaxKind.MODIFIER_TAG
    # the base files come first
    assert [d.tag_name for d in configuration.tag_definitions][-3:] == [
        '@base1', '@base2', '@root']

    dumped = config_file.to_dict()
    assert dumped['extends_files'][0]['tag_definitions'] == [{
        'tag_name': '@base1',
        'syntax_kind': TSDocTagSyntaxKind.MODIFIER_TAG,
        'allow_multiple': False,
        'standardization': Standardization.NONE,
        'synonyms': [],
    }]

def test_extends_node_modules() -> None:
    config_file = TSDocConfigFile.load_for_folder(ASSETS / 'p4')
    assert not config_file.has_errors
    extends_file, = config_file.extends_files
    assert relative(extends_file.file_path) == 'p4/node_modules/example-lib/dist/tsdoc-example.json'
    configuration = config_file.to_configuration()
    assert configuration.is_known_tag('@libTag')
    assert configuration.is_known_tag('@root')

def test_synonyms_of_own_tags() -> None:
    config_file = TSDocConfigFile.load_for_folder(ASSETS / 'synonyms')
    assert not config_file.has_errors
    foo, = config_file.tag_definitions
    assert foo.synonyms == ('@bar',)
    assert config_file.synonym_additions == {'@readonly': ['@readonly2']}

    configuration = config_file.to_configuration()
    assert configuration.try_get_tag_definition('@bar') is foo
    assert configuration.try_get_tag_definition('@readonly2') is StandardTags.readonly

    parser_context = parse('/**\n * @bar text\n * @readonly2\n */', configuration)
    assert message_ids(parser_context) == []
    comment = parser_context.doc_comment
    block, = comment.custom_blocks
    assert block.block_tag.definition is foo
    assert comment.modifier_tag_set.is_readonly()

def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / 'tsdoc.json'
    path.write_text('{\n  "tagDefinitions": [ }\n}\n')
    config_file = TSDocConfigFile.load_file(path)
    assert not config_file.file_not_found
    assert ids(config_file) == [TSDocMessageId.CONFIG_INVALID_JSON]
    message, = config_file.log
    assert message.text.startswith('(2,')

def test_not_utf8(tmp_path: Path) -> None:
    (tmp_path / 'tsdoc.json').write_bytes(b'{"$schema": "caf\xe9"}')
    config_file = TSDocConfigFile.load_for_folder(tmp_path)
    assert not config_file.file_not_found
    assert ids(config_file) == [TSDocMessageId.CONFIG_INVALID_JSON]
    assert 'UTF-8' in config_file.get_error_summary()

def test_extended_file_not_utf8(tmp_path: Path) -> None:
    (tmp_path / 'base.json').write_bytes(b'{"noStandardTags": true, "x": "\xff"}')
    path = write_json(tmp_path / 'tsdoc.json', {
        'extends': ['./base.json'],
        'tagDefinitions': [{'tagName': '@foo', 'syntaxKind': 'modifier'}],
    })
    config_file = TSDocConfigFile.load_file(path)
    assert ids(config_file) == []
    base, = config_file.extends_files
    assert ids(base) == [TSDocMessageId.CONFIG_INVALID_JSON]
    assert config_file.has_errors
    configuration = config_file.to_configuration()
    assert configuration.try_get_tag_definition('@foo') is not None
    assert configuration.try_get_tag_definition('@param') is not None

def test_read_error(tmp_path: Path) -> None:
    # a folder cannot be read as a file
    path = tmp_path / 'tsdoc.json'
    path.mkdir()
    config_file = TSDocConfigFile.load_file(path)
    assert not config_file.file_not_found
    assert ids(config_file) == [TSDocMessageId.CONFIG_READ_ERROR]

def test_schema_errors(tmp_path: Path) -> None:
    path = write_json(tmp_path / 'tsdoc.json', {
        'tagDefinitions': [{'tagName': '@foo'}],
        'unknownField': 1,
    })
    config_file = TSDocConfigFile.load_file(path)
    assert ids(config_file) == [TSDocMessageId.CONFIG_SCHEMA_ERROR] * 2
    first, second = config_file.log
    assert "'unknownField'" in first.text
    assert '$.tagDefinitions[0]' in second.text
    assert "'syntaxKind'" in second.text
    # nothing is loaded from an invalid file
    assert config_file.tag_definitions == []

def test_unsupported_schema(tmp_path: Path) -> None:
    path = write_json(tmp_path / 'tsdoc.json', {
        '$schema': 'https://example.com/tsdoc.schema.json',
        'noStandardTags': True,
    })
    config_file = TSDocConfigFile.load_file(path)
    assert ids(config_file) == [TSDocMessageId.CONFIG_UNSUPPORTED_SCHEMA]
    assert config_file.no_standard_tags is None

def test_invalid_tag_names(tmp_path: Path) -> None:
    path = write_json(tmp_path / 'tsdoc.json', {
        'tagDefinitions': [
            {'tagName': '@foo', 'syntaxKind': 'block'},
            {'tagName': '@FOO', 'syntaxKind': 'modifier'},
            {'tagName': 'bad', 'syntaxKind': 'modifier'},
        ],
        'synonyms': {'add': {'@param': ['@arg', 'arg2']}},
        'supportForTags': {'@foo': True, '@bad-name': False},
    })
    config_file = TSDocConfigFile.load_file(path)
    assert ids(config_file) == [
        TSDocMessageId.CONFIG_DUPLICATE_TAG_NAME,
        TSDocMessageId.CONFIG_INVALID_TAG_NAME,
        TSDocMessageId.CONFIG_INVALID_TAG_NAME,
        TSDocMessageId.CONFIG_INVALID_TAG_NAME,
    ]
    assert [d.tag_name for d in config_file.tag_definitions] == ['@foo']
    assert config_file.synonym_additions == {'@param': ['@arg']}
    assert config_file.support_for_tags == {'@foo': True}

    # the valid parts still apply
    configuration = config_file.to_configuration()
    assert configuration.try_get_tag_definition('@arg') is StandardTags.param

def test_remove_synonyms(tmp_path: Path) -> None:
    write_json(tmp_path / 'base.json', {
        'synonyms': {'add': {'@param': ['@arg', '@argument']}},
    })
    path = write_json(tmp_path / 'tsdoc.json', {
        'extends': ['./base.json'],
        'synonyms': {
            'add': {'@returns': ['@return']},
            'remove': {'@param': ['@arg']},
        },
    })
    config_file = TSDocConfigFile.load_file(path)
    assert not config_file.has_errors
    assert config_file.synonym_deletions == {'@param': ['@arg']}

    configuration = config_file.to_configuration()
    assert configuration.try_get_tag_definition('@arg') is None
    assert configuration.try_get_tag_definition('@argument') is StandardTags.param
    assert configuration.try_get_tag_definition('@return') is StandardTags.returns

def test_no_standard_tags(tmp_path: Path) -> None:
    write_json(tmp_path / 'base.json', {
        'noStandardTags': True,
        'tagDefinitions': [{'tagName': '@foo', 'syntaxKind': 'block'}],
    })
    path = write_json(tmp_path / 'tsdoc.json', {
        'extends': ['./base.json'],
        'tagDefinitions': [{'tagName': '@bar', 'syntaxKind': 'modifier'}],
    })
    configuration = TSDocConfigFile.load_file(path).to_configuration()
    assert [d.tag_name for d in configuration.tag_definitions] == ['@foo', '@bar']
    assert configuration.try_get_tag_definition('@param') is None

    # the nearest file wins
    path = write_json(tmp_path / 'tsdoc.json', {
        'extends': ['./base.json'],
        'noStandardTags': False,
    })
    configuration = TSDocConfigFile.load_file(path).to_configuration()
    assert configuration.try_get_tag_definition('@param') is StandardTags.param
    assert configuration.try_get_tag_definition('@foo') is not None

def test_support_for_tags(tmp_path: Path) -> None:
    path = write_json(tmp_path / 'tsdoc.json', {
        'tagDefinitions': [
            {'tagName': '@foo', 'syntaxKind': 'modifier'},
            {'tagName': '@other', 'syntaxKind': 'modifier'},
        ],
        'supportForTags': {'@foo': True, '@beta': False},
    })
    configuration = TSDocConfigFile.load_file(path).to_configuration()
    assert configuration.validation.report_unsupported_tags
    assert configuration.is_tag_supported('@foo')
    assert not configuration.is_tag_supported('@other')
    assert not configuration.is_tag_supported('@beta')
    assert configuration.is_tag_supported('@param')

    parser_context = parse('/** @foo @other @beta @public */', configuration)
    assert message_ids(parser_context) == ['tsdoc-unsupported-tag', 'tsdoc-unsupported-tag']

def test_cyclic_extends(tmp_path: Path) -> None:
    write_json(tmp_path / 'a.json', {'extends': ['./tsdoc.json']})
    path = write_json(tmp_path / 'tsdoc.json', {'extends': ['./a.json']})
    config_file = TSDocConfigFile.load_file(path)
    assert ids(config_file) == []
    a, = config_file.extends_files
    assert ids(a) == [TSDocMessageId.CONFIG_CYCLIC_EXTENDS]
    assert a.extends_files == []
    assert config_file.has_errors
    assert config_file.get_error_summary().startswith(f'{a.file_path}: Circular reference')
    # still usable
    config_file.to_configuration()

def test_extends_itself(tmp_path: Path) -> None:
    path = write_json(tmp_path / 'tsdoc.json', {'extends': ['./tsdoc.json']})
    config_file = TSDocConfigFile.load_file(path)
    assert ids(config_file) == [TSDocMessageId.CONFIG_CYCLIC_EXTENDS]
    assert config_file.extends_files == []
    config_file.to_configuration()

def test_unresolved_extends(tmp_path: Path) -> None:
    path = write_json(tmp_path / 'tsdoc.json', {
        'extends': ['no-such-package/tsdoc.json', './missing.json'],
    })
    config_file = TSDocConfigFile.load_file(path)
    assert ids(config_file) == [TSDocMessageId.CONFIG_UNRESOLVED_EXTENDS]
    missing, = config_file.extends_files
    assert missing.file_not_found
    assert missing.file_path == str(tmp_path / 'missing.json')
    assert len(config_file.get_error_summary().splitlines()) == 2

def test_extends_python_package(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    package = tmp_path / 'site' / 'tsdoc_test_extends_pkg'
    package.mkdir(parents=True)
    (package / '__init__.py').write_text('')
    write_json(package / 'tsdoc-base.json', {
        'tagDefinitions': [{'tagName': '@fromPackage', 'syntaxKind': 'inline'}],
    })
    monkeypatch.syspath_prepend(str(tmp_path / 'site'))

    path = write_json(tmp_path / 'project' / 'tsdoc.json', {
        'extends': ['tsdoc_test_extends_pkg/tsdoc-base.json'],
    })
    config_file = TSDocConfigFile.load_file(path)
    assert not config_file.has_errors
    assert config_file.extends_files[0].file_path == str(package / 'tsdoc-base.json')
    assert config_file.to_configuration().is_known_tag('@fromPackage')

def test_conflicting_definitions(tmp_path: Path) -> None:
    path = write_json(tmp_path / 'tsdoc.json', {
        'tagDefinitions': [{'tagName': '@remarks', 'syntaxKind': 'modifier'}],
    })
    config_file = TSDocConfigFile.load_file(path)
    assert not config_file.has_errors
    with pytest.raises(ConfigurationError):
        config_file.to_configuration()
