"""Tests for drive node decoding."""
from datetime import datetime, timedelta, timezone

import pytest

from icdrive.core.drive import File, Folder, decode_node, parse_timestamp
from icdrive.core.exceptions import DecodingError, InvalidNodeType


def file_payload(**overrides):
    payload = {
        'type': 'FILE',
        'drivewsid': 'FILE::com.apple.CloudDocs::ID1',
        'name': 'a.txt',
        'size': 10,
        'dateCreated': '2020-01-01T00:00:00Z',
        'dateChanged': '2020-01-02T00:00:00Z',
        'dateModified': '2020-01-03T00:00:00Z',
    }
    payload.update(overrides)
    return payload


class TestParseTimestamp:
    """Tests for RFC 3339 timestamp parsing."""

    def test_utc_suffix(self):
        assert parse_timestamp('2020-01-01T00:00:00Z') == datetime(2020, 1, 1, tzinfo=timezone.utc)

    def test_fixed_offset(self):
        parsed = parse_timestamp('2020-03-03T08:30:00+02:00')

        assert parsed.utcoffset() == timedelta(hours=2)
        assert parsed.hour == 8

    def test_fractional_seconds(self):
        assert parse_timestamp('2020-01-01T00:00:00.500Z').microsecond == 500000

    @pytest.mark.parametrize('value', ['not a date', '2020-13-01T00:00:00Z', '', None, 1577836800])
    def test_malformed(self, value):
        with pytest.raises(DecodingError):
            parse_timestamp(value)

    def test_offset_required(self):
        with pytest.raises(DecodingError):
            parse_timestamp('2020-01-01T00:00:00')


class TestDecodeNode:
    """Tests for decode_node."""

    def test_folder_with_bogus_child(self):
        payload = {
            'type': 'FOLDER',
            'drivewsid': 'F1',
            'name': 'root',
            'dateCreated': '2020-01-01T00:00:00Z',
            'items': [file_payload(), {'type': 'BOGUS'}],
        }

        node = decode_node(payload)

        assert isinstance(node, Folder)
        assert node.id == 'F1'
        assert node.name == 'root'
        assert len(node.items) == 1
        assert node.items[0].name == 'a.txt'

    def test_file(self):
        node = decode_node(file_payload(lastOpenTime='2020-01-04T00:00:00Z'))

        assert node == File(
            id='FILE::com.apple.CloudDocs::ID1',
            name='a.txt',
            size=10,
            date_created=datetime(2020, 1, 1, tzinfo=timezone.utc),
            date_changed=datetime(2020, 1, 2, tzinfo=timezone.utc),
            date_modified=datetime(2020, 1, 3, tzinfo=timezone.utc),
            last_opened=datetime(2020, 1, 4, tzinfo=timezone.utc),
        )
        assert node.is_file
        assert not node.is_folder

    def test_file_without_last_opened(self):
        assert decode_node(file_payload()).last_opened is None

    def test_file_with_unparsable_last_opened(self):
        assert decode_node(file_payload(lastOpenTime='yesterday')).last_opened is None

    def test_file_extension_is_appended(self):
        node = decode_node(file_payload(name='report', extension='pdf'))

        assert node.name == 'report.pdf'

    def test_empty_extension_is_ignored(self):
        assert decode_node(file_payload(name='Makefile', extension='')).name == 'Makefile'

    def test_folder_without_items(self):
        node = decode_node({
            'type': 'FOLDER',
            'drivewsid': 'F1',
            'name': 'empty',
            'dateCreated': '2020-01-01T00:00:00Z',
        })

        assert node.items == ()
        assert list(node) == []

    def test_folder_items_not_a_list(self):
        node = decode_node({
            'type': 'FOLDER',
            'drivewsid': 'F1',
            'name': 'odd',
            'dateCreated': '2020-01-01T00:00:00Z',
            'items': {'type': 'FILE'},
        })

        assert node.items == ()

    def test_nested_folders(self, drive_folder_payload):
        drive_folder_payload['items'][0]['items'] = [file_payload(), file_payload(size='big')]

        root = decode_node(drive_folder_payload)

        documents = root.find('Documents')
        assert isinstance(documents, Folder)
        assert [node.name for node in documents] == ['a.txt']
        assert root.find('notes.txt').size == 10
        assert root.find('missing') is None

    def test_child_order_is_preserved(self, drive_folder_payload):
        root = decode_node(drive_folder_payload)

        assert [node.name for node in root] == ['Documents', 'notes.txt']
        assert [node.name for node in root.folders] == ['Documents']
        assert [node.name for node in root.files] == ['notes.txt']

    def test_child_with_bad_date_is_skipped(self, drive_folder_payload):
        drive_folder_payload['items'][1]['dateChanged'] = 'garbage'

        root = decode_node(drive_folder_payload)

        assert [node.name for node in root] == ['Documents']

    @pytest.mark.parametrize('value', [
        {'type': 'BOGUS'},
        {'type': 'APP_LIBRARY', 'drivewsid': 'x', 'name': 'Pages'},
        {'name': 'untyped'},
        {'type': 7},
        ['not', 'an', 'object'],
        None,
    ])
    def test_invalid_type(self, value):
        with pytest.raises(InvalidNodeType):
            decode_node(value)

    @pytest.mark.parametrize('field', ['drivewsid', 'name', 'size', 'dateCreated', 'dateChanged', 'dateModified'])
    def test_missing_file_field(self, field):
        payload = file_payload()
        del payload[field]

        with pytest.raises(DecodingError):
            decode_node(payload)

    @pytest.mark.parametrize('field, value', [
        ('drivewsid', 12),
        ('name', None),
        ('size', '10'),
        ('size', True),
        ('dateModified', 'tomorrow'),
    ])
    def test_wrong_typed_file_field(self, field, value):
        with pytest.raises(DecodingError):
            decode_node(file_payload(**{field: value}))

    def test_missing_folder_field(self):
        with pytest.raises(DecodingError):
            decode_node({'type': 'FOLDER', 'drivewsid': 'F1', 'name': 'root'})

    def test_folder_with_malformed_date(self):
        with pytest.raises(DecodingError):
            decode_node({
                'type': 'FOLDER',
                'drivewsid': 'F1',
                'name': 'root',
                'dateCreated': '01/01/2020',
                'items': [file_payload()],
            })


class TestFolder:
    """Tests for the Folder model."""

    def test_iteration_is_restartable(self, drive_folder_payload):
        root = decode_node(drive_folder_payload)

        first = [node.id for node in root]
        second = [node.id for node in root]

        assert first == second
        assert len(root) == 2

    def test_nodes_are_immutable(self, drive_folder_payload):
        root = decode_node(drive_folder_payload)

        with pytest.raises(AttributeError):
            root.name = 'other'

    def test_str(self, drive_folder_payload):
        root = decode_node(drive_folder_payload)

        assert str(root) == (
            'Folder(id=FOLDER::com.apple.CloudDocs::root,name=root,'
            'dateCreated=2020-01-01T00:00:00+00:00, items=2)'
        )
