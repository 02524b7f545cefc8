"""
Tests for reading portfolio items from a sheet
"""
import pytest
from datetime import datetime
from zoneinfo import ZoneInfo

from portfolio_api.exceptions import ConfigurationError, SheetNotFoundError
from portfolio_api.items_reader import (
    DATED_LAYOUT,
    LINK_LABELS,
    UNDATED_LAYOUT,
    ColumnLayout,
    read_portfolio_items,
    rows_to_items,
)
from tests.fakes import HEADER, FakeSheet, FakeSpreadsheet, FakeSpreadsheetBackend, make_row


def _backend_for(rows, name='Portfolio'):
    sheet = FakeSheet(rows)
    return FakeSpreadsheetBackend({'sheet-123': FakeSpreadsheet({name: sheet})}), sheet


@pytest.mark.unit
def test_layouts_match_sheet_columns():
    assert DATED_LAYOUT.column_count == 13
    assert DATED_LAYOUT.date == 1
    assert DATED_LAYOUT.title == 2
    assert DATED_LAYOUT.is_commision == 6
    assert DATED_LAYOUT.links[0] == ('Amazon', 7)
    assert DATED_LAYOUT.links[-1] == ('リンク', 13)

    assert UNDATED_LAYOUT.column_count == 12
    assert UNDATED_LAYOUT.date is None
    assert UNDATED_LAYOUT.title == 1
    assert [label for label, _ in UNDATED_LAYOUT.links] == list(LINK_LABELS)


@pytest.mark.unit
def test_layout_rejects_out_of_range_positions():
    with pytest.raises(ConfigurationError):
        ColumnLayout(title=1, description=2, image_url=3, tags=4, is_commision=5,
                     links=(('Amazon', 9),), column_count=6)


@pytest.mark.unit
def test_layout_rejects_duplicate_positions():
    with pytest.raises(ConfigurationError):
        ColumnLayout(title=1, description=1, image_url=3, tags=4, is_commision=5,
                     links=(), column_count=5)


@pytest.mark.unit
def test_read_items_shapes_rows(spreadsheet_backend, tokyo):
    items = read_portfolio_items(spreadsheet_backend, 'sheet-123', 'Portfolio', DATED_LAYOUT, tokyo)

    assert [item.title for item in items] == ['Game soundtrack', 'Doujin album']
    first = items[0].model_dump(by_alias=True)
    assert first == {
        'id': 0,
        'date': '2024-01-15',
        'title': 'Game soundtrack',
        'description': 'BGM for an indie game',
        'imageUrl': 'https://example.com/a.png',
        'tags': ['Music', 'BGM'],
        'links': [{'label': 'Youtube', 'url': 'https://youtu.be/abc'}],
        'isCommision': True,
    }


@pytest.mark.unit
def test_ids_count_only_retained_rows(spreadsheet_backend):
    items = read_portfolio_items(spreadsheet_backend, 'sheet-123', 'Portfolio')
    # Sheet row 3 has no title; the next item still gets id 1
    assert [item.id for item in items] == [0, 1]


@pytest.mark.unit
def test_links_keep_column_order_and_skip_empty(spreadsheet_backend):
    items = read_portfolio_items(spreadsheet_backend, 'sheet-123', 'Portfolio')
    links = [link.model_dump() for link in items[1].links]
    assert links == [
        {'label': 'DLsite', 'url': 'https://dlsite.com/x'},
        {'label': 'メロンブックス', 'url': 'https://melonbooks.co.jp/y'},
    ]


@pytest.mark.unit
def test_header_only_sheet_returns_empty_list():
    backend, sheet = _backend_for([HEADER])
    assert read_portfolio_items(backend, 'sheet-123', 'Portfolio') == []
    assert sheet.reads == []


@pytest.mark.unit
def test_empty_sheet_returns_empty_list():
    backend, _ = _backend_for([])
    assert read_portfolio_items(backend, 'sheet-123', 'Portfolio') == []


@pytest.mark.unit
def test_reads_data_block_in_one_call():
    rows = [HEADER] + [make_row(title=f'Item {n}') for n in range(5)]
    backend, sheet = _backend_for(rows)

    items = read_portfolio_items(backend, 'sheet-123', 'Portfolio')

    assert len(items) == 5
    assert sheet.reads == [(2, 1, 5, 13)]


@pytest.mark.unit
def test_missing_sheet_raises():
    backend, _ = _backend_for([HEADER], name='Other')
    with pytest.raises(SheetNotFoundError) as exc:
        read_portfolio_items(backend, 'sheet-123', 'Portfolio')
    assert exc.value.message == 'Sheet "Portfolio" not found'


@pytest.mark.unit
@pytest.mark.parametrize("spreadsheet_id, sheet_name", [(None, 'Portfolio'), ('sheet-123', None)])
def test_unset_identifiers_raise(spreadsheet_backend, spreadsheet_id, sheet_name):
    with pytest.raises(ConfigurationError):
        read_portfolio_items(spreadsheet_backend, spreadsheet_id, sheet_name)


@pytest.mark.unit
def test_rows_with_none_or_empty_title_are_dropped():
    rows = [
        make_row(title=None),
        make_row(title='Kept'),
        make_row(title=''),
        make_row(title=0),
    ]
    items = rows_to_items(rows, DATED_LAYOUT)
    # A numeric 0 title keeps the row but coerces to an empty title
    assert [(item.id, item.title) for item in items] == [(0, 'Kept'), (1, '')]


@pytest.mark.unit
def test_date_cells_render_in_timezone():
    rows = [
        make_row(date=datetime(2024, 3, 31, 23, 0, tzinfo=ZoneInfo('UTC')), title='A'),
        make_row(date='Spring 2024', title='B'),
        make_row(date=None, title='C'),
    ]
    items = rows_to_items(rows, DATED_LAYOUT, ZoneInfo('Asia/Tokyo'))
    assert [item.date for item in items] == ['2024-04-01', 'Spring 2024', '']


@pytest.mark.unit
def test_text_columns_use_empty_or_string_coercion():
    rows = [make_row(title='A', description=0, image_url=None, links={'Amazon': False})]
    item = rows_to_items(rows, DATED_LAYOUT)[0]
    assert item.description == ''
    assert item.image_url == ''
    assert item.links == []


@pytest.mark.unit
def test_short_rows_are_padded():
    rows = [['', 'Only title']]
    item = rows_to_items(rows, DATED_LAYOUT)[0]
    assert item.title == 'Only title'
    assert item.tags == []
    assert item.links == []
    assert item.is_commision is False


@pytest.mark.unit
def test_undated_layout_reads_shifted_columns():
    row = ['Title', 'Desc', 'https://example.com/i.png', 'a, b', 'TRUE',
           'https://amazon.example/x', '', '', '', '', '', 'https://example.com']
    backend, sheet = _backend_for([HEADER[1:], row])

    items = read_portfolio_items(backend, 'sheet-123', 'Portfolio', UNDATED_LAYOUT)

    assert sheet.reads == [(2, 1, 1, 12)]
    item = items[0].model_dump(by_alias=True)
    assert item['date'] == ''
    assert item['title'] == 'Title'
    assert item['tags'] == ['a', 'b']
    assert item['isCommision'] is True
    assert item['links'] == [
        {'label': 'Amazon', 'url': 'https://amazon.example/x'},
        {'label': 'リンク', 'url': 'https://example.com'},
    ]
