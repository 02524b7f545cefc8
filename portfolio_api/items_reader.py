"""
Portfolio item reader

Reads the data block of the portfolio sheet in a single bulk range read and
shapes each row into a PortfolioItem. Column positions come from a fixed
ColumnLayout instead of the header row, so the header is never fetched.

The spreadsheet backend is duck-typed (see google_services.GoogleSpreadsheetBackend):

    backend.open_by_id(spreadsheet_id) -> spreadsheet
    spreadsheet.get_sheet_by_name(name) -> sheet | None
    sheet.get_last_row() -> int
    sheet.get_values(row, column, num_rows, num_columns) -> list[list]
"""
import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Dict, List, Optional, Sequence, Tuple

from portfolio_api.exceptions import ConfigurationError, SheetNotFoundError
from portfolio_api.models import Link, PortfolioItem
from portfolio_api.utils.parsers import coerce_text, format_date, parse_boolean, parse_tags

logger = logging.getLogger(__name__)

LINK_LABELS = ('Amazon', 'DLsite', '公式サイト', 'Youtube', 'ニコニコ', 'メロンブックス', 'リンク')

HEADER_ROWS = 1


@dataclass(frozen=True)
class ColumnLayout:
    """
    Fixed 1-based column positions of the portfolio sheet

    ``date`` is None for sheets without a leading date column.
    """
    title: int
    description: int
    image_url: int
    tags: int
    is_commision: int
    links: Tuple[Tuple[str, int], ...]
    column_count: int
    date: Optional[int] = None

    def __post_init__(self):
        positions = [self.title, self.description, self.image_url, self.tags, self.is_commision]
        positions += [position for _, position in self.links]
        if self.date is not None:
            positions.append(self.date)
        out_of_range = [p for p in positions if not 1 <= p <= self.column_count]
        if out_of_range:
            raise ConfigurationError(
                f"Column positions {out_of_range} fall outside 1..{self.column_count}"
            )
        if len(set(positions)) != len(positions):
            raise ConfigurationError("Column positions must be unique")

    @classmethod
    def build(cls, first_column: int, has_date: bool) -> 'ColumnLayout':
        """Lay out the base columns then the link columns from ``first_column``"""
        col = first_column
        date = None
        if has_date:
            date = col
            col += 1
        base = range(col, col + 5)
        title, description, image_url, tags, is_commision = base
        col += 5
        links = tuple((label, col + offset) for offset, label in enumerate(LINK_LABELS))
        return cls(
            title=title,
            description=description,
            image_url=image_url,
            tags=tags,
            is_commision=is_commision,
            links=links,
            column_count=col + len(LINK_LABELS) - 1,
            date=date,
        )


DATED_LAYOUT = ColumnLayout.build(first_column=1, has_date=True)
UNDATED_LAYOUT = ColumnLayout.build(first_column=1, has_date=False)

LAYOUTS: Dict[str, ColumnLayout] = {
    'dated': DATED_LAYOUT,
    'undated': UNDATED_LAYOUT,
}


def _cell(row: Sequence[Any], position: Optional[int]) -> Any:
    if position is None or position > len(row):
        return ""
    return row[position - 1]


def _is_blank_title(value: Any) -> bool:
    return value is None or value == ""


def row_to_item(row: Sequence[Any], item_id: int, layout: ColumnLayout,
                tz: Optional[tzinfo] = None) -> PortfolioItem:
    """Shape one retained row into a PortfolioItem"""
    links = []
    for label, position in layout.links:
        url = coerce_text(_cell(row, position))
        if url:
            links.append(Link(label=label, url=url))

    return PortfolioItem(
        id=item_id,
        date=format_date(_cell(row, layout.date), tz),
        title=coerce_text(_cell(row, layout.title)),
        description=coerce_text(_cell(row, layout.description)),
        image_url=coerce_text(_cell(row, layout.image_url)),
        tags=parse_tags(_cell(row, layout.tags)),
        links=links,
        is_commision=parse_boolean(_cell(row, layout.is_commision)),
    )


def rows_to_items(rows: Sequence[Sequence[Any]], layout: ColumnLayout,
                  tz: Optional[tzinfo] = None) -> List[PortfolioItem]:
    """
    Drop rows without a title and number the rest from 0 in source order

    A title cell that is None or "" drops the row. Other falsy titles (0, False)
    keep the row but coerce to an empty title.
    """
    items = []
    for row in rows:
        if _is_blank_title(_cell(row, layout.title)):
            continue
        items.append(row_to_item(row, len(items), layout, tz))
    return items


def read_portfolio_items(backend, spreadsheet_id: Optional[str], sheet_name: Optional[str],
                         layout: ColumnLayout = DATED_LAYOUT,
                         tz: Optional[tzinfo] = None) -> List[PortfolioItem]:
    """
    Read every portfolio item from the sheet

    Args:
        backend: Spreadsheet backend
        spreadsheet_id: Spreadsheet to open
        sheet_name: Sheet (tab) holding the portfolio rows
        layout: Fixed column layout of the sheet
        tz: Timezone used to render date cells

    Returns:
        Items in sheet order; empty when the sheet has only a header row

    Raises:
        ConfigurationError: spreadsheet id or sheet name is unset
        SheetNotFoundError: the sheet does not exist
    """
    if not spreadsheet_id:
        raise ConfigurationError("SPREADSHEET_ID is not set")
    if not sheet_name:
        raise ConfigurationError("SHEET_NAME is not set")

    spreadsheet = backend.open_by_id(spreadsheet_id)
    sheet = spreadsheet.get_sheet_by_name(sheet_name)
    if sheet is None:
        raise SheetNotFoundError(f'Sheet "{sheet_name}" not found', details={'sheet_name': sheet_name})

    last_row = sheet.get_last_row()
    if last_row <= HEADER_ROWS:
        logger.info(f"[ITEMS] Sheet '{sheet_name}' has no data rows")
        return []

    values = sheet.get_values(HEADER_ROWS + 1, 1, last_row - HEADER_ROWS, layout.column_count)
    items = rows_to_items(values, layout, tz)
    logger.info(f"[ITEMS] Read {len(values)} rows from '{sheet_name}', {len(items)} items retained")
    return items
