"""
Google Sheets and Drive backends for the portfolio API.

Wraps the Sheets v4 and Drive v3 REST clients behind the small interfaces the
items reader and image collector expect. Services are built lazily, one per
thread, with Application Default Credentials (GOOGLE_APPLICATION_CREDENTIALS
or the runtime service account), so constructing a backend never hits the
network.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Any, Dict, Iterator, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import google.auth
from google.auth.exceptions import DefaultCredentialsError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from portfolio_api.exceptions import BackendError, FolderNotResolvedError

logger = logging.getLogger(__name__)

SHEETS_SCOPE = 'https://www.googleapis.com/auth/spreadsheets.readonly'
DRIVE_SCOPE = 'https://www.googleapis.com/auth/drive.readonly'

FOLDER_MIME_TYPE = 'application/vnd.google-apps.folder'
DATE_NUMBER_FORMATS = ('DATE', 'DATE_TIME', 'TIME')

# Day zero of spreadsheet date serial numbers
SERIAL_EPOCH = datetime(1899, 12, 30)

GRID_FIELDS = (
    'sheets(data(rowData(values('
    'effectiveValue,formattedValue,effectiveFormat/numberFormat/type))))'
)


def _http_status(error: HttpError) -> Optional[int]:
    status = getattr(error, 'status_code', None) or getattr(error.resp, 'status', None)
    try:
        return int(status)
    except (TypeError, ValueError):
        return None


def _default_credentials(scopes: List[str]):
    try:
        credentials, _ = google.auth.default(scopes=scopes)
    except DefaultCredentialsError as e:
        raise BackendError(
            "Google credentials not found. Set GOOGLE_APPLICATION_CREDENTIALS to a service account key file.",
            details={'scopes': scopes}
        ) from e
    return credentials


def quote_sheet_name(name: str) -> str:
    """Quote a sheet title for use in an A1 range"""
    return "'" + name.replace("'", "''") + "'"


def serial_to_datetime(serial: float, tz: tzinfo) -> datetime:
    """Convert a spreadsheet date serial number (local to ``tz``) to an aware datetime"""
    return (SERIAL_EPOCH + timedelta(days=serial)).replace(tzinfo=tz)


def cell_value(cell: Dict[str, Any], tz: tzinfo) -> Any:
    """
    Convert a Sheets CellData dict into a plain Python value

    Strings, numbers and booleans pass through, numbers formatted as dates
    become datetimes, error cells become their displayed text and empty
    cells become "".
    """
    value = cell.get('effectiveValue')
    if not value:
        return ""
    if 'stringValue' in value:
        return value['stringValue']
    if 'boolValue' in value:
        return value['boolValue']
    if 'numberValue' in value:
        number_type = cell.get('effectiveFormat', {}).get('numberFormat', {}).get('type')
        if number_type in DATE_NUMBER_FORMATS:
            return serial_to_datetime(value['numberValue'], tz)
        return value['numberValue']
    return cell.get('formattedValue', "")


class GoogleSheet:
    """One sheet (tab) of a spreadsheet; grid values are fetched once and cached"""

    def __init__(self, service, spreadsheet_id: str, title: str, tz: tzinfo):
        self._service = service
        self.spreadsheet_id = spreadsheet_id
        self.title = title
        self.tz = tz
        self._rows: Optional[List[List[Any]]] = None

    def _load_rows(self) -> List[List[Any]]:
        if self._rows is not None:
            return self._rows
        try:
            response = self._service.spreadsheets().get(
                spreadsheetId=self.spreadsheet_id,
                ranges=[quote_sheet_name(self.title)],
                includeGridData=True,
                fields=GRID_FIELDS,
            ).execute()
        except HttpError as e:
            raise BackendError(
                f"Failed to read sheet '{self.title}': {e}",
                details={'spreadsheet_id': self.spreadsheet_id, 'status': _http_status(e)}
            ) from e

        sheets = response.get('sheets') or [{}]
        grid = (sheets[0].get('data') or [{}])[0]
        rows = []
        for row_data in grid.get('rowData', []):
            rows.append([cell_value(cell, self.tz) for cell in row_data.get('values', [])])
        logger.info(f"[SHEETS] Fetched {len(rows)} rows from '{self.title}'")
        self._rows = rows
        return rows

    def get_last_row(self) -> int:
        """1-based index of the last row holding any value, 0 for an empty sheet"""
        rows = self._load_rows()
        for index in range(len(rows), 0, -1):
            if any(value != "" for value in rows[index - 1]):
                return index
        return 0

    def get_values(self, row: int, column: int, num_rows: int, num_columns: int) -> List[List[Any]]:
        """Rectangular block starting at (row, column), 1-based, padded with "" """
        rows = self._load_rows()
        block = []
        for r in range(row - 1, row - 1 + num_rows):
            source = rows[r] if r < len(rows) else []
            cells = source[column - 1:column - 1 + num_columns]
            block.append(cells + [""] * (num_columns - len(cells)))
        return block


class GoogleSpreadsheet:
    """Spreadsheet opened by id; metadata (sheet titles, timezone) is fetched on first lookup"""

    def __init__(self, service, spreadsheet_id: str):
        self._service = service
        self.spreadsheet_id = spreadsheet_id
        self._metadata: Optional[Dict[str, Any]] = None

    def _get_metadata(self) -> Dict[str, Any]:
        if self._metadata is None:
            try:
                self._metadata = self._service.spreadsheets().get(
                    spreadsheetId=self.spreadsheet_id,
                    fields='properties(timeZone),sheets(properties(title))',
                ).execute()
            except HttpError as e:
                status = _http_status(e)
                if status == 404:
                    message = f"Spreadsheet '{self.spreadsheet_id}' not found"
                else:
                    message = f"Failed to open spreadsheet '{self.spreadsheet_id}': {e}"
                raise BackendError(message, details={'spreadsheet_id': self.spreadsheet_id, 'status': status}) from e
        return self._metadata

    @property
    def time_zone(self) -> tzinfo:
        name = self._get_metadata().get('properties', {}).get('timeZone') or 'UTC'
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"[SHEETS] Unknown spreadsheet timezone '{name}', using UTC")
            return ZoneInfo('UTC')

    def sheet_titles(self) -> List[str]:
        return [s.get('properties', {}).get('title', '') for s in self._get_metadata().get('sheets', [])]

    def get_sheet_by_name(self, name: str) -> Optional[GoogleSheet]:
        if name not in self.sheet_titles():
            return None
        return GoogleSheet(self._service, self.spreadsheet_id, name, self.time_zone)


class _GoogleServiceBackend:
    """
    Lazily built API service, one per thread

    The httplib2 transport inside a discovery service is not thread-safe, so
    each thread gets its own service. Credentials are looked up once under a
    lock and shared. An injected ``service`` is used as-is by every thread.
    """
    API_NAME = None
    API_VERSION = None
    SCOPES: List[str] = []
    LOG_TAG = ''

    def __init__(self, credentials=None, service=None):
        self._credentials = credentials
        self._service = service
        self._lock = threading.Lock()
        self._local = threading.local()

    def _get_credentials(self):
        with self._lock:
            if self._credentials is None:
                self._credentials = _default_credentials(self.SCOPES)
            return self._credentials

    def _get_service(self):
        if self._service is not None:
            return self._service
        service = getattr(self._local, 'service', None)
        if service is None:
            service = build(self.API_NAME, self.API_VERSION,
                            credentials=self._get_credentials(), cache_discovery=False)
            self._local.service = service
            logger.info(f"[{self.LOG_TAG}] {self.API_NAME} {self.API_VERSION} client initialized "
                        f"for thread {threading.current_thread().name}")
        return service


class GoogleSpreadsheetBackend(_GoogleServiceBackend):
    """Opens spreadsheets through the Sheets v4 API"""
    API_NAME = 'sheets'
    API_VERSION = 'v4'
    SCOPES = [SHEETS_SCOPE]
    LOG_TAG = 'SHEETS'

    def open_by_id(self, spreadsheet_id: str) -> GoogleSpreadsheet:
        return GoogleSpreadsheet(self._get_service(), spreadsheet_id)


@dataclass
class DriveFile:
    """File entry from a folder listing; bytes are downloaded on demand"""
    id: str
    name: str
    mime_type: str
    _service: Any = field(repr=False, compare=False, default=None)

    def get_bytes(self) -> bytes:
        try:
            return self._service.files().get_media(fileId=self.id, supportsAllDrives=True).execute()
        except HttpError as e:
            raise BackendError(
                f"Failed to download file '{self.id}': {e}",
                details={'file_id': self.id, 'status': _http_status(e)}
            ) from e


class GoogleDriveFolder:
    """Drive folder; ``get_files`` pages through its non-trashed children"""

    PAGE_SIZE = 1000

    def __init__(self, service, folder_id: str, name: str = ''):
        self._service = service
        self.id = folder_id
        self.name = name

    def get_files(self) -> Iterator[DriveFile]:
        query = f"'{self.id}' in parents and trashed = false"
        page_token = None
        while True:
            try:
                response = self._service.files().list(
                    q=query,
                    fields='nextPageToken, files(id, name, mimeType)',
                    pageSize=self.PAGE_SIZE,
                    pageToken=page_token,
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                ).execute()
            except HttpError as e:
                raise BackendError(
                    f"Failed to list folder '{self.id}': {e}",
                    details={'folder_id': self.id, 'status': _http_status(e)}
                ) from e
            for entry in response.get('files', []):
                yield DriveFile(
                    id=entry['id'],
                    name=entry.get('name', ''),
                    mime_type=entry.get('mimeType', ''),
                    _service=self._service,
                )
            page_token = response.get('nextPageToken')
            if not page_token:
                break


class GoogleDriveBackend(_GoogleServiceBackend):
    """Resolves folders through the Drive v3 API"""
    API_NAME = 'drive'
    API_VERSION = 'v3'
    SCOPES = [DRIVE_SCOPE]
    LOG_TAG = 'DRIVE'

    def get_folder_by_id(self, folder_id: str) -> GoogleDriveFolder:
        """
        Resolve a folder id

        Raises:
            FolderNotResolvedError: id not found or not a folder
            BackendError: any other API failure
        """
        service = self._get_service()
        try:
            meta = service.files().get(
                fileId=folder_id,
                fields='id, name, mimeType',
                supportsAllDrives=True,
            ).execute()
        except HttpError as e:
            status = _http_status(e)
            if status == 404:
                raise FolderNotResolvedError(
                    f"Drive folder '{folder_id}' not found",
                    details={'folder_id': folder_id}
                ) from e
            raise BackendError(
                f"Failed to open Drive folder '{folder_id}': {e}",
                details={'folder_id': folder_id, 'status': status}
            ) from e

        if meta.get('mimeType') != FOLDER_MIME_TYPE:
            raise FolderNotResolvedError(
                f"Drive id '{folder_id}' is not a folder",
                details={'folder_id': folder_id, 'mime_type': meta.get('mimeType')}
            )
        return GoogleDriveFolder(service, meta.get('id', folder_id), meta.get('name', ''))
