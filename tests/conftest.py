"""
Pytest configuration and fixtures for portfolio API tests
"""
import pytest
import sys
from pathlib import Path
from zoneinfo import ZoneInfo

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from portfolio_api.api_server import create_app
from portfolio_api.config import Settings
from tests.fakes import (
    FakeDriveBackend, FakeDriveFile, FakeFolder, FakeSheet, FakeSpreadsheet,
    FakeSpreadsheetBackend, HEADER, make_row,
)


@pytest.fixture
def tokyo():
    return ZoneInfo('Asia/Tokyo')


@pytest.fixture
def settings():
    return Settings(
        spreadsheet_id='sheet-123',
        sheet_name='Portfolio',
        drive_folder_id='folder-abc',
        enable_api_docs=False,
    )


@pytest.fixture
def portfolio_sheet():
    return FakeSheet([
        HEADER,
        make_row(date='2024-01-15', title='Game soundtrack', description='BGM for an indie game',
                 image_url='https://example.com/a.png', tags='Music, BGM',
                 is_commision=True, links={'Youtube': 'https://youtu.be/abc'}),
        make_row(title=''),
        make_row(title='Doujin album', tags='Album', is_commision='yes',
                 links={'DLsite': 'https://dlsite.com/x', 'メロンブックス': 'https://melonbooks.co.jp/y'}),
    ])


@pytest.fixture
def spreadsheet_backend(portfolio_sheet):
    return FakeSpreadsheetBackend({
        'sheet-123': FakeSpreadsheet({'Portfolio': portfolio_sheet}),
    })


@pytest.fixture
def image_folder():
    return FakeFolder([
        FakeDriveFile('img-1', 'image/png', b'\x89PNG'),
        FakeDriveFile('doc-1', 'application/pdf', b'%PDF'),
        FakeDriveFile('img-2', 'image/svg+xml', b'<svg/>'),
    ])


@pytest.fixture
def drive_backend(image_folder):
    return FakeDriveBackend({'folder-abc': image_folder})


@pytest.fixture
def app(settings, spreadsheet_backend, drive_backend):
    """Flask application fixture backed by in-memory sheets and folders"""
    flask_app = create_app(settings, spreadsheet_backend, drive_backend)
    flask_app.config['TESTING'] = True
    yield flask_app


@pytest.fixture
def client(app):
    """Test client fixture"""
    return app.test_client()
