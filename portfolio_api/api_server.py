import os
import logging

from flask import Flask
from flask_cors import CORS

from portfolio_api.api.docs import init_swagger
from portfolio_api.api.portfolio import bp as portfolio_bp
from portfolio_api.config import Settings, load_settings
from portfolio_api.google_services import GoogleDriveBackend, GoogleSpreadsheetBackend
from portfolio_api.router import RequestRouter

logging.basicConfig(
    level=logging.INFO if os.getenv('FLASK_ENV') != 'development' else logging.DEBUG,
    format='%(asctime)s [%(levelname)s] %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(settings: Settings = None, spreadsheet_backend=None, drive_backend=None) -> Flask:
    """
    Build the Flask app

    Settings are resolved once here and handed to the router; request
    handlers never read the environment. Backends default to the Google
    Sheets/Drive clients, which connect lazily on first request.
    """
    settings = settings or load_settings()
    logging.getLogger().setLevel(getattr(logging, settings.log_level, logging.INFO))

    app = Flask(__name__)
    app.json.ensure_ascii = False
    app.json.sort_keys = False
    CORS(app, origins=list(settings.cors_origins))

    app.config['PORTFOLIO_SETTINGS'] = settings
    app.extensions['portfolio_router'] = RequestRouter(
        settings,
        spreadsheet_backend or GoogleSpreadsheetBackend(),
        drive_backend or GoogleDriveBackend(),
    )
    app.register_blueprint(portfolio_bp)

    if settings.enable_api_docs:
        init_swagger(app)

    logger.info(f"[SERVER] App created (layout={settings.sheet_layout}, timezone={settings.date_timezone})")
    return app


app = create_app()


if __name__ == '__main__':
    settings = app.config['PORTFOLIO_SETTINGS']
    debug = os.getenv('FLASK_DEBUG', 'false').lower() == 'true'
    print(f"\n[SERVER] Starting Flask server on http://127.0.0.1:{settings.port}")
    print(f"[SERVER] Debug mode: {debug}")
    print(f"[SERVER] Registered routes:")
    for rule in app.url_map.iter_rules():
        print(f"  - {rule}")
    app.run(host='127.0.0.1', port=settings.port, debug=debug)
