"""
OpenAPI/Swagger documentation for the portfolio API
"""
import logging

from flasgger import Swagger

from portfolio_api import __version__

swagger_config = {
    "headers": [],
    "specs": [
        {
            "endpoint": 'apispec',
            "route": '/api/apispec.json',
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs"
}

swagger_template = {
    "swagger": "2.0",
    "info": {
        "title": "Portfolio API",
        "description": "Read-only portfolio items from Google Sheets and images from Google Drive",
        "version": __version__,
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "tags": [
        {
            "name": "Portfolio",
            "description": "Portfolio items and images"
        }
    ]
}


def init_swagger(app):
    """Initialize Swagger documentation"""
    try:
        return Swagger(app, config=swagger_config, template=swagger_template)
    except Exception as e:
        logging.warning(f"[DOCS] Swagger initialization failed: {e}")
        return None
