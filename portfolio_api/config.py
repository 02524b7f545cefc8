"""
Runtime configuration for the portfolio API

Settings are read from the environment once at startup (a .env file in the
project root is loaded first, without overriding variables already set) and
passed explicitly into the app factory.
"""
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from portfolio_api.exceptions import ConfigurationError
from portfolio_api.items_reader import LAYOUTS, ColumnLayout
from portfolio_api.utils.parsers import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


def _env_flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = (env.get(key) or '').strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """Immutable process-wide configuration"""
    spreadsheet_id: Optional[str] = None
    sheet_name: Optional[str] = None
    drive_folder_id: Optional[str] = None
    sheet_layout: str = 'dated'
    date_timezone: str = DEFAULT_TIMEZONE
    strict_actions: bool = False
    cors_origins: Tuple[str, ...] = ('*',)
    enable_api_docs: bool = True
    log_level: str = 'INFO'
    port: int = 5000
    tz: ZoneInfo = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.sheet_layout not in LAYOUTS:
            raise ConfigurationError(
                f"Unknown SHEET_LAYOUT '{self.sheet_layout}' (expected one of: {', '.join(sorted(LAYOUTS))})",
                details={'sheet_layout': self.sheet_layout}
            )
        try:
            tz = ZoneInfo(self.date_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Unknown DATE_TIMEZONE '{self.date_timezone}'",
                details={'date_timezone': self.date_timezone}
            ) from e
        object.__setattr__(self, 'tz', tz)

    @property
    def layout(self) -> ColumnLayout:
        return LAYOUTS[self.sheet_layout]

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'Settings':
        """Build settings from a mapping of environment variables"""
        env = os.environ if env is None else env
        origins = tuple(o.strip() for o in (env.get('CORS_ORIGINS') or '*').split(',') if o.strip())
        try:
            port = int(env.get('PORT') or 5000)
        except ValueError as e:
            raise ConfigurationError(f"PORT must be an integer, got '{env.get('PORT')}'") from e
        return cls(
            spreadsheet_id=_optional(env, 'SPREADSHEET_ID'),
            sheet_name=_optional(env, 'SHEET_NAME'),
            drive_folder_id=_optional(env, 'DRIVE_FOLDER_ID'),
            sheet_layout=(env.get('SHEET_LAYOUT') or 'dated').strip().lower(),
            date_timezone=(env.get('DATE_TIMEZONE') or DEFAULT_TIMEZONE).strip(),
            strict_actions=_env_flag(env, 'STRICT_ACTIONS', False),
            cors_origins=origins or ('*',),
            enable_api_docs=_env_flag(env, 'ENABLE_API_DOCS', True),
            log_level=(env.get('LOG_LEVEL') or 'INFO').strip().upper(),
            port=port,
        )


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load .env (if present) and build settings from the environment"""
    env_path = env_file or PROJECT_ROOT / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"[CONFIG] Loaded environment from {env_path}")
    settings = Settings.from_env()
    if not settings.spreadsheet_id or not settings.sheet_name:
        logger.warning("[CONFIG] SPREADSHEET_ID or SHEET_NAME is not set; action=items will fail")
    if not settings.drive_folder_id:
        logger.warning("[CONFIG] DRIVE_FOLDER_ID is not set; action=images will fail")
    return settings
