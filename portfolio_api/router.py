"""
Request routing for the portfolio endpoint

Maps the ``action`` query parameter onto a handler and turns any failure into
the JSON error envelope. The envelope is returned with transport status 200,
so clients must check the ``error`` field rather than the HTTP status.
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from portfolio_api.config import Settings
from portfolio_api.exceptions import UnknownActionError
from portfolio_api.image_collector import collect_images
from portfolio_api.items_reader import read_portfolio_items
from portfolio_api.models import ErrorResponse

logger = logging.getLogger(__name__)

ERROR_STATUS_CODE = 500


class Action(str, Enum):
    ITEMS = 'items'
    IMAGES = 'images'


DEFAULT_ACTION = Action.ITEMS


def parse_action(raw: Optional[str], strict: bool = False) -> Action:
    """
    Resolve the ``action`` query value

    A missing or empty value means ``items``. Unrecognized values also fall
    back to ``items`` (with a warning) unless ``strict`` is set.

    Raises:
        UnknownActionError: unrecognized value in strict mode
    """
    if raw is None or raw == '':
        return DEFAULT_ACTION
    try:
        return Action(raw)
    except ValueError:
        if strict:
            raise UnknownActionError(
                f"Unknown action '{raw}' (expected one of: {', '.join(a.value for a in Action)})",
                details={'action': raw}
            )
        logger.warning(f"[ROUTER] Unknown action '{raw}', falling back to '{DEFAULT_ACTION.value}'")
        return DEFAULT_ACTION


def error_envelope(error: BaseException) -> Dict[str, Any]:
    message = getattr(error, 'message', None) or str(error)
    return ErrorResponse(
        message=f"Internal server error: {message}",
        status_code=ERROR_STATUS_CODE,
    ).model_dump(by_alias=True)


class RequestRouter:
    """Dispatches portfolio requests to the items reader or image collector"""

    def __init__(self, settings: Settings, spreadsheet_backend, drive_backend):
        self.settings = settings
        self.spreadsheet_backend = spreadsheet_backend
        self.drive_backend = drive_backend
        self._handlers: Dict[Action, Callable[[], List[Any]]] = {
            Action.ITEMS: self.get_items,
            Action.IMAGES: self.get_images,
        }

    def get_items(self) -> List[Dict[str, Any]]:
        items = read_portfolio_items(
            self.spreadsheet_backend,
            self.settings.spreadsheet_id,
            self.settings.sheet_name,
            layout=self.settings.layout,
            tz=self.settings.tz,
        )
        return [item.model_dump(by_alias=True) for item in items]

    def get_images(self) -> List[Dict[str, Any]]:
        images = collect_images(self.drive_backend, self.settings.drive_folder_id)
        return [image.model_dump(by_alias=True) for image in images]

    def dispatch(self, args: Mapping[str, str]) -> Tuple[Any, bool]:
        """
        Handle one request

        Args:
            args: Query parameters of the request

        Returns:
            (payload, is_error) where payload is a JSON-ready list, or the
            error envelope when anything failed
        """
        if args.get('id'):
            logger.debug(f"[ROUTER] Ignoring id={args.get('id')}; the full collection is always returned")
        try:
            action = parse_action(args.get('action'), strict=self.settings.strict_actions)
            return self._handlers[action](), False
        except Exception as e:
            logger.exception(f"[ROUTER] Error in request: {e}")
            return error_envelope(e), True
