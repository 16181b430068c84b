import json
import logging
from typing import Any

from .exceptions import JsonEncodeException


logger = logging.getLogger(__name__)


def json_encode(data: Any, pretty: bool = False) -> str:
    """Serialize ``data`` to a JSON string.

    Raises:
        JsonEncodeException: if ``data`` holds values JSON cannot represent.
    """
    try:
        return json.dumps(
            data,
            ensure_ascii=False,
            indent=2 if pretty else None,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        logger.warning(f"json encode error => {e}: {data!r}")
        raise JsonEncodeException(str(e), data) from e


def json_decode(text: str, default: Any = None) -> Any:
    if not text:
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"json decode error => {e}")
        return default
