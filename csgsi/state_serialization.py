import json
import logging
from typing import Any, Dict, Union

import pydantic

from csgsi.models import Update

logger = logging.getLogger(__name__)


class GameStateError(RuntimeError):
    pass


class GameStateParseError(GameStateError):
    """The request body is not a JSON document."""
    pass


class DeserializationError(GameStateError):
    """The JSON document does not match the closed ``Update`` schema."""
    pass


def load_game_state(body: Union[bytes, str]) -> Any:
    """Parse a raw push body as JSON.

    Args:
        body: The request body exactly as received

    Returns:
        The parsed JSON value

    Raises:
        GameStateParseError: If the body is not valid UTF-8 JSON, or is
            nested too deeply to parse
    """
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as e:
        raise GameStateParseError(f"JSON parsing error: {e}") from e


def parse_game_state(gs_json: Any) -> Update:
    """Decode a parsed JSON document into an ``Update``.

    Unknown keys at any depth, values outside an enumeration and type
    mismatches are all rejected; ``added`` and ``previously`` are dropped.

    Raises:
        DeserializationError: If the document does not match the schema
    """
    try:
        return Update.model_validate(gs_json)
    except (pydantic.ValidationError, RecursionError) as e:
        raise DeserializationError(f"Update parsing error: {e}") from e


def decode_update(body: Union[bytes, str]) -> Update:
    """Parse and decode a raw push body in one step."""
    return parse_game_state(load_game_state(body))


def serialize_update(update: Update) -> Dict[str, Any]:
    """Encode an ``Update`` back into its wire representation.

    Absent optional fields are omitted rather than written as null, so the
    result decodes to an equal ``Update``.
    """
    return update.model_dump(mode='json', by_alias=True, exclude_none=True)


def dumps_update(update: Update, **kwargs: Any) -> str:
    return json.dumps(serialize_update(update), **kwargs)
