import logging

from pydantic import ValidationError

from ladder_helper.models.schema_models import PickupNotificationSchema


def parse_pickup_payload(raw: str | bytes | None) -> str | None:
    """Extract main_bot_game_id from a pickup notification.

    Returns:
        str | None: The game id, None for anything malformed or empty
    """
    if raw is None:
        return None
    try:
        notification = PickupNotificationSchema.model_validate_json(raw)
    except (ValidationError, UnicodeDecodeError) as e:
        logging.error(f"[Ladder] Error parsing notification payload {raw!r}: {e}")
        return None
    if not notification.main_bot_game_id:
        return None
    return notification.main_bot_game_id
