import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_logger = logging.getLogger("audit")


def _jsonable(value: Any) -> Any:
    # UUIDs, dates and Decimals are logged by their string form
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def audit(event: str, *, user_id: Optional[Any] = None, **fields: Any) -> None:
    """Emit a minimally structured audit log as a single JSON line.

    Used for every budget mutation so changes to limits can be traced later.
    """
    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
    }
    if user_id:
        payload["user_id"] = str(user_id)
    if fields:
        payload.update({key: _jsonable(value) for key, value in fields.items()})
    _logger.info(json.dumps(payload, ensure_ascii=False))
