"""Structured JSON logging to stdout.

Low overhead, minimal dependencies, safe for production stdout collectors.
"""

from typing import Any, Dict
from datetime import datetime, timezone
import json

from app.obs.context import request_id_var, route_var


_SECRET_FIELDS = ("client_secret", "access_token", "token", "authorization")


def _redact_secret(value: Any) -> Any:
    s = str(value) if value is not None else ""
    if not s:
        return s
    if len(s) <= 8:
        return "***"
    return f"{s[:4]}***"


def log_event(event: str, **fields: Any) -> None:
    now = datetime.now(timezone.utc).isoformat()
    payload: Dict[str, Any] = {
        "ts": now,
        "level": fields.pop("level", "INFO"),
        "event": event,
        "request_id": request_id_var.get(),
    }
    payload.setdefault("route", route_var.get())

    # Merge remaining fields
    for k, v in fields.items():
        if k.lower() in _SECRET_FIELDS:
            payload[k] = _redact_secret(v)
        else:
            payload[k] = v

    try:
        print(json.dumps(payload, separators=(",", ":"), default=str))
    except Exception:
        # As a last resort, avoid crashing the app due to logging
        pass
