"""Structured JSON logging callback for plan run events."""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from plansim.callbacks.base import BaseCallback

logger = logging.getLogger("plansim.audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class LoggingCallback(BaseCallback):
    """Emits one JSON log line per lifecycle event.

    Each line carries ``event``, ``ts`` (ISO-8601 UTC) and the event fields.
    INFO for normal events, WARNING for failed steps, ERROR for rejected ones.
    Logger name: plansim.audit
    """

    def on_step_start(self, data: dict[str, Any], **kwargs: Any) -> None:
        logger.info(json.dumps({
            "event": "step_start",
            "ts": _now(),
            "step_index": data.get("step_index", 0),
            "endpoint": data.get("endpoint", ""),
            "method": data.get("method", ""),
            "max_units": data.get("max_units", 0),
            "param_count": data.get("param_count", 0),
        }))

    def on_step_complete(self, data: dict[str, Any], **kwargs: Any) -> None:
        logger.info(json.dumps({
            "event": "step_complete",
            "ts": _now(),
            "step_index": data.get("step_index", 0),
            "endpoint": data.get("endpoint", ""),
            "method": data.get("method", ""),
            "tx_id": data.get("tx_id"),
        }))

    def on_step_failed(self, data: dict[str, Any], **kwargs: Any) -> None:
        logger.warning(json.dumps({
            "event": "step_failed",
            "ts": _now(),
            "step_index": data.get("step_index", 0),
            "error_kind": data.get("error_kind", ""),
            "error": str(data.get("error", ""))[:200],
        }))

    def on_step_rejected(self, data: dict[str, Any], **kwargs: Any) -> None:
        logger.error(json.dumps({
            "event": "step_rejected",
            "ts": _now(),
            "step_index": data.get("step_index", 0),
            "error_kind": data.get("error_kind", ""),
            "error": str(data.get("error", ""))[:200],
        }))
