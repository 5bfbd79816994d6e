"""Base callback protocol for plan run lifecycle hooks.

Callbacks observe a run without changing it. The runner calls every
registered callback as ``cb(event, data)``; BaseCallback routes those calls
to named methods.

Usage:
    class PrintCallback(BaseCallback):
        def on_step_complete(self, data, **kw):
            print(data["step_index"], data["tx_id"])

    runner = PlanRunner(store, callbacks=[PrintCallback()])
"""

from typing import Any, Protocol, runtime_checkable

STEP_STARTED = "step_started"
STEP_COMPLETED = "step_completed"
STEP_FAILED = "step_failed"
STEP_REJECTED = "step_rejected"


@runtime_checkable
class PlanCallback(Protocol):
    """Anything callable as ``cb(event, data)``."""

    def __call__(self, event: str, data: dict[str, Any]) -> None:
        ...


class BaseCallback:
    """No-op hooks. Subclass and override the ones you need."""

    def __call__(self, event: str, data: dict[str, Any]) -> None:
        if event == STEP_STARTED:
            self.on_step_start(data)
        elif event == STEP_COMPLETED:
            self.on_step_complete(data)
        elif event == STEP_FAILED:
            self.on_step_failed(data)
        elif event == STEP_REJECTED:
            self.on_step_rejected(data)

    def on_step_start(self, data: dict[str, Any], **kwargs: Any) -> None:
        """Called after validation and resolution, right before dispatch."""
        pass

    def on_step_complete(self, data: dict[str, Any], **kwargs: Any) -> None:
        """Called when a step dispatched successfully."""
        pass

    def on_step_failed(self, data: dict[str, Any], **kwargs: Any) -> None:
        """Called when dispatch failed; the error is on the step's Response."""
        pass

    def on_step_rejected(self, data: dict[str, Any], **kwargs: Any) -> None:
        """Called when a step could not be loaded, validated, or resolved."""
        pass
