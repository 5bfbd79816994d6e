from plansim.callbacks.base import PlanCallback, BaseCallback
from plansim.callbacks.logging import LoggingCallback

__all__ = ["PlanCallback", "BaseCallback", "LoggingCallback"]
