"""Application configuration. All env vars defined here with defaults."""

from typing import Optional

from pydantic_settings import BaseSettings


class PlanSimConfig(BaseSettings):
    # ── App ──
    app_name: str = "plansim"
    debug: bool = False
    log_level: str = "INFO"

    # ── Runtime ──
    interpreter: Optional[str] = None   # "package.module:attr" of an Interpreter

    model_config = {"env_prefix": "PLANSIM_", "env_file": ".env", "extra": "ignore"}

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()
