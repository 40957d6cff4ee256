# src/dockhand/observers/logger.py
from __future__ import annotations
import logging
from .events import BaseEvent, ProvisionStepFailed, ProvisionSummary


class LoggerObserver:
    """Mirrors provisioning events into the run log."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        d = event.dict()
        etype = event.__class__.__name__
        msg = ", ".join(f"{k}={v}" for k, v in d.items() if k not in ("ts", "run_id") and v is not None)

        failed = isinstance(event, ProvisionStepFailed) or (
            isinstance(event, ProvisionSummary) and event.status != "OK"
        )
        level = logging.ERROR if failed else logging.DEBUG
        self.logger.log(level, "[EVENT] %s: %s", etype, msg)
