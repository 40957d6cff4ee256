# src/dockhand/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single provisioning run
    machine: str      # logical machine name

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(machine: str, run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "run_id": run_id or str(uuid.uuid4()),
        "machine": machine,
    }


# ---------------------------------------------------------------------
# Provisioning lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ProvisionStepStarted(BaseEvent):
    step: str

@dataclass(frozen=True)
class ProvisionStepSucceeded(BaseEvent):
    step: str
    state: str
    duration_ms: int

@dataclass(frozen=True)
class ProvisionStepFailed(BaseEvent):
    step: str
    error: str

@dataclass(frozen=True)
class ProvisionSummary(BaseEvent):
    status: str                      # "OK" or "FAILED"
    failed_step: Optional[str] = None
    error: Optional[str] = None
