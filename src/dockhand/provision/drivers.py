# src/dockhand/provision/drivers.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StaticDriver:
    """
    Driver for a machine that already exists; names come from config.
    """
    machine_name: str
    name: str = "generic"

    def get_machine_name(self) -> str:
        return self.machine_name

    def driver_name(self) -> str:
        return self.name
