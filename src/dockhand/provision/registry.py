# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/dockhand/provision/registry.py

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .errors import ProvisionerNotFoundError
from .fedora_coreos import FedoraCoreOSProvisioner
from .interface import CommandRunner, Driver
from .models import HostFingerprint
from .os_release import fetch_os_release

log = logging.getLogger("dockhand")

ProvisionerFactory = Callable[[Driver, CommandRunner], FedoraCoreOSProvisioner]


class ProvisionerRegistry:
    """
    Explicit name -> factory map, built by whoever wires the application.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, ProvisionerFactory] = {}

    def register(self, name: str, factory: ProvisionerFactory) -> None:
        if name in self._factories:
            raise ValueError(f"provisioner {name!r} is already registered")
        self._factories[name] = factory

    def names(self) -> List[str]:
        return list(self._factories)

    def create(self, name: str, driver: Driver, runner: CommandRunner) -> FedoraCoreOSProvisioner:
        try:
            factory = self._factories[name]
        except KeyError:
            raise ProvisionerNotFoundError(f"unknown provisioner {name!r}") from None
        return factory(driver, runner)

    def detect(
        self,
        driver: Driver,
        runner: CommandRunner,
        fingerprint: Optional[HostFingerprint] = None,
    ) -> FedoraCoreOSProvisioner:
        """
        Return the first registered provisioner that accepts the host.
        The fingerprint is read from the host unless one is passed in.
        """
        if fingerprint is None:
            fingerprint = fetch_os_release(runner)
        for name, factory in self._factories.items():
            provisioner = factory(driver, runner)
            provisioner.os_release_info = fingerprint
            if provisioner.compatible_with_host():
                log.debug("Detected provisioner %s", name)
                return provisioner
        raise ProvisionerNotFoundError(
            f"no provisioner for host (id={fingerprint.distribution_id!r}, "
            f"variant_id={fingerprint.variant_id!r})"
        )


def default_registry() -> ProvisionerRegistry:
    registry = ProvisionerRegistry()
    registry.register("fedora-coreos", FedoraCoreOSProvisioner)
    return registry
