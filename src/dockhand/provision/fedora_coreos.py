# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/dockhand/provision/fedora_coreos.py

from __future__ import annotations

import logging
import shlex
import time
import uuid
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from dockhand.observers.dispatcher import EventBus
from dockhand.observers.events import (
    ProvisionStepFailed,
    ProvisionStepStarted,
    ProvisionStepSucceeded,
    ProvisionSummary,
    new_ctx,
)

from .engine_config import EngineConfigRenderer
from .errors import ProvisionError
from .interface import CommandRunner, Driver, ProvisionSteps
from .models import (
    AuthOptions,
    ConfigurationContext,
    DockerOptions,
    EngineOptions,
    HostFingerprint,
    PackageAction,
    ProvisionContext,
    ProvisionState,
    RegistryOptions,
    SwarmOptions,
)
from .steps import SshProvisionSteps

log = logging.getLogger("dockhand")

DEFAULT_DOCKER_PORT = 2376

_Step = Tuple[str, ProvisionState, Callable[[ProvisionContext], Optional[ProvisionContext]]]


def is_compatible(fingerprint: HostFingerprint) -> bool:
    """
    Fedora CoreOS only. Ids are compared as-is; the fingerprint provider
    is responsible for normalising them.
    """
    is_fedora = fingerprint.distribution_id == "fedora"
    is_coreos = fingerprint.variant_id == "coreos"
    return is_fedora and is_coreos


class FedoraCoreOSProvisioner:
    """
    Provisions a Fedora CoreOS host so dockerd listens on TLS.

    One instance per host. provision() is not safe to call concurrently on
    the same instance; it replaces ``context`` and ``state`` as it goes.
    """

    daemon_options_file = "/etc/systemd/system/docker.service.d/10-machine.conf"

    def __init__(
        self,
        driver: Driver,
        runner: CommandRunner,
        steps: Optional[ProvisionSteps] = None,
        *,
        renderer: Optional[EngineConfigRenderer] = None,
        bus: Optional[EventBus] = None,
        docker_port: int = DEFAULT_DOCKER_PORT,
    ):
        self.driver = driver
        self.runner = runner
        self.steps = steps or SshProvisionSteps()
        self.renderer = renderer or EngineConfigRenderer()
        self.bus = bus
        self.docker_port = docker_port

        self.os_release_info: Optional[HostFingerprint] = None
        self.context: Optional[ProvisionContext] = None
        self.state = ProvisionState.INIT
        self.failed_step: Optional[str] = None
        self.run_id: Optional[str] = None

    def __str__(self) -> str:
        return "Fedora CoreOS"

    # ------------------ host facts ------------------

    def compatible_with_host(self) -> bool:
        if self.os_release_info is None:
            return False
        return is_compatible(self.os_release_info)

    def ssh_command(self, cmd: str) -> str:
        return self.runner.execute(cmd)

    def set_hostname(self, hostname: str) -> None:
        if not hostname:
            raise ValueError("hostname must not be empty")
        log.debug("SetHostname: %s", hostname)
        self.ssh_command(f"sudo hostnamectl set-hostname {shlex.quote(hostname)}")

    def package(self, name: str, action: PackageAction) -> None:
        # CoreOS ships docker in the base image; there is nothing to install.
        return None

    # ------------------ engine config ------------------

    def generate_docker_options(
        self,
        docker_port: int,
        ctx: Optional[ProvisionContext] = None,
    ) -> DockerOptions:
        """
        Render the systemd drop-in for dockerd.

        The ``provider=<driver>`` label is appended to a copy of the engine
        options; the caller's options are left untouched.
        """
        ctx = ctx or self.context
        if ctx is None:
            raise ProvisionError("no provisioning context; pass ctx or call provision() first")

        driver_label = f"provider={self.driver.driver_name()}"
        engine = ctx.engine.model_copy(update={"labels": [*ctx.engine.labels, driver_label]})

        text = self.renderer.render(
            ConfigurationContext(docker_port=docker_port, auth=ctx.auth, engine=engine)
        )
        return DockerOptions(engine_options=text, engine_options_path=self.daemon_options_file)

    # ------------------ orchestration ------------------

    def _step_hostname(self, ctx: ProvisionContext) -> None:
        self.set_hostname(self.driver.get_machine_name())

    def _step_options_dir(self, ctx: ProvisionContext) -> None:
        self.steps.make_docker_options_dir(self)

    def _step_prepare_auth(self, ctx: ProvisionContext) -> ProvisionContext:
        log.debug("Preparing certificates")
        return replace(ctx, auth=self.steps.set_remote_auth_options(self, ctx.auth))

    def _step_configure_auth(self, ctx: ProvisionContext) -> None:
        log.debug("Setting up certificates")
        self.steps.configure_auth(self, ctx)

    def _step_registry_login(self, ctx: ProvisionContext) -> None:
        log.debug("Logging into private registry")
        self.steps.docker_login(self, ctx.registry)

    def _step_swarm(self, ctx: ProvisionContext) -> None:
        log.debug("Configuring swarm")
        self.steps.configure_swarm(self, ctx.swarm, ctx.auth)

    def _plan(self) -> List[_Step]:
        return [
            ("hostname", ProvisionState.HOSTNAME_SET, self._step_hostname),
            ("options_dir", ProvisionState.OPTIONS_DIR_READY, self._step_options_dir),
            ("auth_prepare", ProvisionState.AUTH_PREPARED, self._step_prepare_auth),
            ("auth_configure", ProvisionState.AUTH_CONFIGURED, self._step_configure_auth),
            ("registry_login", ProvisionState.REGISTRY_LOGGED_IN, self._step_registry_login),
            ("swarm", ProvisionState.SWARM_CONFIGURED, self._step_swarm),
        ]

    def _emit(self, event_cls, **fields) -> None:
        if self.bus is None:
            return
        ctx = new_ctx(machine=self.driver.get_machine_name(), run_id=self.run_id)
        self.bus.emit(event_cls(**ctx, **fields))

    def provision(
        self,
        swarm_options: SwarmOptions,
        auth_options: AuthOptions,
        engine_options: EngineOptions,
        registry_options: RegistryOptions,
        *,
        run_id: Optional[str] = None,
    ) -> None:
        """
        Run the fixed step sequence. The first exception aborts the run and
        is re-raised unchanged; completed steps are not rolled back.
        """
        self.run_id = run_id or str(uuid.uuid4())
        self.state = ProvisionState.INIT
        self.failed_step = None
        self.context = ProvisionContext(
            swarm=swarm_options,
            auth=auth_options,
            engine=engine_options,
            registry=registry_options,
        )

        for name, next_state, action in self._plan():
            log.info("[%s] step %s", self.driver.get_machine_name(), name)
            self._emit(ProvisionStepStarted, step=name)
            started = time.monotonic()
            try:
                updated = action(self.context)
            except Exception as exc:
                self.state = ProvisionState.FAILED
                self.failed_step = name
                log.error("[%s] step %s failed: %s", self.driver.get_machine_name(), name, exc)
                self._emit(ProvisionStepFailed, step=name, error=str(exc))
                self._emit(ProvisionSummary, status="FAILED", failed_step=name, error=str(exc))
                raise

            if updated is not None:
                self.context = updated
            self.state = next_state
            self._emit(
                ProvisionStepSucceeded,
                step=name,
                state=next_state.value,
                duration_ms=int((time.monotonic() - started) * 1000),
            )

        log.info("[%s] provisioning complete", self.driver.get_machine_name())
        self._emit(ProvisionSummary, status="OK")
