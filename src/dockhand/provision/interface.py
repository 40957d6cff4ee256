# src/dockhand/provision/interface.py

from __future__ import annotations

from typing import Optional, Protocol, Tuple, TYPE_CHECKING

from .models import AuthOptions, ProvisionContext, RegistryOptions, SwarmOptions

if TYPE_CHECKING:
    from .fedora_coreos import FedoraCoreOSProvisioner


class CommandRunner(Protocol):
    """
    Remote command channel. Owns transport, timeouts and failure detection.
    """

    def run(
        self,
        cmd: str,
        *,
        sudo: bool = False,
        timeout: Optional[int] = None,
        stdin_data: Optional[str] = None,
    ) -> Tuple[int, str, str]: ...

    def execute(
        self, cmd: str, *, sudo: bool = False, stdin_data: Optional[str] = None
    ) -> str:
        """
        Run a command and return its stdout.
        Must raise RemoteCommandError on any failure. ``stdin_data`` is fed
        to the command and must never be logged or put in error messages.
        """
        ...

    def put_text(
        self, content: str, remote_path: str, *, sudo: bool = False, mode: int = 0o644
    ) -> None: ...


class Driver(Protocol):
    def get_machine_name(self) -> str: ...

    def driver_name(self) -> str: ...


class ProvisionSteps(Protocol):
    """
    Collaborators the orchestrator delegates to, in this order.
    Each must raise on failure; none is retried.
    """

    def make_docker_options_dir(self, provisioner: "FedoraCoreOSProvisioner") -> None: ...

    def set_remote_auth_options(
        self, provisioner: "FedoraCoreOSProvisioner", auth: AuthOptions
    ) -> AuthOptions: ...

    def configure_auth(
        self, provisioner: "FedoraCoreOSProvisioner", ctx: ProvisionContext
    ) -> None: ...

    def docker_login(
        self, provisioner: "FedoraCoreOSProvisioner", registry: RegistryOptions
    ) -> None: ...

    def configure_swarm(
        self,
        provisioner: "FedoraCoreOSProvisioner",
        swarm: SwarmOptions,
        auth: AuthOptions,
    ) -> None: ...
