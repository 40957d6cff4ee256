# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/dockhand/provision/steps.py

from __future__ import annotations

import logging
import posixpath
import shlex
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from .errors import CollaboratorError
from .models import AuthOptions, ProvisionContext, RegistryOptions, SwarmOptions

if TYPE_CHECKING:
    from .fedora_coreos import FedoraCoreOSProvisioner

log = logging.getLogger("dockhand")


class SshProvisionSteps:
    """
    Default step collaborators. Everything goes through the provisioner's
    command runner; certificates are read from the local paths in
    AuthOptions, never generated here.
    """

    def make_docker_options_dir(self, provisioner: "FedoraCoreOSProvisioner") -> None:
        options_dir = posixpath.dirname(provisioner.daemon_options_file)
        provisioner.ssh_command(f"sudo mkdir -p {options_dir}")

    def set_remote_auth_options(
        self, provisioner: "FedoraCoreOSProvisioner", auth: AuthOptions
    ) -> AuthOptions:
        cert_dir = auth.remote_cert_dir
        return auth.model_copy(
            update={
                "ca_cert_remote_path": posixpath.join(cert_dir, "ca.pem"),
                "server_cert_remote_path": posixpath.join(cert_dir, "server.pem"),
                "server_key_remote_path": posixpath.join(cert_dir, "server-key.pem"),
            }
        )

    def _read_local(self, label: str, path: Optional[str]) -> str:
        if not path:
            raise CollaboratorError(f"auth options: {label} path is not set")
        p = Path(path).expanduser()
        if not p.is_file():
            raise CollaboratorError(f"auth options: {label} not found at {p}")
        return p.read_text(encoding="utf-8")

    def configure_auth(
        self, provisioner: "FedoraCoreOSProvisioner", ctx: ProvisionContext
    ) -> None:
        """
        Copy certificates to the host, install the daemon drop-in and
        restart docker so it picks both up.
        """
        auth = ctx.auth
        uploads = [
            ("ca certificate", auth.ca_cert_path, auth.ca_cert_remote_path, 0o644),
            ("server certificate", auth.server_cert_path, auth.server_cert_remote_path, 0o644),
            ("server key", auth.server_key_path, auth.server_key_remote_path, 0o600),
        ]
        # read everything first so a missing file fails before touching the host
        contents = [
            (self._read_local(label, local), remote, mode)
            for label, local, remote, mode in uploads
        ]

        provisioner.ssh_command(f"sudo mkdir -p {shlex.quote(auth.remote_cert_dir)}")
        for content, remote, mode in contents:
            log.debug("Uploading %s (mode %04o)", remote, mode)
            provisioner.runner.put_text(content, remote, sudo=True, mode=mode)

        opts = provisioner.generate_docker_options(provisioner.docker_port, ctx)
        log.debug("Installing engine options at %s", opts.engine_options_path)
        provisioner.runner.put_text(opts.engine_options, opts.engine_options_path, sudo=True)

        provisioner.ssh_command("sudo systemctl daemon-reload")
        provisioner.ssh_command("sudo systemctl restart docker")

    def docker_login(
        self, provisioner: "FedoraCoreOSProvisioner", registry: RegistryOptions
    ) -> None:
        for reg in registry.registries:
            if not reg.url:
                continue
            log.debug("docker login %s", reg.url)
            cmd = f"sudo docker login {shlex.quote(reg.url)}"
            if reg.username:
                cmd = f"{cmd} --username {shlex.quote(reg.username)}"
            if not reg.password:
                provisioner.ssh_command(cmd)
                continue
            # the password travels on stdin only, never in the command line
            provisioner.runner.execute(f"{cmd} --password-stdin", stdin_data=reg.password)

    def configure_swarm(
        self,
        provisioner: "FedoraCoreOSProvisioner",
        swarm: SwarmOptions,
        auth: AuthOptions,
    ) -> None:
        if not swarm.is_swarm:
            log.debug("Swarm not requested, skipping")
            return

        if swarm.master:
            advertise = swarm.advertise_address or "eth0"
            provisioner.ssh_command(f"sudo docker swarm init --advertise-addr {shlex.quote(advertise)}")
            return

        if not swarm.join_token or not swarm.manager_address:
            raise CollaboratorError("swarm join requires join_token and manager_address")
        provisioner.runner.execute(
            f"sudo docker swarm join --token \"$(cat)\" {shlex.quote(swarm.manager_address)}",
            stdin_data=swarm.join_token,
        )
