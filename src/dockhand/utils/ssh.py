# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import paramiko

from dockhand.config.models import MachineSpec
from dockhand.utils.ssh_runner import SSHRunner


def open_ssh(
    machine: MachineSpec,
    *,
    connect_timeout: float = 20.0,
    command_timeout: int | None = None,
) -> SSHRunner:
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    pkey = None
    if machine.pkey_path:
        key_path = str(machine.pkey_path.expanduser())
        for key_cls in (
            paramiko.RSAKey,
            paramiko.Ed25519Key,
            paramiko.ECDSAKey,
        ):
            try:
                pkey = key_cls.from_private_key_file(key_path)
                break
            except paramiko.SSHException:
                continue

    client.connect(
        hostname=machine.address,
        port=machine.port,
        username=machine.username,
        password=machine.password if not pkey else None,
        pkey=pkey,
        timeout=connect_timeout,
        allow_agent=pkey is None,
        look_for_keys=pkey is None,
    )

    return SSHRunner(client, timeout=command_timeout)
