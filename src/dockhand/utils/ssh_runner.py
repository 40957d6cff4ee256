# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/dockhand/utils/ssh_runner.py

from __future__ import annotations

import itertools
import logging
import os
import shlex
from typing import Optional

import paramiko

from dockhand.provision.errors import RemoteCommandError

log = logging.getLogger("dockhand")

_tmp_counter = itertools.count(1)


class SSHRunner:
    """
    Blocking command channel over one paramiko connection.

    ``timeout`` is the per-command timeout handed to paramiko; callers
    higher up never set their own.
    """

    def __init__(self, client: paramiko.SSHClient, *, timeout: Optional[int] = None):
        self.client = client
        self.timeout = timeout

    def run(
        self,
        cmd: str,
        *,
        sudo: bool = False,
        timeout: Optional[int] = None,
        stdin_data: Optional[str] = None,
    ) -> tuple[int, str, str]:
        """
        ``stdin_data`` is written to the remote process and never logged;
        secrets go there, not into ``cmd``.
        """
        if sudo:
            cmd = f"sudo -H -E bash -c {shlex.quote(cmd)}"

        log.debug("ssh: %s", cmd)
        stdin, stdout, stderr = self.client.exec_command(cmd, timeout=timeout or self.timeout)
        if stdin_data is not None:
            stdin.write(stdin_data)
            stdin.flush()
            stdin.channel.shutdown_write()
        out = stdout.read().decode("utf-8", errors="replace")
        err = stderr.read().decode("utf-8", errors="replace")
        rc = stdout.channel.recv_exit_status()
        return rc, out, err

    def execute(self, cmd: str, *, sudo: bool = False, stdin_data: Optional[str] = None) -> str:
        """
        Run ``cmd`` and return stdout; any failure raises RemoteCommandError.
        """
        try:
            rc, out, err = self.run(cmd, sudo=sudo, stdin_data=stdin_data)
        except (paramiko.SSHException, OSError) as e:
            raise RemoteCommandError(cmd, stderr=str(e)) from e
        if rc != 0:
            raise RemoteCommandError(cmd, exit_code=rc, stdout=out, stderr=err)
        return out

    def put_text(
        self,
        content: str,
        remote_path: str,
        *,
        sudo: bool = False,
        mode: int = 0o644,
    ) -> None:
        """
        With ``sudo`` the content is staged in a 0600 temp file and then
        installed root-owned with ``mode``; the temp file is always removed.
        """
        if not sudo:
            self._sftp_write(content, remote_path, mode)
            return

        tmp = f"/tmp/.dockhand.tmp.{os.getpid()}.{next(_tmp_counter)}"
        self._sftp_write(content, tmp, 0o600)
        try:
            self.execute(
                f"install -m {mode:04o} -o root -g root {tmp} {shlex.quote(remote_path)}",
                sudo=True,
            )
        finally:
            try:
                self.run(f"rm -f {tmp}")
            except (paramiko.SSHException, OSError):
                log.warning("could not remove staged upload %s", tmp, exc_info=True)

    def _sftp_write(self, content: str, remote_path: str, mode: int) -> None:
        try:
            sftp = self.client.open_sftp()
        except (paramiko.SSHException, OSError) as e:
            raise RemoteCommandError(f"sftp put {remote_path}", stderr=str(e)) from e
        try:
            with sftp.open(remote_path, "w") as f:
                # restrict before any content lands on disk
                f.chmod(mode)
                f.write(content)
        except OSError as e:
            raise RemoteCommandError(f"sftp put {remote_path}", stderr=str(e)) from e
        finally:
            sftp.close()

    def close(self) -> None:
        self.client.close()
