# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/dockhand/provision/errors.py
from __future__ import annotations

from typing import Optional


class ProvisionError(RuntimeError):
    """Base class for provisioning failures."""


class TemplateError(ProvisionError):
    """Raised when the built-in engine template cannot be parsed or rendered."""


class RemoteCommandError(ProvisionError):
    """Raised by the command channel when a remote command fails."""

    def __init__(
        self,
        command: str,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        detail = stderr.strip() or stdout.strip()
        msg = f"remote command failed (rc={exit_code}): {command}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class CollaboratorError(ProvisionError):
    """Raised by a provisioning step collaborator (auth, registry, swarm)."""


class ProvisionerNotFoundError(ProvisionError):
    """Raised when no registered provisioner is compatible with the host."""
