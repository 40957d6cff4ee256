# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .errors import (
    CollaboratorError,
    ProvisionError,
    ProvisionerNotFoundError,
    RemoteCommandError,
    TemplateError,
)
from .fedora_coreos import FedoraCoreOSProvisioner, is_compatible
from .registry import ProvisionerRegistry, default_registry

__all__ = [
    "CollaboratorError",
    "FedoraCoreOSProvisioner",
    "ProvisionError",
    "ProvisionerNotFoundError",
    "ProvisionerRegistry",
    "RemoteCommandError",
    "TemplateError",
    "default_registry",
    "is_compatible",
]
