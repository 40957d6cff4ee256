# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/dockhand/provision/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class HostFingerprint:
    """
    Identifying fields from the remote host's /etc/os-release.
    """
    distribution_id: str          # ID, e.g. 'fedora'
    variant_id: str               # VARIANT_ID, e.g. 'coreos'
    name: Optional[str] = None
    version_id: Optional[str] = None
    pretty_name: Optional[str] = None


class AuthOptions(BaseModel):
    # local certificate material
    storage_path: Optional[str] = None
    ca_cert_path: Optional[str] = None
    server_cert_path: Optional[str] = None
    server_key_path: Optional[str] = None
    # where the daemon expects them on the host
    remote_cert_dir: str = "/etc/docker"
    ca_cert_remote_path: str = ""
    server_cert_remote_path: str = ""
    server_key_remote_path: str = ""


class EngineOptions(BaseModel):
    labels: List[str] = Field(default_factory=list)
    insecure_registry: List[str] = Field(default_factory=list)
    registry_mirror: List[str] = Field(default_factory=list)
    arbitrary_flags: List[str] = Field(default_factory=list)
    env: List[str] = Field(default_factory=list)
    # accepted for compatibility with other provisioners, unused on CoreOS
    storage_driver: Optional[str] = None
    install_url: Optional[str] = None


class SwarmOptions(BaseModel):
    is_swarm: bool = False
    master: bool = False
    join_token: Optional[str] = None
    manager_address: Optional[str] = None
    advertise_address: Optional[str] = None


class RegistryCredentials(BaseModel):
    url: str
    username: Optional[str] = None
    password: Optional[str] = None


class RegistryOptions(BaseModel):
    registries: List[RegistryCredentials] = Field(default_factory=list)


@dataclass(frozen=True)
class ConfigurationContext:
    """
    Everything the engine template reads. Built fresh for each render.
    """
    docker_port: int
    auth: AuthOptions
    engine: EngineOptions


@dataclass(frozen=True)
class DockerOptions:
    engine_options: str           # rendered drop-in text
    engine_options_path: str      # where it is installed on the host


@dataclass(frozen=True)
class ProvisionContext:
    swarm: SwarmOptions
    auth: AuthOptions
    engine: EngineOptions
    registry: RegistryOptions


class ProvisionState(str, Enum):
    INIT = "init"
    HOSTNAME_SET = "hostname_set"
    OPTIONS_DIR_READY = "options_dir_ready"
    AUTH_PREPARED = "auth_prepared"
    AUTH_CONFIGURED = "auth_configured"
    REGISTRY_LOGGED_IN = "registry_logged_in"
    SWARM_CONFIGURED = "swarm_configured"
    FAILED = "failed"


class PackageAction(str, Enum):
    INSTALL = "install"
    REMOVE = "remove"
    UPGRADE = "upgrade"
