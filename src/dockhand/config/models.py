# src/dockhand/config/models.py

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from dockhand.provision.models import AuthOptions, EngineOptions, RegistryOptions, SwarmOptions


class MachineSpec(BaseModel):
    """Where the machine is and how to reach it."""

    name: str                         # logical machine name, becomes the hostname
    driver: str = "generic"           # provider id, rendered as label provider=<driver>
    address: str
    port: int = 22
    username: str = "core"
    pkey_path: Optional[Path] = None
    password: Optional[str] = None
    command_timeout: Optional[int] = None


class MachineConfig(BaseModel):
    machine: MachineSpec
    provisioner: Optional[str] = None  # skip detection when set
    docker_port: int = Field(default=2376, gt=0)
    auth: AuthOptions = Field(default_factory=AuthOptions)
    engine: EngineOptions = Field(default_factory=EngineOptions)
    swarm: SwarmOptions = Field(default_factory=SwarmOptions)
    registry: RegistryOptions = Field(default_factory=RegistryOptions)
