from pathlib import Path
import textwrap

import pytest
from pydantic import ValidationError

from dockhand.config.loader import load_config

CONFIG = textwrap.dedent("""
    machine:
      name: node-1
      driver: amazonec2
      address: 10.0.0.11
      pkey_path: ~/.ssh/id_ed25519
    docker_port: 2376
    auth:
      ca_cert_path: ${CERT_DIR}/ca.pem
    engine:
      labels: [env=dev]
      env: ["HTTP_PROXY=http://proxy:3128"]
    registry:
      registries:
        - url: registry.example.com
          username: bob
""")


def test_load_config_minimal_ok(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("DOCKHAND_SECRETS_FILE", raising=False)
    monkeypatch.setenv("CERT_DIR", "/srv/certs")
    f = tmp_path / "machine.yaml"
    f.write_text(CONFIG)

    cfg = load_config(f)

    assert cfg.machine.name == "node-1"
    assert cfg.machine.username == "core"
    assert cfg.machine.port == 22
    assert cfg.auth.ca_cert_path == "/srv/certs/ca.pem"
    assert cfg.engine.labels == ["env=dev"]
    assert cfg.swarm.is_swarm is False
    assert cfg.registry.registries[0].password is None


def test_secrets_are_merged_from_sibling_file(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("DOCKHAND_SECRETS_FILE", raising=False)
    (tmp_path / "machine.yaml").write_text(CONFIG)
    (tmp_path / "secrets.yaml").write_text(textwrap.dedent("""
        machine:
          password: hunter2
        swarm:
          join_token: SWMTKN-1-abc
    """))

    cfg = load_config(tmp_path / "machine.yaml")

    assert cfg.machine.password == "hunter2"
    assert cfg.machine.address == "10.0.0.11"
    assert cfg.swarm.join_token == "SWMTKN-1-abc"


def test_secrets_file_from_env(tmp_path: Path, monkeypatch):
    secrets = tmp_path / "elsewhere.yaml"
    secrets.write_text("machine:\n  username: fedora\n")
    monkeypatch.setenv("DOCKHAND_SECRETS_FILE", str(secrets))
    (tmp_path / "machine.yaml").write_text(CONFIG)

    assert load_config(tmp_path / "machine.yaml").machine.username == "fedora"


def test_invalid_port_is_rejected(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("DOCKHAND_SECRETS_FILE", raising=False)
    f = tmp_path / "machine.yaml"
    f.write_text("machine: {name: n, address: 1.2.3.4}\ndocker_port: 0\n")
    with pytest.raises(ValidationError):
        load_config(f)
