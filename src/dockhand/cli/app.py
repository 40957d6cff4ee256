# src/dockhand/cli/app.py
from __future__ import annotations

from pathlib import Path

import typer

from dockhand.config.loader import load_config
from dockhand.config.models import MachineConfig
from dockhand.logging.log import init_logging
from dockhand.observers.console import ConsoleObserver
from dockhand.observers.dispatcher import EventBus
from dockhand.observers.jsonfile import JsonFileObserver
from dockhand.observers.logger import LoggerObserver
from dockhand.provision.drivers import StaticDriver
from dockhand.provision.errors import ProvisionError
from dockhand.provision.fedora_coreos import FedoraCoreOSProvisioner
from dockhand.provision.models import ProvisionContext
from dockhand.provision.os_release import fetch_os_release
from dockhand.provision.registry import ProvisionerRegistry, default_registry
from dockhand.utils.ssh import open_ssh
from dockhand.utils.ssh_runner import SSHRunner


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="dockhand: provision container-engine hosts over SSH")


def _driver(cfg: MachineConfig) -> StaticDriver:
    return StaticDriver(machine_name=cfg.machine.name, name=cfg.machine.driver)


def _connect(cfg: MachineConfig) -> SSHRunner:
    return open_ssh(cfg.machine, command_timeout=cfg.machine.command_timeout)


def _select(
    registry: ProvisionerRegistry,
    cfg: MachineConfig,
    runner: SSHRunner,
) -> FedoraCoreOSProvisioner:
    driver = _driver(cfg)
    if cfg.provisioner:
        return registry.create(cfg.provisioner, driver, runner)
    return registry.detect(driver, runner)


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def detect(
    config: Path = typer.Argument(..., help="Machine definition YAML"),
):
    """Show the host fingerprint and which provisioner would handle it."""
    cfg = load_config(config)
    runner = _connect(cfg)
    try:
        fp = fetch_os_release(runner)
        typer.echo(f"id={fp.distribution_id} variant_id={fp.variant_id} ({fp.pretty_name or '-'})")
        try:
            provisioner = default_registry().detect(_driver(cfg), runner, fingerprint=fp)
        except ProvisionError as e:
            typer.echo(f"[detect] {e}", err=True)
            raise typer.Exit(1)
        typer.echo(f"provisioner: {provisioner}")
    finally:
        runner.close()


@app.command("render-config")
def render_config(
    config: Path = typer.Argument(..., help="Machine definition YAML"),
):
    """Print the docker drop-in that provisioning would install. No SSH."""
    cfg = load_config(config)
    provisioner = FedoraCoreOSProvisioner(_driver(cfg), runner=None, docker_port=cfg.docker_port)
    ctx = ProvisionContext(
        swarm=cfg.swarm,
        auth=provisioner.steps.set_remote_auth_options(provisioner, cfg.auth),
        engine=cfg.engine,
        registry=cfg.registry,
    )
    opts = provisioner.generate_docker_options(cfg.docker_port, ctx)
    typer.echo(f"# {opts.engine_options_path}")
    typer.echo(opts.engine_options, nl=False)


@app.command()
def provision(
    config: Path = typer.Argument(..., help="Machine definition YAML"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output on the console"),
    events: bool = typer.Option(False, "--events", help="Echo lifecycle events to the console"),
):
    """Detect the host OS and provision the container engine."""
    logger, run_id, log_path = init_logging(verbose=verbose)
    cfg = load_config(config)

    observers = [
        LoggerObserver(logger),
        JsonFileObserver(log_path.with_suffix(".jsonl")),
    ]
    if events:
        observers.append(ConsoleObserver())
    bus = EventBus(observers=observers)

    runner = _connect(cfg)
    try:
        provisioner = _select(default_registry(), cfg, runner)
        provisioner.bus = bus
        provisioner.docker_port = cfg.docker_port
        logger.info("Provisioning %s with %s", cfg.machine.name, provisioner)
        try:
            provisioner.provision(cfg.swarm, cfg.auth, cfg.engine, cfg.registry, run_id=run_id)
        except Exception as e:
            typer.echo(
                f"[provision] step '{provisioner.failed_step}' failed: {e}\n"
                f"log: {log_path}",
                err=True,
            )
            raise typer.Exit(1)
    except ProvisionError as e:
        typer.echo(f"[provision] {e}", err=True)
        raise typer.Exit(1)
    finally:
        runner.close()

    typer.echo(f"[provision] {cfg.machine.name} is ready (log: {log_path})")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
