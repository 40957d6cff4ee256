import pytest

from dockhand.observers.dispatcher import EventBus
from dockhand.observers.events import (
    ProvisionStepFailed,
    ProvisionStepStarted,
    ProvisionStepSucceeded,
    ProvisionSummary,
)
from dockhand.provision.drivers import StaticDriver
from dockhand.provision.errors import CollaboratorError, ProvisionError, RemoteCommandError
from dockhand.provision.fedora_coreos import FedoraCoreOSProvisioner
from dockhand.provision.models import (
    AuthOptions,
    EngineOptions,
    PackageAction,
    ProvisionState,
    RegistryOptions,
    SwarmOptions,
)

# ----------------- Fakes -----------------

class FakeRunner:
    def __init__(self, fail_on=None):
        self.commands = []
        self.uploads = []
        self._fail_on = fail_on

    def run(self, cmd, *, sudo=False, timeout=None, stdin_data=None):
        self.commands.append(cmd)
        return 0, "", ""

    def execute(self, cmd, *, sudo=False, stdin_data=None):
        self.commands.append(cmd)
        if self._fail_on and self._fail_on in cmd:
            raise RemoteCommandError(cmd, exit_code=1, stderr="boom")
        return ""

    def put_text(self, content, remote_path, *, sudo=False, mode=0o644):
        self.uploads.append((remote_path, content))


class RecordingSteps:
    """Records collaborator calls; optionally fails one of them."""

    def __init__(self, fail=None, exc=None):
        self.calls = []
        self.fail = fail
        self.exc = exc or CollaboratorError(f"{fail} failed")
        self.seen_auth = {}

    def _hit(self, name):
        self.calls.append(name)
        if name == self.fail:
            raise self.exc

    def make_docker_options_dir(self, provisioner):
        self._hit("options_dir")

    def set_remote_auth_options(self, provisioner, auth):
        self._hit("auth_prepare")
        return auth.model_copy(update={"ca_cert_remote_path": "/remote/ca.pem"})

    def configure_auth(self, provisioner, ctx):
        self.seen_auth["configure_auth"] = ctx.auth
        self._hit("auth_configure")

    def docker_login(self, provisioner, registry):
        self._hit("registry_login")

    def configure_swarm(self, provisioner, swarm, auth):
        self.seen_auth["configure_swarm"] = auth
        self._hit("swarm")


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


def _provisioner(runner=None, steps=None, bus=None):
    return FedoraCoreOSProvisioner(
        StaticDriver("node-1", "amazonec2"),
        runner or FakeRunner(),
        steps or RecordingSteps(),
        bus=bus,
    )


def _run(p):
    p.provision(SwarmOptions(), AuthOptions(), EngineOptions(), RegistryOptions())


# ----------------- Hostname -----------------

def test_set_hostname_issues_exactly_one_command():
    runner = FakeRunner()
    p = _provisioner(runner)
    p.set_hostname("node-1")
    assert runner.commands == ["sudo hostnamectl set-hostname node-1"]


def test_set_hostname_returns_channel_error_unchanged():
    runner = FakeRunner(fail_on="hostnamectl")
    p = _provisioner(runner)
    with pytest.raises(RemoteCommandError) as ei:
        p.set_hostname("node-1")
    assert ei.value.exit_code == 1
    assert ei.value.command == "sudo hostnamectl set-hostname node-1"
    assert len(runner.commands) == 1


def test_set_hostname_quotes_the_name():
    runner = FakeRunner()
    _provisioner(runner).set_hostname("node 1; reboot")
    assert runner.commands == ["sudo hostnamectl set-hostname 'node 1; reboot'"]


def test_set_hostname_rejects_empty_name():
    runner = FakeRunner()
    with pytest.raises(ValueError):
        _provisioner(runner).set_hostname("")
    assert runner.commands == []


def test_package_is_a_noop():
    runner = FakeRunner()
    p = _provisioner(runner)
    assert p.package("docker", PackageAction.INSTALL) is None
    assert runner.commands == []


# ----------------- Orchestration -----------------

def test_successful_run_calls_every_step_once_in_order():
    runner = FakeRunner()
    steps = RecordingSteps()
    p = _provisioner(runner, steps)

    _run(p)

    assert runner.commands == ["sudo hostnamectl set-hostname node-1"]
    assert steps.calls == [
        "options_dir",
        "auth_prepare",
        "auth_configure",
        "registry_login",
        "swarm",
    ]
    assert p.state is ProvisionState.SWARM_CONFIGURED
    assert p.failed_step is None


def test_replaced_auth_options_reach_later_steps():
    steps = RecordingSteps()
    p = _provisioner(steps=steps)
    _run(p)

    assert steps.seen_auth["configure_auth"].ca_cert_remote_path == "/remote/ca.pem"
    assert steps.seen_auth["configure_swarm"].ca_cert_remote_path == "/remote/ca.pem"
    assert p.context.auth.ca_cert_remote_path == "/remote/ca.pem"


def test_caller_auth_options_are_not_mutated():
    auth = AuthOptions()
    p = _provisioner()
    p.provision(SwarmOptions(), auth, EngineOptions(), RegistryOptions())
    assert auth.ca_cert_remote_path == ""


def test_auth_prepare_failure_stops_the_run():
    boom = CollaboratorError("cannot resolve auth paths")
    steps = RecordingSteps(fail="auth_prepare", exc=boom)
    p = _provisioner(steps=steps)

    with pytest.raises(CollaboratorError) as ei:
        _run(p)

    assert ei.value is boom
    assert steps.calls == ["options_dir", "auth_prepare"]
    assert steps.calls.count("auth_configure") == 0
    assert steps.calls.count("registry_login") == 0
    assert steps.calls.count("swarm") == 0
    assert p.state is ProvisionState.FAILED
    assert p.failed_step == "auth_prepare"


def test_hostname_failure_aborts_before_any_collaborator():
    runner = FakeRunner(fail_on="hostnamectl")
    steps = RecordingSteps()
    p = _provisioner(runner, steps)

    with pytest.raises(RemoteCommandError):
        _run(p)

    assert steps.calls == []
    assert p.failed_step == "hostname"


def test_non_provision_errors_propagate_as_is():
    boom = KeyError("registry")
    steps = RecordingSteps(fail="registry_login", exc=boom)
    p = _provisioner(steps=steps)

    with pytest.raises(KeyError) as ei:
        _run(p)
    assert ei.value is boom
    assert "swarm" not in steps.calls


def test_events_are_emitted_for_each_step():
    cap = Capture()
    p = _provisioner(bus=EventBus([cap]))
    p.provision(SwarmOptions(), AuthOptions(), EngineOptions(), RegistryOptions(), run_id="run-1")

    started = [e.step for e in cap.events if isinstance(e, ProvisionStepStarted)]
    done = [e.step for e in cap.events if isinstance(e, ProvisionStepSucceeded)]
    assert started == done == [
        "hostname",
        "options_dir",
        "auth_prepare",
        "auth_configure",
        "registry_login",
        "swarm",
    ]
    summary = cap.events[-1]
    assert isinstance(summary, ProvisionSummary)
    assert summary.status == "OK"
    assert {e.run_id for e in cap.events} == {"run-1"}
    assert {e.machine for e in cap.events} == {"node-1"}


def test_failure_events_name_the_step():
    cap = Capture()
    steps = RecordingSteps(fail="swarm")
    p = _provisioner(steps=steps, bus=EventBus([cap]))

    with pytest.raises(CollaboratorError):
        _run(p)

    failed = [e for e in cap.events if isinstance(e, ProvisionStepFailed)]
    assert [e.step for e in failed] == ["swarm"]
    summary = cap.events[-1]
    assert summary.status == "FAILED"
    assert summary.failed_step == "swarm"


def test_broken_observer_does_not_break_the_run():
    class Broken:
        def notify(self, ev):
            raise RuntimeError("observer down")

    p = _provisioner(bus=EventBus([Broken()]))
    _run(p)
    assert p.state is ProvisionState.SWARM_CONFIGURED


# ----------------- Docker options -----------------

def test_generate_docker_options_appends_provider_label_to_a_copy():
    p = _provisioner()
    engine = EngineOptions(labels=["foo=bar"])
    p.provision(SwarmOptions(), AuthOptions(), engine, RegistryOptions())

    opts = p.generate_docker_options(2376)

    assert opts.engine_options_path == "/etc/systemd/system/docker.service.d/10-machine.conf"
    lines = opts.engine_options.splitlines()
    assert "          --label foo=bar \\\\" in lines
    assert "          --label provider=amazonec2 \\\\" in lines
    assert lines.index("          --label foo=bar \\\\") < lines.index(
        "          --label provider=amazonec2 \\\\"
    )
    assert engine.labels == ["foo=bar"]
    # rendering twice does not accumulate labels
    again = p.generate_docker_options(2376)
    assert again.engine_options.count("provider=amazonec2") == 1


def test_generate_docker_options_needs_a_context():
    with pytest.raises(ProvisionError):
        _provisioner().generate_docker_options(2376)
