# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/dockhand/provision/engine_config.py

from __future__ import annotations

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateError as JinjaTemplateError

from .errors import TemplateError
from .models import ConfigurationContext

TEMPLATE_NAME = "engine-config"

# systemd drop-in for docker.service. The init system reads this file
# literally, so every byte here matters.
ENGINE_CONFIG_TEMPLATE = r"""[Service]
ExecStart=
ExecStart=/usr/bin/dockerd \\
          --host=fd:// \\
          --exec-opt native.cgroupdriver=systemd \\
          --host=tcp://0.0.0.0:{{ docker_port }} \\
          --tlsverify \\
          --tlscacert {{ auth.ca_cert_remote_path }} \\
          --tlscert {{ auth.server_cert_remote_path }} \\
          --tlskey {{ auth.server_key_remote_path }}{% for label in engine.labels %} \\
          --label {{ label }}{% endfor %}{% for registry in engine.insecure_registry %} \\
          --insecure-registry {{ registry }}{% endfor %}{% for mirror in engine.registry_mirror %} \\
          --registry-mirror {{ mirror }}{% endfor %}{% for flag in engine.arbitrary_flags %} \\
          -{{ flag }}{% endfor %} \\
          \$OPTIONS
Environment={% for var in engine.env %}{{ var | dquote }} {% endfor %}
"""

_ESCAPES = {
    "\a": r"\a",
    "\b": r"\b",
    "\f": r"\f",
    "\n": r"\n",
    "\r": r"\r",
    "\t": r"\t",
    "\v": r"\v",
    '"': r"\"",
    "\\": r"\\",
}


def dquote(value) -> str:
    """
    Double-quote a string the way Go's %q verb does.
    """
    out = ['"']
    for ch in str(value):
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        else:
            code = ord(ch)
            if code < 0x20 or code == 0x7F:
                out.append(f"\\x{code:02x}")
            elif code <= 0xFFFF:
                out.append(f"\\u{code:04x}")
            else:
                out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


class EngineConfigRenderer:
    """
    Renders the daemon start-up override from the built-in template.

    The template is parsed once here; a syntax error is a programming
    defect and surfaces at construction, never per render.
    """

    def __init__(self, template: str = ENGINE_CONFIG_TEMPLATE):
        self.env = Environment(
            loader=DictLoader({TEMPLATE_NAME: template}),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters["dquote"] = dquote
        try:
            self._template = self.env.get_template(TEMPLATE_NAME)
        except JinjaTemplateError as e:
            raise TemplateError(f"engine config template is invalid: {e}") from e

    def render(self, ctx: ConfigurationContext) -> str:
        try:
            return self._template.render(
                docker_port=ctx.docker_port,
                auth=ctx.auth,
                engine=ctx.engine,
            )
        except JinjaTemplateError as e:
            raise TemplateError(f"failed to render engine config: {e}") from e
