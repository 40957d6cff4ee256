# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/dockhand/provision/os_release.py

from __future__ import annotations

import logging
import shlex
from typing import Dict

from .interface import CommandRunner
from .models import HostFingerprint

log = logging.getLogger("dockhand")

OS_RELEASE_PATH = "/etc/os-release"


def _parse_pairs(text: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            # unbalanced quotes, keep the raw value
            log.debug("Unparseable os-release value for %s: %r", key, value)
            parts = [value.strip("\"'")]
        pairs[key.strip()] = " ".join(parts)
    return pairs


def parse_os_release(text: str) -> HostFingerprint:
    """
    Build a fingerprint from the contents of /etc/os-release.
    Missing ID / VARIANT_ID become empty strings.
    """
    pairs = _parse_pairs(text)
    return HostFingerprint(
        distribution_id=pairs.get("ID", ""),
        variant_id=pairs.get("VARIANT_ID", ""),
        name=pairs.get("NAME"),
        version_id=pairs.get("VERSION_ID"),
        pretty_name=pairs.get("PRETTY_NAME"),
    )


def fetch_os_release(runner: CommandRunner) -> HostFingerprint:
    out = runner.execute(f"cat {OS_RELEASE_PATH}")
    fp = parse_os_release(out)
    log.debug("Host fingerprint: id=%s variant_id=%s", fp.distribution_id, fp.variant_id)
    return fp
