# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

"""dockhand: provisions container-engine hosts over SSH."""

__version__ = "0.1.0"
