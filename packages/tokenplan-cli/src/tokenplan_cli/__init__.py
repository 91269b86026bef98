"""tokenplan-cli: Command-line interface for tokenplan."""

from __future__ import annotations

__version__ = "0.1.0"
