"""nextver: next release version from Conventional Commits."""

from __future__ import annotations

__version__ = "0.1.0"
