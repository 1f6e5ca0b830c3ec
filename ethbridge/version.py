"""
Version of the ethbridge package.

`ETHBRIDGE_VERSION` in the environment overrides the built-in tag (used by
release tooling when stamping builds).
"""

from __future__ import annotations

import os

DEFAULT_VERSION = "0.1.0"

__version__ = os.environ.get("ETHBRIDGE_VERSION", "").strip() or DEFAULT_VERSION

__all__ = ["__version__", "DEFAULT_VERSION"]
