"""
ethbridge.utils
---------------

Small stdlib-only helpers shared by the encoder, the digest types and the CLI.
Submodules are exposed lazily so importing `ethbridge.utils` is cheap:

    from ethbridge import utils
    utils.bytes.pad_right(b"test")

`bytes` shadows the builtin if imported directly; prefer module-qualified
access (`utils.bytes`).
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any, Dict, List

__all__: List[str] = ["bytes"]

_SUBMODS: Dict[str, str] = {
    "bytes": "ethbridge.utils.bytes",
}

if TYPE_CHECKING:  # pragma: no cover - type-checking only
    from . import bytes as bytes  # type: ignore


def __getattr__(name: str) -> Any:
    if name in _SUBMODS:
        mod = import_module(_SUBMODS[name])
        globals()[name] = mod
        return mod
    raise AttributeError(f"module 'ethbridge.utils' has no attribute '{name}'")
