"""
ethbridge.abi
=============

Ethereum contract ABI value model and canonical encoder.

  • `token`    : the tagged union of ABI values (Uint, Address, Array, ...).
  • `encoding` : head/tail `abi.encode` over a token sequence.

Everything here is pure-Python and deterministic. Decoding is out of scope.
"""

from __future__ import annotations

from .encoding import *  # noqa: F401,F403
from .token import *  # noqa: F401,F403
from .encoding import __all__ as _all_encoding
from .token import __all__ as _all_token

__all__ = tuple(dict.fromkeys((*_all_token, *_all_encoding)))
