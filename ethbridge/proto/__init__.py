"""
ethbridge.proto
===============

Signing-side protocol helpers. Only digest *preparation* lives here; key
handling and signature verification belong to the signer.
"""

from __future__ import annotations

from .signable import (  # noqa: F401
    ETH_MESSAGE_PREFIX,
    SIGNED_MESSAGE_TAG,
    Signable,
    SignableEthMessage,
    signable_message_prefix,
)

__all__ = [
    "SIGNED_MESSAGE_TAG",
    "ETH_MESSAGE_PREFIX",
    "signable_message_prefix",
    "Signable",
    "SignableEthMessage",
]
