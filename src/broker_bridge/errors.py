"""Error types raised by broker-bridge.

Every error derives from :class:`BridgeError`. The ``transient`` flag
tells the reconcile loop whether re-running the operation later can
succeed on its own (pods becoming ready, network recovering) or whether
the failure points at a configuration or protocol mismatch that should be
surfaced as a persistent condition on the managed instance.

Messages never contain credential material.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all broker-bridge errors."""

    transient: bool = False


# --- Credentials ---


class CredentialError(BridgeError):
    """Raised when the bootstrap credential cannot be obtained."""


class CredentialNotFound(CredentialError):
    """The backing secret could not be read."""


class CredentialMalformed(CredentialError):
    """The secret exists but holds no entry for the bootstrap user."""


# --- Target selection ---


class TopologyError(BridgeError):
    """The orchestration platform could not be queried for pod topology."""

    transient = True


class PodSetEmpty(BridgeError):
    """The selected pod group has no pods (or no group could be selected)."""


class PodNotReady(BridgeError):
    """No pod in the selected pod group has a ready broker container."""

    transient = True


# --- Operations ---


class UnsupportedOperation(BridgeError):
    """The instance's deployment flavor does not support the operation."""


class TransportError(BridgeError):
    """The admin API could not be reached (connection failure or timeout)."""

    transient = True


class RequestFailed(BridgeError):
    """The admin API answered with a non-2xx status."""

    def __init__(self, status: int, reason: str = "", path: str = "") -> None:
        self.status = status
        self.reason = reason
        self.path = path
        detail = f"{status} {reason}".strip()
        where = f" ({path})" if path else ""
        super().__init__(f"request api failed{where}: {detail}")


class DecodeFailed(BridgeError):
    """An admin API response body could not be decoded."""
