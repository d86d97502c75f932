from __future__ import annotations


class RpcSpecError(Exception):
    """Base class for rpcspec errors."""


class RegistryError(RpcSpecError, ValueError):
    """Raised when an endpoint registry or manifest breaks its invariants."""


class GenerationError(RpcSpecError, RuntimeError):
    """Raised when two registry entries would produce the same operation."""
