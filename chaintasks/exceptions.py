"""Exceptions raised by chaintasks handlers."""


class TaskError(Exception):
    """Base exception for all task failures that are not chain or toolchain errors."""


class InvalidParameters(TaskError, ValueError):
    """Raised when parameters do not match the ABI of the targeted method or constructor."""


class ContractNotFound(TaskError, ValueError):
    """Raised when a contract name cannot be resolved in the project or its dependencies."""


class NotAProxy(TaskError, ValueError):
    """Raised when an address does not hold an EIP-1967 proxy."""


class VerificationError(TaskError):
    """Raised when source verification fails for an already deployed contract."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Verification of contract at {address} failed: {reason}")


class ExplorerUnavailable(TaskError):
    """Raised when verification is requested on a network without a block explorer."""
