from __future__ import annotations

from typing import Iterable, List


class SsmEnvError(RuntimeError):
    """Base class for every failure raised while expanding the environment."""


class ClassificationError(SsmEnvError):
    """Raised when the configured matcher cannot be evaluated for a variable."""


class MalformedReferenceError(SsmEnvError):
    """Raised when a derived parameter name is not rooted at '/'."""

    def __init__(self, name: str, value: str) -> None:
        super().__init__(
            f"SSM parameters must have a leading '/' (ssm:///<path>): {name}={value}"
        )
        self.name = name
        self.value = value


class StoreCallError(SsmEnvError):
    """Raised when a GetParameters call fails outright."""


class InvalidParametersError(SsmEnvError):
    """Raised when Parameter Store rejects one or more requested names."""

    def __init__(self, invalid_parameters: Iterable[str]) -> None:
        self.invalid_parameters: List[str] = [name for name in invalid_parameters if name]
        super().__init__(f"invalid parameters: {self.invalid_parameters}")


class StoreInconsistencyError(SsmEnvError):
    """Raised when a requested name is neither returned nor reported invalid."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: List[str] = list(missing)
        super().__init__(f"parameters missing from response: {self.missing}")


class DecodeError(SsmEnvError):
    """Raised when a KMS payload is not valid base64."""


class DecryptionError(SsmEnvError):
    """Raised when KMS fails to decrypt a payload."""
