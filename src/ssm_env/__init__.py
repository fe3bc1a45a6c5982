"""Populate environment variables from SSM Parameter Store and KMS before exec."""

__version__ = "0.1.0"

from .errors import (  # noqa: E402
    ClassificationError,
    DecodeError,
    DecryptionError,
    InvalidParametersError,
    MalformedReferenceError,
    SsmEnvError,
    StoreCallError,
    StoreInconsistencyError,
)
from .expander import ExpansionResult, Expander  # noqa: E402

__all__ = [
    "ClassificationError",
    "DecodeError",
    "DecryptionError",
    "Expander",
    "ExpansionResult",
    "InvalidParametersError",
    "MalformedReferenceError",
    "SsmEnvError",
    "StoreCallError",
    "StoreInconsistencyError",
    "__version__",
]
