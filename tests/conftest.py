from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import pytest

from ssm_env.errors import DecryptionError, StoreCallError
from ssm_env.ssm import GetParametersResult, Parameter


class FakeEnviron:
    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self.values: Dict[str, str] = {"SHELL": "/bin/bash", "TERM": "screen-256color"}
        self.values.update(initial or {})
        self.applied: List[Tuple[str, str]] = []

    def list_current(self) -> List[Tuple[str, str]]:
        return list(self.values.items())

    def apply(self, name: str, value: str) -> None:
        self.applied.append((name, value))
        self.values[name] = value


class StubStore:
    """Serves parameters from a dict and records every GetParameters call."""

    def __init__(
        self,
        values: Dict[str, str] | None = None,
        invalid: Sequence[str] = (),
        dropped: Sequence[str] = (),
        failing: bool = False,
    ) -> None:
        self.values = dict(values or {})
        self.invalid = set(invalid)
        self.dropped = set(dropped)
        self.failing = failing
        self.calls: List[Tuple[List[str], bool]] = []

    def get_parameters(self, names: Sequence[str], with_decryption: bool) -> GetParametersResult:
        self.calls.append((list(names), with_decryption))
        if self.failing:
            raise StoreCallError("AccessDeniedException: not authorized")
        resolved = []
        invalid = []
        for key in names:
            if key in self.invalid or key not in self.values and key not in self.dropped:
                invalid.append(key)
                continue
            if key in self.dropped:
                continue
            name, _, version = key.partition(":")
            resolved.append(
                Parameter(name=name, value=self.values[key], selector=f":{version}" if version else None)
            )
        return GetParametersResult(resolved=resolved, invalid_names=invalid)


class StubDecrypter:
    def __init__(self, plaintexts: Dict[bytes, bytes] | None = None) -> None:
        self.plaintexts = dict(plaintexts or {})
        self.calls: List[bytes] = []

    def decrypt(self, ciphertext: bytes) -> bytes:
        self.calls.append(ciphertext)
        if ciphertext not in self.plaintexts:
            raise DecryptionError("InvalidCiphertextException: unable to decrypt")
        return self.plaintexts[ciphertext]


@pytest.fixture
def fake_environ() -> FakeEnviron:
    return FakeEnviron()
