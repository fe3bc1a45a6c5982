from __future__ import annotations

from typing import Any, Optional, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from ssm_env.errors import DecryptionError
from ssm_env.session import build_client


class Decrypter(Protocol):
    def decrypt(self, ciphertext: bytes) -> bytes:
        ...


class LazyKMSClient:
    """KMS client whose boto3 session is only created on the first decrypt."""

    def __init__(
        self,
        *,
        region: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Any = None,
    ) -> None:
        self._region = region
        self._timeout = timeout
        self._client = client

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def _kms(self) -> Any:
        if self._client is None:
            self._client = build_client("kms", region=self._region, timeout=self._timeout)
        return self._client

    def decrypt(self, ciphertext: bytes) -> bytes:
        try:
            response = self._kms().decrypt(CiphertextBlob=ciphertext)
        except (BotoCoreError, ClientError) as exc:
            raise DecryptionError(str(exc)) from exc
        return response["Plaintext"]
