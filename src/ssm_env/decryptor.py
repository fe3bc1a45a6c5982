from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Callable, Optional

from ssm_env.errors import DecodeError, DecryptionError
from ssm_env.kms import Decrypter

logger = logging.getLogger(__name__)


def decode_ciphertext(encoded: str) -> bytes:
    """Decode standard base64, tolerating stripped ``=`` padding."""

    remainder = len(encoded) % 4
    if remainder:
        encoded += "=" * (4 - remainder)
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"failed to decode base64 value: {exc}") from exc


class Decryptor:
    def __init__(self, client: Decrypter, clock: Callable[[], float] = time.monotonic) -> None:
        self._client = client
        self._clock = clock

    def decrypt(self, encoded: str, best_effort: bool, deadline: Optional[float] = None) -> Optional[str]:
        """Return the plaintext, or ``None`` when best-effort skips a failure."""

        try:
            if deadline is not None and self._clock() >= deadline:
                raise DecryptionError("timed out before decrypting KMS value")
            return self._decrypt(encoded)
        except (DecodeError, DecryptionError) as exc:
            if not best_effort:
                raise
            logger.warning("failed to decrypt KMS value: %s", exc)
            return None

    def _decrypt(self, encoded: str) -> str:
        plaintext = self._client.decrypt(decode_ciphertext(encoded))
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionError(f"plaintext is not valid UTF-8: {exc}") from exc
