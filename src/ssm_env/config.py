from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

from ssm_env.batching import MAX_BATCH_SIZE
from ssm_env.matcher import DEFAULT_TEMPLATE

ENV_PREFIX = "SSM_ENV_"


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class ExpanderConfig(BaseModel):
    template: str = DEFAULT_TEMPLATE
    with_decryption: bool = False
    no_fail: bool = False
    batch_size: int = Field(default=MAX_BATCH_SIZE, ge=1, le=MAX_BATCH_SIZE)
    # Bounds the whole expansion, not individual calls.
    timeout: Optional[float] = Field(default=None, gt=0)
    region: Optional[str] = None

    @classmethod
    def from_file(cls, path: Path) -> "ExpanderConfig":
        text = path.read_text(encoding="utf-8")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            import yaml

            try:
                payload = yaml.safe_load(text)
            except yaml.YAMLError as exc:
                raise ValueError(f"parsing config {path}: {exc}") from exc
        return cls.model_validate(payload or {})

    @staticmethod
    def env_overrides(environ: Mapping[str, str] | None = None) -> Dict[str, Any]:
        """Collect ``SSM_ENV_*`` overrides as a partial payload."""

        source = os.environ if environ is None else environ
        payload: Dict[str, Any] = {}
        if f"{ENV_PREFIX}TEMPLATE" in source:
            payload["template"] = source[f"{ENV_PREFIX}TEMPLATE"]
        if f"{ENV_PREFIX}WITH_DECRYPTION" in source:
            payload["with_decryption"] = _as_bool(source[f"{ENV_PREFIX}WITH_DECRYPTION"])
        if f"{ENV_PREFIX}NO_FAIL" in source:
            payload["no_fail"] = _as_bool(source[f"{ENV_PREFIX}NO_FAIL"])
        if f"{ENV_PREFIX}BATCH_SIZE" in source:
            payload["batch_size"] = int(source[f"{ENV_PREFIX}BATCH_SIZE"])
        if f"{ENV_PREFIX}TIMEOUT" in source:
            payload["timeout"] = float(source[f"{ENV_PREFIX}TIMEOUT"])
        region = source.get(f"{ENV_PREFIX}REGION")
        if region:
            payload["region"] = region
        return payload

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        environ: Mapping[str, str] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> "ExpanderConfig":
        """Merge file, ``SSM_ENV_*`` variables and explicit overrides, in that order."""

        base = cls.from_file(path) if path else cls()
        payload = base.model_dump()
        payload.update(cls.env_overrides(environ))
        payload.update({key: value for key, value in (overrides or {}).items() if value is not None})
        return cls.model_validate(payload)
