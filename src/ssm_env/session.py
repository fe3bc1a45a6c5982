from __future__ import annotations

from typing import Any, Dict, Optional

import boto3
from botocore.config import Config

# Region falls back to botocore's own chain (env, profile, instance metadata).


def build_client(service: str, *, region: Optional[str] = None, timeout: Optional[float] = None) -> Any:
    kwargs: Dict[str, Any] = {}
    if region:
        kwargs["region_name"] = region
    if timeout:
        kwargs["config"] = Config(
            connect_timeout=timeout,
            read_timeout=timeout,
            retries={"max_attempts": 1},
        )
    return boto3.client(service, **kwargs)
