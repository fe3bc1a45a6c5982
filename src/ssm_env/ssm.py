from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol, Sequence

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict, Field

from ssm_env.errors import StoreCallError
from ssm_env.session import build_client

_logger = logging.getLogger(__name__)


class Parameter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name")
    value: str = Field(alias="Value")
    selector: Optional[str] = Field(default=None, alias="Selector")

    @property
    def lookup_key(self) -> str:
        """Name with the version or label selector echoed back, e.g. ``/db/pass:2``."""
        if self.selector:
            return self.name + self.selector
        return self.name


class GetParametersResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resolved: List[Parameter] = Field(default_factory=list, alias="Parameters")
    invalid_names: List[str] = Field(default_factory=list, alias="InvalidParameters")


class ParameterStore(Protocol):
    def get_parameters(self, names: Sequence[str], with_decryption: bool) -> GetParametersResult:
        ...


class LazySSMClient:
    """SSM client whose boto3 session is only created on the first lookup."""

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

    def _ssm(self) -> Any:
        if self._client is None:
            self._client = build_client("ssm", region=self._region, timeout=self._timeout)
        return self._client

    def get_parameters(self, names: Sequence[str], with_decryption: bool) -> GetParametersResult:
        if not names:
            raise ValueError("At least one parameter name is required")
        try:
            response = self._ssm().get_parameters(
                Names=list(names),
                WithDecryption=with_decryption,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreCallError(str(exc)) from exc
        _logger.debug("Fetched %d of %d parameters", len(response.get("Parameters", [])), len(names))
        return GetParametersResult.model_validate(response)
