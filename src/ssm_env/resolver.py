from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional

from ssm_env.batching import MAX_BATCH_SIZE, Batch, PendingSsmGroup, partition, validate_batch_size
from ssm_env.errors import InvalidParametersError, StoreCallError, StoreInconsistencyError
from ssm_env.ssm import ParameterStore

logger = logging.getLogger(__name__)


class SecretResolver:
    """Fetch parameter values in batches and apply the failure policy."""

    def __init__(
        self,
        store: ParameterStore,
        batch_size: int = MAX_BATCH_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._batch_size = validate_batch_size(batch_size)
        self._clock = clock

    def resolve(
        self,
        batch: Batch,
        decrypt: bool,
        best_effort: bool,
        deadline: Optional[float] = None,
    ) -> Dict[str, str]:
        """Resolve one batch, returning values keyed by ``name`` plus selector."""

        try:
            self._check_deadline(deadline)
            result = self._store.get_parameters(batch, with_decryption=decrypt)
        except StoreCallError as exc:
            if not best_effort:
                raise
            logger.warning("%s", exc)
            return {}

        if result.invalid_names:
            error = InvalidParametersError(result.invalid_names)
            if not best_effort:
                raise error
            logger.warning("%s", error)

        values = {parameter.lookup_key: parameter.value for parameter in result.resolved}
        invalid = set(result.invalid_names)
        missing = [key for key in batch if key not in values and key not in invalid]
        if missing:
            if not best_effort:
                raise StoreInconsistencyError(missing)
            logger.debug("Ignoring parameters missing from response: %s", missing)
        return values

    def resolve_all(
        self,
        group: PendingSsmGroup,
        decrypt: bool,
        best_effort: bool,
        deadline: Optional[float] = None,
    ) -> Dict[str, str]:
        """Resolve every key in ``group`` and fan values out to variable names.

        Variables whose key could not be resolved are left out of the result so
        that they keep their literal value.
        """

        values: Dict[str, str] = {}
        for batch in partition(list(group), self._batch_size):
            values.update(self.resolve(batch, decrypt=decrypt, best_effort=best_effort, deadline=deadline))

        staged: Dict[str, str] = {}
        for lookup_key, names in group.items():
            if lookup_key not in values:
                continue
            for name in names:
                staged[name] = values[lookup_key]
        return staged

    def _check_deadline(self, deadline: Optional[float]) -> None:
        if deadline is not None and self._clock() >= deadline:
            raise StoreCallError("timed out waiting for Parameter Store")
