from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ssm_env.batching import group_references
from ssm_env.config import ExpanderConfig
from ssm_env.decryptor import Decryptor
from ssm_env.environ import EnvironmentProvider, OsEnviron
from ssm_env.errors import MalformedReferenceError
from ssm_env.kms import LazyKMSClient
from ssm_env.matcher import EncryptedReference, Matcher, SsmReference, TemplatePredicate
from ssm_env.resolver import SecretResolver
from ssm_env.ssm import LazySSMClient

logger = logging.getLogger(__name__)


@dataclass
class ExpansionResult:
    environ: Dict[str, str]
    changes: List[Tuple[str, str]] = field(default_factory=list)


class Expander:
    """Rewrite secret references in the environment with their resolved values."""

    def __init__(
        self,
        environ: EnvironmentProvider,
        matcher: Matcher,
        resolver: SecretResolver,
        decryptor: Decryptor,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._environ = environ
        self._matcher = matcher
        self._resolver = resolver
        self._decryptor = decryptor
        self._timeout = timeout
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: ExpanderConfig,
        environ: EnvironmentProvider | None = None,
    ) -> "Expander":
        return cls(
            environ=environ or OsEnviron(),
            matcher=Matcher(TemplatePredicate(config.template)),
            resolver=SecretResolver(
                LazySSMClient(region=config.region, timeout=config.timeout),
                batch_size=config.batch_size,
            ),
            decryptor=Decryptor(LazyKMSClient(region=config.region, timeout=config.timeout)),
            timeout=config.timeout,
        )

    def expand(self, decrypt: bool, best_effort: bool, print_only: bool = False) -> ExpansionResult:
        """Run one expansion pass.

        SSM references are resolved before KMS payloads. Nothing is written
        back to the environment unless the whole pass succeeds, and nothing at
        all in ``print_only`` mode.
        """

        deadline = self._clock() + self._timeout if self._timeout else None
        current = self._environ.list_current()

        ssm_entries: List[Tuple[str, str]] = []
        encrypted: List[Tuple[str, str]] = []
        for name, value in current:
            try:
                kind = self._matcher.classify(name, value)
            except MalformedReferenceError as exc:
                if not best_effort:
                    raise
                logger.warning("%s", exc)
                continue
            if isinstance(kind, EncryptedReference):
                encrypted.append((name, kind.encoded_ciphertext))
            elif isinstance(kind, SsmReference):
                ssm_entries.append((name, kind.lookup_key))

        staged: Dict[str, str] = {}
        group = group_references(ssm_entries)
        if group:
            staged.update(
                self._resolver.resolve_all(group, decrypt=decrypt, best_effort=best_effort, deadline=deadline)
            )

        for name, encoded in encrypted:
            plaintext = self._decryptor.decrypt(encoded, best_effort=best_effort, deadline=deadline)
            if plaintext is not None:
                staged[name] = plaintext

        changes = [(name, staged[name]) for name, _ in current if name in staged]
        if not print_only:
            for name, value in changes:
                self._environ.apply(name, value)

        final = dict(current)
        final.update(staged)
        return ExpansionResult(environ=final, changes=changes)
