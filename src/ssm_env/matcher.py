"""Decide which environment variables reference a secret.

Two conventions are recognised. Values tagged ``!kms <base64>`` carry an
inline KMS ciphertext. Every other value is run through a predicate that maps
``(name, value)`` to a Parameter Store name, or to an empty string when the
variable is a plain value. The default predicate is a Jinja2 template that
picks up ``ssm:///path/to/param`` values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Union

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from ssm_env.errors import ClassificationError, MalformedReferenceError


KMS_PREFIX = "!kms "

DEFAULT_TEMPLATE = (
    '{% if hasPrefix(Value, "ssm://") %}{{ trimPrefix(Value, "ssm://") }}{% endif %}'
)

Predicate = Callable[[str, str], str]


def _trim_prefix(value: str, prefix: str) -> str:
    return value[len(prefix):] if prefix and value.startswith(prefix) else value


def _trim_suffix(value: str, suffix: str) -> str:
    return value[: -len(suffix)] if suffix and value.endswith(suffix) else value


TEMPLATE_HELPERS: dict[str, Callable[..., object]] = {
    "contains": lambda value, sub: sub in value,
    "hasPrefix": lambda value, prefix: value.startswith(prefix),
    "hasSuffix": lambda value, suffix: value.endswith(suffix),
    "trimPrefix": _trim_prefix,
    "trimSuffix": _trim_suffix,
    "trimSpace": lambda value: value.strip(),
    "trimLeft": lambda value, cutset: value.lstrip(cutset),
    "trimRight": lambda value, cutset: value.rstrip(cutset),
    "trim": lambda value, cutset: value.strip(cutset),
    "title": lambda value: re.sub(r"\b\w", lambda match: match.group().upper(), value),
    "toTitle": lambda value: value.upper(),
    "toLower": lambda value: value.lower(),
    "toUpper": lambda value: value.upper(),
}


@dataclass(frozen=True)
class Plain:
    pass


@dataclass(frozen=True)
class SsmReference:
    lookup_key: str


@dataclass(frozen=True)
class EncryptedReference:
    encoded_ciphertext: str


ReferenceKind = Union[Plain, SsmReference, EncryptedReference]

PLAIN = Plain()


class TemplatePredicate:
    """Render a sandboxed Jinja2 template with ``Name`` and ``Value`` bound."""

    def __init__(self, template_text: str = DEFAULT_TEMPLATE) -> None:
        env = SandboxedEnvironment(undefined=StrictUndefined, autoescape=False)
        env.globals.update(TEMPLATE_HELPERS)
        try:
            self._template = env.from_string(template_text)
        except TemplateError as exc:
            raise ClassificationError(f"parsing template: {exc}") from exc
        self.template_text = template_text

    def __call__(self, name: str, value: str) -> str:
        return self._template.render(Name=name, Value=value)


class Matcher:
    def __init__(self, predicate: Predicate | None = None, require_rooted: bool = True) -> None:
        self._predicate = predicate or TemplatePredicate()
        self._require_rooted = require_rooted

    def classify(self, name: str, value: str) -> ReferenceKind:
        if value.startswith(KMS_PREFIX):
            encoded = value[len(KMS_PREFIX):].strip("'\" ")
            return EncryptedReference(encoded_ciphertext=encoded)

        try:
            lookup_key = self._predicate(name, value)
        except (TemplateError, TypeError, ValueError) as exc:
            raise ClassificationError(f"determining name of parameter for {name}: {exc}") from exc

        if not lookup_key:
            return PLAIN
        if self._require_rooted and not lookup_key.startswith("/"):
            raise MalformedReferenceError(name, value)
        return SsmReference(lookup_key=lookup_key)
