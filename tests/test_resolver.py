from __future__ import annotations

import logging

import pytest

from conftest import StubStore
from ssm_env.errors import InvalidParametersError, StoreCallError, StoreInconsistencyError
from ssm_env.resolver import SecretResolver


def test_resolve_requests_decryption_flag():
    store = StubStore({"/x": "v"})
    resolver = SecretResolver(store)

    assert resolver.resolve(["/x"], decrypt=True, best_effort=False) == {"/x": "v"}
    assert store.calls == [(["/x"], True)]


def test_resolve_composes_selector_into_key():
    store = StubStore({"/x:2": "second", "/x": "latest"})
    resolver = SecretResolver(store)

    values = resolver.resolve(["/x:2", "/x"], decrypt=False, best_effort=False)

    assert values == {"/x:2": "second", "/x": "latest"}


def test_strict_invalid_parameters_lists_every_invalid_key():
    store = StubStore({"/ok": "v"}, invalid=["/bad.one", "/bad.two"])
    resolver = SecretResolver(store)

    with pytest.raises(InvalidParametersError) as excinfo:
        resolver.resolve(["/ok", "/bad.one", "/bad.two"], decrypt=False, best_effort=False)

    assert excinfo.value.invalid_parameters == ["/bad.one", "/bad.two"]


def test_best_effort_invalid_parameters_keeps_valid_values(caplog):
    store = StubStore({"/ok": "v"}, invalid=["/bad"])
    resolver = SecretResolver(store)

    with caplog.at_level(logging.WARNING):
        values = resolver.resolve(["/ok", "/bad"], decrypt=False, best_effort=True)

    assert values == {"/ok": "v"}
    assert "invalid parameters: ['/bad']" in caplog.text


def test_strict_call_failure_propagates():
    resolver = SecretResolver(StubStore(failing=True))

    with pytest.raises(StoreCallError):
        resolver.resolve(["/x"], decrypt=False, best_effort=False)


def test_best_effort_call_failure_contributes_nothing():
    resolver = SecretResolver(StubStore(failing=True))

    assert resolver.resolve(["/x"], decrypt=False, best_effort=True) == {}


def test_strict_silently_dropped_key_is_inconsistency():
    store = StubStore({"/x": "v"}, dropped=["/gone"])
    resolver = SecretResolver(store)

    with pytest.raises(StoreInconsistencyError) as excinfo:
        resolver.resolve(["/x", "/gone"], decrypt=False, best_effort=False)

    assert excinfo.value.missing == ["/gone"]


def test_best_effort_silently_dropped_key_is_ignored():
    store = StubStore({"/x": "v"}, dropped=["/gone"])
    resolver = SecretResolver(store)

    assert resolver.resolve(["/x", "/gone"], decrypt=False, best_effort=True) == {"/x": "v"}


def test_resolve_all_batches_by_limit_and_fans_out():
    values = {f"/p/{i}": f"value-{i}" for i in range(25)}
    store = StubStore(values)
    resolver = SecretResolver(store, batch_size=10)
    group = {key: [f"VAR_{i}"] for i, key in enumerate(values)}
    group["/p/0"].append("ALIAS")

    staged = resolver.resolve_all(group, decrypt=False, best_effort=False)

    assert len(store.calls) == 3
    requested = [key for names, _ in store.calls for key in names]
    assert sorted(requested) == sorted(values)
    assert all(len(names) <= 10 for names, _ in store.calls)
    assert staged["VAR_0"] == "value-0"
    assert staged["ALIAS"] == "value-0"
    assert staged["VAR_24"] == "value-24"


def test_resolve_all_leaves_unresolved_names_out():
    store = StubStore({"/x": "v"}, invalid=["/bad"])
    resolver = SecretResolver(store)

    staged = resolver.resolve_all({"/x": ["A"], "/bad": ["B"]}, decrypt=False, best_effort=True)

    assert staged == {"A": "v"}


def test_expired_deadline_fails_call_before_issuing_it():
    store = StubStore({"/x": "v"})
    resolver = SecretResolver(store, clock=lambda: 100.0)

    with pytest.raises(StoreCallError, match="timed out"):
        resolver.resolve(["/x"], decrypt=False, best_effort=False, deadline=50.0)
    assert store.calls == []


def test_expired_deadline_is_skipped_in_best_effort():
    store = StubStore({"/x": "v"})
    resolver = SecretResolver(store, clock=lambda: 100.0)

    assert resolver.resolve(["/x"], decrypt=False, best_effort=True, deadline=50.0) == {}


def test_batch_size_outside_limit_is_rejected():
    with pytest.raises(ValueError):
        SecretResolver(StubStore(), batch_size=11)
