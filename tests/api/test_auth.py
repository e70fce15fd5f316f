import pytest

from sipp.api.auth import (
    DEFAULT_PROTECTED,
    OPERATIONS,
    AuthGate,
    Decision,
    parse_protected_operations,
)
from sipp.errors import Unauthorized


def test_default_protected_operations_are_delete_and_list():
    assert parse_protected_operations(None) == frozenset({"delete", "list"})
    assert parse_protected_operations("  ") == DEFAULT_PROTECTED


def test_parse_accepts_prefixed_names_and_markers():
    assert parse_protected_operations("api_create, API_GET") == frozenset({"create", "get"})
    assert parse_protected_operations("all") == OPERATIONS
    assert parse_protected_operations("none") == frozenset()
    assert parse_protected_operations("all,none") == frozenset()


def test_parse_ignores_unknown_names():
    assert parse_protected_operations("api_list,api_bogus") == frozenset({"list"})


def test_gate_without_secret_allows_everything():
    gate = AuthGate(secret=None, protected=OPERATIONS)

    assert not gate.enabled
    for operation in OPERATIONS:
        assert gate.authorize(operation, None) is Decision.ALLOW


def test_gate_with_secret_checks_only_protected_operations():
    gate = AuthGate(secret="s3cret")

    assert gate.authorize("create", None) is Decision.ALLOW
    assert gate.authorize("get", "wrong") is Decision.ALLOW
    assert gate.authorize("list", None) is Decision.DENY
    assert gate.authorize("list", "wrong") is Decision.DENY
    assert gate.authorize("list", "s3cret") is Decision.ALLOW
    assert gate.authorize("delete", "s3cret") is Decision.ALLOW


def test_gate_compares_unicode_credentials():
    gate = AuthGate(secret="clé", protected=frozenset({"get"}))

    assert gate.authorize("get", "clé") is Decision.ALLOW
    assert gate.authorize("get", "cle") is Decision.DENY


def test_require_raises_unauthorized_on_deny():
    gate = AuthGate(secret="s3cret")

    gate.require("delete", "s3cret")
    with pytest.raises(Unauthorized):
        gate.require("delete", "nope")
