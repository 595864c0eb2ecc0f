"""Tests for the CredentialResolver and bootstrap user parsing."""

from __future__ import annotations

import pytest

from broker_bridge.config import BridgeConfig
from broker_bridge.credentials.resolver import CredentialResolver, parse_bootstrap_users
from broker_bridge.credentials.store import SecretStoreError, StaticSecretStore
from broker_bridge.errors import CredentialMalformed, CredentialNotFound
from broker_bridge.models import ClusterInstance

USER = "emqx_operator_controller"


@pytest.fixture()
def store() -> StaticSecretStore:
    return StaticSecretStore({
        "default/emqx-bootstrap-user": {
            "bootstrap_user": f"other:pw\n{USER}:first:with:colons\n{USER}:second",
        },
    })


@pytest.fixture()
def resolver(store: StaticSecretStore) -> CredentialResolver:
    return CredentialResolver(store)


# --- parse_bootstrap_users ---


class TestParseBootstrapUsers:
    def test_single_line(self):
        cred = parse_bootstrap_users(f"{USER}:public", USER)
        assert cred is not None
        assert cred.username == USER
        assert cred.password == "public"

    def test_password_keeps_colons(self):
        cred = parse_bootstrap_users(f"{USER}:a:b::c", USER)
        assert cred is not None
        assert cred.password == "a:b::c"

    def test_first_match_wins(self):
        cred = parse_bootstrap_users(f"{USER}:one\n{USER}:two", USER)
        assert cred is not None
        assert cred.password == "one"

    def test_empty_password_allowed(self):
        cred = parse_bootstrap_users(f"{USER}:", USER)
        assert cred is not None
        assert cred.password == ""

    def test_no_matching_key(self):
        assert parse_bootstrap_users("admin:public\nguest:guest", USER) is None

    def test_prefix_is_not_a_match(self):
        assert parse_bootstrap_users(f"{USER}_x:pw\nx{USER}:pw", USER) is None

    def test_line_without_colon_ignored(self):
        assert parse_bootstrap_users(USER, USER) is None

    def test_empty_key_never_matches(self):
        assert parse_bootstrap_users(":pw", "") is None

    def test_empty_blob(self):
        assert parse_bootstrap_users("", USER) is None


# --- CredentialResolver ---


class TestCredentialResolver:
    def test_resolves_first_bootstrap_entry(self, resolver: CredentialResolver):
        cred = resolver.resolve(ClusterInstance(name="emqx", namespace="default"))
        assert cred.username == USER
        assert cred.password == "first:with:colons"

    def test_secret_name(self, resolver: CredentialResolver):
        instance = ClusterInstance(name="broker", namespace="prod")
        assert resolver.secret_name(instance) == "broker-bootstrap-user"

    def test_missing_secret(self, resolver: CredentialResolver):
        with pytest.raises(CredentialNotFound, match="get secret failed"):
            resolver.resolve(ClusterInstance(name="missing", namespace="default"))

    def test_missing_key_is_malformed(self):
        store = StaticSecretStore({"default/emqx-bootstrap-user": {"other": "x"}})
        resolver = CredentialResolver(store)
        with pytest.raises(CredentialMalformed):
            resolver.resolve(ClusterInstance(name="emqx", namespace="default"))

    def test_no_bootstrap_line_is_malformed(self):
        store = StaticSecretStore({
            "default/emqx-bootstrap-user": {"bootstrap_user": "admin:public"},
        })
        resolver = CredentialResolver(store)
        with pytest.raises(CredentialMalformed):
            resolver.resolve(ClusterInstance(name="emqx", namespace="default"))

    def test_custom_config(self):
        store = StaticSecretStore()
        store.put("ns", "b-creds", {"users": "ops:pw"})
        config = BridgeConfig(
            bootstrap_username="ops", secret_suffix="-creds", secret_key="users",
        )
        resolver = CredentialResolver(store, config)
        cred = resolver.resolve(ClusterInstance(name="b", namespace="ns"))
        assert cred.password == "pw"

    def test_error_never_contains_password(self):
        store = StaticSecretStore({
            "default/emqx-bootstrap-user": {"bootstrap_user": "admin:topsecret"},
        })
        resolver = CredentialResolver(store)
        with pytest.raises(CredentialMalformed) as excinfo:
            resolver.resolve(ClusterInstance(name="emqx", namespace="default"))
        assert "topsecret" not in str(excinfo.value)

    def test_repr_masks_password(self, resolver: CredentialResolver):
        cred = resolver.resolve(ClusterInstance(name="emqx", namespace="default"))
        assert "first:with:colons" not in repr(cred)


class TestStaticSecretStore:
    def test_read_returns_copy(self):
        store = StaticSecretStore({"a/b": {"k": "v"}})
        data = store.read_secret("a", "b")
        data["k"] = "changed"
        assert store.read_secret("a", "b") == {"k": "v"}

    def test_missing_raises(self):
        with pytest.raises(SecretStoreError, match="a/b"):
            StaticSecretStore().read_secret("a", "b")
