"""
Unit tests for principal resolvers.
"""

import uuid

import pytest

from services.auth import (
    FixedPrincipalResolver,
    HeaderPrincipalResolver,
    build_principal_resolver,
)
from services.errors import AuthError


class TestFixedPrincipalResolver:
    """Development resolver."""

    def test_creates_user_on_first_request(self, store):
        resolver = FixedPrincipalResolver(store, "dev_user", "https://a.example/dev.png")

        user_id = resolver.resolve_principal({})

        user = store.get_user(user_id)
        assert user.username == "dev_user"
        assert user.avatar_url == "https://a.example/dev.png"

    def test_reuses_existing_user(self, store, owner):
        resolver = FixedPrincipalResolver(store, owner.username)
        assert resolver.resolve_principal({}) == owner.id

    def test_same_id_on_every_request(self, store):
        resolver = FixedPrincipalResolver(store, "dev_user")
        assert resolver.resolve_principal({}) == resolver.resolve_principal({"X-User-Id": "x"})

    def test_recreates_user_after_store_cleared(self, store):
        resolver = FixedPrincipalResolver(store, "dev_user")
        first_id = resolver.resolve_principal({})

        store.clear()
        second_id = resolver.resolve_principal({})

        assert second_id != first_id
        assert store.get_user(second_id).username == "dev_user"

    def test_picks_up_user_recreated_elsewhere(self, store):
        resolver = FixedPrincipalResolver(store, "dev_user")
        resolver.resolve_principal({})

        store.clear()
        reseeded = store.create_user("dev_user")

        assert resolver.resolve_principal({}) == reseeded.id


class TestHeaderPrincipalResolver:
    """Header-based resolver."""

    def test_resolves_known_user(self, store, owner):
        resolver = HeaderPrincipalResolver(store)
        assert resolver.resolve_principal({"X-User-Id": owner.id}) == owner.id

    def test_missing_header(self, store):
        resolver = HeaderPrincipalResolver(store)
        with pytest.raises(AuthError) as exc_info:
            resolver.resolve_principal({})
        assert exc_info.value.status_code == 401

    def test_unknown_user(self, store):
        resolver = HeaderPrincipalResolver(store)
        with pytest.raises(AuthError):
            resolver.resolve_principal({"X-User-Id": str(uuid.uuid4())})

    def test_custom_header_name(self, store, owner):
        resolver = HeaderPrincipalResolver(store, header_name="X-Principal")
        assert resolver.resolve_principal({"X-Principal": owner.id}) == owner.id


class TestBuildPrincipalResolver:

    def test_dev_mode(self, store):
        resolver = build_principal_resolver("dev", store, dev_username="someone")
        assert isinstance(resolver, FixedPrincipalResolver)
        assert resolver.username == "someone"

    def test_header_mode(self, store):
        resolver = build_principal_resolver("header", store, header_name="X-Auth-User")
        assert isinstance(resolver, HeaderPrincipalResolver)
        assert resolver.header_name == "X-Auth-User"

    def test_unknown_mode(self, store):
        with pytest.raises(ValueError):
            build_principal_resolver("jwt", store)
