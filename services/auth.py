"""
Principal resolution for incoming requests.

The server asks a PrincipalResolver for the user id behind each request.
Two implementations exist:
- FixedPrincipalResolver: development only, every request acts as one user
- HeaderPrincipalResolver: trusts a user id set by an upstream auth gateway
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Mapping, Optional

from services.errors import AuthError
from store.base import VideoStore

logger = logging.getLogger(__name__)


class PrincipalResolver(ABC):
    """Resolves request headers to an authenticated user id."""

    @abstractmethod
    def resolve_principal(self, headers: Mapping[str, str]) -> str:
        """
        Return the authenticated user's id.

        Raises:
            AuthError: If no principal can be resolved.
        """


class FixedPrincipalResolver(PrincipalResolver):
    """
    Development resolver that authenticates every request as one user.

    The user is looked up by username on first use and created if missing.
    The cached id is re-checked on every request, so a user removed by
    clearing the store is recreated instead of failing authentication.
    """

    def __init__(
        self,
        store: VideoStore,
        username: str,
        avatar_url: Optional[str] = None,
    ) -> None:
        self.store = store
        self.username = username
        self.avatar_url = avatar_url
        self._user_id: Optional[str] = None
        self._lock = threading.Lock()

    def resolve_principal(self, headers: Mapping[str, str]) -> str:
        cached_id = self._user_id
        if cached_id is not None and self.store.get_user(cached_id) is not None:
            return cached_id

        with self._lock:
            if self._user_id != cached_id:
                # Another request already refreshed it.
                return self._user_id
            user = self.store.get_user_by_username(self.username)
            if user is None:
                user = self.store.create_user(self.username, self.avatar_url)
                logger.info(f"Created development user {user.username} ({user.id})")
            self._user_id = user.id
        return self._user_id


class HeaderPrincipalResolver(PrincipalResolver):
    """Reads the user id from a header and checks the user exists."""

    def __init__(self, store: VideoStore, header_name: str = "X-User-Id") -> None:
        self.store = store
        self.header_name = header_name

    def resolve_principal(self, headers: Mapping[str, str]) -> str:
        user_id = (headers.get(self.header_name) or "").strip()
        if not user_id:
            raise AuthError("Authentication required")

        user = self.store.get_user(user_id)
        if user is None:
            logger.warning(f"Rejected request for unknown user id {user_id!r}")
            raise AuthError("Unknown user")
        return user.id


def build_principal_resolver(mode: str, store: VideoStore, **options) -> PrincipalResolver:
    """
    Build the resolver for ``mode`` ("dev" or "header").

    Options:
        header_name: Header read by the header resolver.
        dev_username / dev_avatar_url: Identity used by the dev resolver.
    """
    if mode == "dev":
        return FixedPrincipalResolver(
            store,
            username=options.get("dev_username", "john_doe"),
            avatar_url=options.get("dev_avatar_url"),
        )
    if mode == "header":
        return HeaderPrincipalResolver(
            store, header_name=options.get("header_name", "X-User-Id"))
    raise ValueError(f"Unsupported auth mode: {mode!r}")
