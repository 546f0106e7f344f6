"""In-memory storage for user records with optimistic concurrency."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Dict, List, Optional, Protocol
from uuid import UUID

from .errors import EmailAlreadyInUseError, UserAlreadyExistsError
from .models import User, normalize_email

logger = logging.getLogger("usermanagement.repository")

UserTransform = Callable[[User], User]


class UserRepository(Protocol):
    """Storage contract consumed by the HTTP layer."""

    async def list_users(self) -> List[User]: ...
    async def get_user(self, user_id: UUID) -> Optional[User]: ...
    async def create_user(self, user: User) -> User: ...
    async def update_user(self, user_id: UUID, transform: UserTransform) -> Optional[User]: ...
    async def delete_user(self, user_id: UUID) -> bool: ...
    async def email_exists(self, email: str, exclude_id: Optional[UUID] = None) -> bool: ...


def _sort_key(user: User) -> tuple[str, str]:
    return user.full_name.lower(), user.email.lower()


class InMemoryUserRepository:
    """Thread-safe user store keyed by identifier.

    Readers never lock. Writers commit through a compare-and-swap step that
    holds ``_commit_lock`` only long enough to verify the stored value and swap
    in the replacement, so transforms always run outside the critical section.
    A secondary index keyed by normalized email is maintained in the same step,
    which keeps the email uniqueness invariant even when two writers race past
    :meth:`email_exists` with the same address.
    """

    def __init__(self) -> None:
        self._users: Dict[UUID, User] = {}
        self._emails: Dict[str, UUID] = {}
        self._commit_lock = threading.Lock()

    async def list_users(self) -> List[User]:
        """Return all users ordered by full name, then email (case-insensitive)."""

        # dict.copy() is atomic, so every entry existed at the moment of the call.
        snapshot = list(self._users.copy().values())
        snapshot.sort(key=_sort_key)
        return snapshot

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return self._users.get(user_id)

    async def create_user(self, user: User) -> User:
        """Store ``user`` under its identifier.

        Raises :class:`UserAlreadyExistsError` when the identifier is taken and
        :class:`EmailAlreadyInUseError` when another live user holds the email.
        """

        if user is None:
            raise TypeError("user must not be None")

        key = normalize_email(user.email)
        with self._commit_lock:
            if user.id in self._users:
                raise UserAlreadyExistsError(user.id)
            if key and key in self._emails:
                raise EmailAlreadyInUseError(user.email.strip())
            self._users[user.id] = user
            if key:
                self._emails[key] = user.id

        logger.info("Created user %s", user.id)
        return user

    async def update_user(self, user_id: UUID, transform: UserTransform) -> Optional[User]:
        """Replace the record for ``user_id`` with ``transform(current)``.

        The read-transform-commit cycle repeats until the commit lands or the
        record disappears. Returns ``None`` when there is nothing to update,
        including when a concurrent delete wins the race.
        """

        if transform is None:
            raise TypeError("transform must not be None")

        attempts = 0
        while True:
            current = self._users.get(user_id)
            if current is None:
                return None

            candidate = transform(current)
            if candidate.id != user_id:
                raise ValueError("transform must not change the user identifier")

            if self._compare_and_swap(user_id, current, candidate):
                logger.info("Updated user %s", user_id)
                return candidate

            attempts += 1
            logger.debug("Lost update race for user %s (attempt %d); retrying", user_id, attempts)
            await asyncio.sleep(0)

    async def delete_user(self, user_id: UUID) -> bool:
        with self._commit_lock:
            removed = self._users.pop(user_id, None)
            if removed is None:
                return False
            key = normalize_email(removed.email)
            if self._emails.get(key) == user_id:
                del self._emails[key]

        logger.info("Deleted user %s", user_id)
        return True

    async def email_exists(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        """Return ``True`` when another live user holds ``email``.

        The answer is advisory: a concurrent writer may claim the address right
        after this returns. Commits re-check under the commit lock.
        """

        if not email or not email.strip():
            return False

        owner = self._emails.get(normalize_email(email))
        if owner is None:
            return False
        return exclude_id is None or owner != exclude_id

    def _compare_and_swap(self, user_id: UUID, expected: User, replacement: User) -> bool:
        old_key = normalize_email(expected.email)
        new_key = normalize_email(replacement.email)

        with self._commit_lock:
            if self._users.get(user_id) is not expected:
                return False

            if new_key != old_key:
                owner = self._emails.get(new_key)
                if new_key and owner is not None and owner != user_id:
                    raise EmailAlreadyInUseError(replacement.email.strip())
                if self._emails.get(old_key) == user_id:
                    del self._emails[old_key]
                if new_key:
                    self._emails[new_key] = user_id

            self._users[user_id] = replacement
            return True


__all__ = ["InMemoryUserRepository", "UserRepository", "UserTransform"]
