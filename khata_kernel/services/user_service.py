"""
UserService -- Registered users, the actors every mutation is attributed to.

Authentication and sessions live outside the kernel; this service only
keeps the user records and turns one into an ``Actor``.
"""

from __future__ import annotations

from dataclasses import replace

from khata_kernel.domain.audit import create_record
from khata_kernel.domain.records import Actor, RecordKind, User, UserRole
from khata_kernel.exceptions import (
    DuplicateRecordError,
    MissingFieldError,
    RecordNotFoundError,
)
from khata_kernel.logging_config import get_logger
from khata_kernel.services.base import BaseService
from khata_kernel.utils.ids import USER_PREFIX

logger = get_logger("services.user")


class UserService(BaseService):
    _logger = logger

    def get_user(self, user_id: str) -> User:
        return self.store.state.get(RecordKind.USER, user_id)

    def find_by_email(self, email: str) -> User | None:
        wanted = (email or "").strip().casefold()
        for user in self.store.state.users:
            if user.email.casefold() == wanted:
                return user
        return None

    def actor_for(self, user_id: str) -> Actor:
        return Actor.from_user(self.get_user(user_id))

    def default_actor(self) -> Actor:
        """The first admin, falling back to the first user."""
        users = self.store.state.users
        if not users:
            raise RecordNotFoundError("user", "admin")
        admin = next((u for u in users if u.role is UserRole.ADMIN), users[0])
        return Actor.from_user(admin)

    def register_user(
        self,
        email: str,
        name: str,
        actor: Actor | None = None,
        *,
        role: UserRole | str = UserRole.USER,
        phone: str | None = None,
        address: str | None = None,
    ) -> User:
        """
        Add a user.

        Without ``actor`` the registration is a self sign-up and the new
        user is recorded as its own creator.
        """
        email = (email or "").strip()
        name = (name or "").strip()
        user_id = self._ids.new_id(USER_PREFIX)
        creator = actor or Actor(user_id=user_id, user_name=name or email)
        with self._command("register_user", creator):
            if not email:
                raise MissingFieldError("email", "user")
            if not name:
                raise MissingFieldError("name", "user")
            if self.find_by_email(email) is not None:
                raise DuplicateRecordError("user", email)

            user = create_record(
                User,
                record_id=user_id,
                actor=creator,
                summary="User registered",
                clock=self._clock,
                email=email,
                name=name,
                role=UserRole(role),
                phone=(phone or "").strip() or None,
                address=(address or "").strip() or None,
            )
            state = self.store.state
            self.store.commit(replace(state, users=state.users + (user,)))

        logger.info("user_registered", extra={"user_id": user.id, "role": user.role})
        return user
