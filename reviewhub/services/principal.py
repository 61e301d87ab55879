from __future__ import annotations

from dataclasses import dataclass

from reviewhub.db.models import User, UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated principal a command runs on behalf of."""

    user_id: int
    role: UserRole
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(user_id=user.id, role=user.role, email=user.email)
