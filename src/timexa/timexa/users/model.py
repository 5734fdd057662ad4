from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object (no DB access code). `to_dict` never includes the password hash.
    """

    user_id: int
    email: str
    name: str
    password_hash: str
    role: Role
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": str(self.user_id),
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "isActive": self.is_active,
        }
