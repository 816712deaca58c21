"""
Resolved caller identity.

Every authentication path produces one `Actor`; lock and record services
only ever see this value, never the `User` row it came from.
"""
from dataclasses import dataclass
from typing import Dict

from app.models.user import User, UserRole


@dataclass(frozen=True)
class Actor:
    user_id: str
    user_name: str
    user_role: str
    user_email: str

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        role = user.role.value if isinstance(user.role, UserRole) else str(user.role)
        return cls(
            user_id=str(user.id),
            user_name=user.full_name or user.email,
            user_role=role,
            user_email=user.email,
        )

    @property
    def is_admin(self) -> bool:
        return self.user_role == UserRole.ADMIN.value

    @property
    def is_counselor(self) -> bool:
        return self.user_role == UserRole.COUNSELOR.value

    def to_snapshot(self) -> Dict[str, str]:
        """Point-in-time copy stored on locks and audit entries"""
        return {
            "user_id": self.user_id,
            "user_name": self.user_name,
            "user_role": self.user_role,
            "user_email": self.user_email,
        }
