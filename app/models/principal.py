from __future__ import annotations

from dataclasses import dataclass

# Order decides which role a multi-role caller is treated as for
# role-scoped settings.
_PRIMARY_ROLE_ORDER = ("student", "instructor", "mentor")


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    Carried through the request via FastAPI's dependency system.

        user_id: subject from JWT
        roles: platform roles (admin|instructor|mentor|student)
    """

    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: set[str]) -> bool:
        return bool(self.roles & roles)

    def is_platform_admin(self) -> bool:
        return "admin" in self.roles

    def can_see_private(self) -> bool:
        return self.has_any_role({"admin", "instructor"})

    def primary_role(self) -> str | None:
        for role in _PRIMARY_ROLE_ORDER:
            if role in self.roles:
                return role
        return None
