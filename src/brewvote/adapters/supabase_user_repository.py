"""Supabase-backed user repository."""

from dataclasses import dataclass

from supabase import Client

from brewvote.adapters.supabase_support import execute, parse_timestamp, parse_uuid
from brewvote.domain.models import Role, UserRecord
from brewvote.services.users import UserRepository

_COLUMNS = "id, employee_id, name, role, created_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def get_user(self, user_id: str) -> UserRecord | None:
        """Return the user with the given id, if present."""
        user_uuid = parse_uuid(user_id)
        if user_uuid is None:
            return None
        response = execute(
            self.client.table("users").select(_COLUMNS).eq("id", str(user_uuid)).limit(1),
            "load user",
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def get_by_employee_id(
        self, employee_id: str, role: Role | None = None
    ) -> UserRecord | None:
        """Return the user for an employee code, if present."""
        query = self.client.table("users").select(_COLUMNS).eq("employee_id", employee_id)
        if role is not None:
            query = query.eq("role", role.value)
        response = execute(query.limit(1), "load user by employee id")
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def create_user(self, employee_id: str, name: str | None, role: Role) -> UserRecord:
        """Create a new user row and return it."""
        response = execute(
            self.client.table("users").insert(
                {"employee_id": employee_id, "name": name, "role": role.value}
            ),
            "create user",
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def list_users(self) -> list[UserRecord]:
        """Return all users in creation order."""
        response = execute(
            self.client.table("users").select(_COLUMNS).order("created_at", desc=False),
            "list users",
        )
        return [_parse_user(row) for row in response.data or []]


def _parse_user(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=str(row["id"]),
        employee_id=str(row["employee_id"]),
        name=row.get("name"),
        role=Role(row["role"]),
        created_at=parse_timestamp(row.get("created_at")),
    )
