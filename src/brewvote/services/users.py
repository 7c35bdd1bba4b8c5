"""User-related business logic."""

import logging
from dataclasses import dataclass
from typing import Protocol

from brewvote.domain.errors import InvalidArgumentError, UnauthorizedError
from brewvote.domain.models import Role, UserRecord

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_user(self, user_id: str) -> UserRecord | None:
        """Return the user with the given id, if present."""

    def get_by_employee_id(
        self, employee_id: str, role: Role | None = None
    ) -> UserRecord | None:
        """Return the user for an employee code, optionally filtered by role."""

    def create_user(self, employee_id: str, name: str | None, role: Role) -> UserRecord:
        """Create and return a new user record."""

    def list_users(self) -> list[UserRecord]:
        """Return all users."""


@dataclass
class UserService:
    """Application service for login and user lookup."""

    repository: UserRepository
    admin_employee_id: str = "ADM001"
    admin_name: str = "Event Manager"

    def ensure_admin(self) -> UserRecord:
        """Ensure the pre-provisioned admin exists and return it."""
        existing = self.repository.get_by_employee_id(self.admin_employee_id)
        if existing:
            return existing
        logger.info("Seeding admin user %s", self.admin_employee_id)
        return self.repository.create_user(
            self.admin_employee_id, self.admin_name, Role.ADMIN
        )

    def login(
        self, employee_id: str | None, name: str | None = None, role: str | None = None
    ) -> UserRecord:
        """Log in an admin, or log in / register an employee."""
        code = (employee_id or "").strip()
        if not code:
            raise InvalidArgumentError("Employee ID required", field="employeeId")

        if role == Role.ADMIN:
            admin = self.repository.get_by_employee_id(code, Role.ADMIN)
            if admin is None:
                raise UnauthorizedError("Invalid admin credentials")
            return admin

        user = self.repository.get_by_employee_id(code, Role.EMPLOYEE)
        if user:
            return user
        display_name = (name or "").strip()
        if not display_name:
            raise UnauthorizedError(
                "User not found. Please provide name for first login."
            )
        if self.repository.get_by_employee_id(code) is not None:
            raise UnauthorizedError("Employee ID is already taken")
        logger.info("Registering employee %s", code)
        return self.repository.create_user(code, display_name, Role.EMPLOYEE)

    def get_user(self, user_id: str) -> UserRecord | None:
        return self.repository.get_user(user_id)

    def list_users(self) -> list[UserRecord]:
        return self.repository.list_users()

    def list_employees(self) -> list[UserRecord]:
        """Return users with the employee role."""
        return [
            user for user in self.repository.list_users() if user.role == Role.EMPLOYEE
        ]
