"""
Admin operations for fittrack.

Site-wide statistics, user search and role management. Every operation
requires an admin actor.
"""

import logging

from fittrack.models import UserProfile
from fittrack.storage import FitnessStorage

logger = logging.getLogger(__name__)


class AdminPermissionError(Exception):
    """Raised when a non-admin user calls an admin operation."""

    pass


class SelfRoleChangeError(Exception):
    """Raised when an admin tries to change their own role."""

    pass


class UserNotFoundError(Exception):
    """Raised when the target user doesn't exist."""

    pass


class AdminService:
    """Admin-only views and actions."""

    def __init__(self, storage: FitnessStorage | None = None):
        """
        Initialize the admin service.

        Args:
            storage: FitnessStorage instance. Creates default if not provided.
        """
        self.storage = storage or FitnessStorage()

    @staticmethod
    def require_admin(actor: UserProfile | None) -> None:
        if actor is None or not actor.is_admin:
            raise AdminPermissionError("Admin access required")

    def overview(self, actor: UserProfile, recent_limit: int = 50) -> dict:
        """
        Site-wide totals and the most recent logs of all users.

        Returns:
            Dictionary with total_users, total_logs and recent_logs
        """
        self.require_admin(actor)
        return {
            "total_users": len(self.storage.list_users()),
            "total_logs": self.storage.count_activity_logs(),
            "recent_logs": self.storage.get_all_activity_logs(limit=recent_limit),
        }

    def search_users(self, actor: UserProfile, term: str | None = None) -> list[UserProfile]:
        """Users whose email or full name contains the term (case-insensitive)."""
        self.require_admin(actor)
        users = self.storage.list_users()
        if not term:
            return users

        needle = term.casefold()
        return [
            user
            for user in users
            if needle in user.email.casefold() or needle in user.full_name.casefold()
        ]

    def toggle_role(self, actor: UserProfile, target_id: str) -> UserProfile:
        """
        Switch a user between the admin and user roles.

        Raises:
            AdminPermissionError: If the actor isn't an admin
            SelfRoleChangeError: If the actor targets themselves
            UserNotFoundError: If the target doesn't exist
        """
        self.require_admin(actor)
        if str(target_id) == actor.id:
            raise SelfRoleChangeError("You cannot change your own role")

        target = self.storage.get_user(target_id)
        if target is None:
            raise UserNotFoundError(f"User {target_id} not found")

        new_role = "user" if target.is_admin else "admin"
        logger.info("Admin %s sets user %s role to %s", actor.id, target.id, new_role)
        return self.storage.set_user_role(target.id, new_role)
