"""
Authentication and account related use cases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from adoption.core.config import Settings, get_settings
from adoption.core.errors import AuthenticationError, InvalidInputError
from adoption.core.security import hash_password, is_hashed, verify_password
from adoption.domain.records import Role, User
from adoption.domain.validators import is_valid_username, password_validator
from adoption.repositories.repository import AdoptionRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """Handles registration, admin creation, login and account edits."""

    repository: AdoptionRepository
    settings: Settings = field(default_factory=get_settings)

    # -------------------------------------- helpers --------------------------------------
    def _check_password(self, password: str) -> None:
        if not password_validator(self.settings.password_policy)(password):
            if self.settings.password_policy == "strict":
                raise InvalidInputError("Password must be at least 8 characters with a letter and a digit")
            raise InvalidInputError("Invalid password!")

    def _new_user(self, username: str, password: str, role: Role) -> User:
        username = (username or "").strip()
        if not is_valid_username(username):
            raise InvalidInputError("Invalid username format")
        self._check_password(password)
        user = User(username=username, password=hash_password(password), role=role)
        return self.repository.add_user(user)

    def ensure_bootstrap_admin(self) -> User | None:
        """Create the default administrator when the user list is empty."""
        if self.repository.users:
            return None
        admin = User.admin(self.settings.bootstrap_username, hash_password(self.settings.bootstrap_password))
        self.repository.add_user(admin)
        logger.warning(
            "Created bootstrap admin '%s' with the default password; change it after first login",
            admin.username,
        )
        return admin

    def _is_bootstrap_credentials(self, username: str, password: str) -> bool:
        return (
            self.settings.bootstrap_login_enabled
            and username == self.settings.bootstrap_username
            and password == self.settings.bootstrap_password
        )

    def _bootstrap_login(self) -> User:
        """
        Default-credential escape hatch.

        The configured bootstrap pair always opens the bootstrap admin account,
        even after its stored password changed or the record was deleted (it is
        re-created). Disable with ADOPTION_BOOTSTRAP_LOGIN=0.
        """
        username = self.settings.bootstrap_username
        existing = self.repository.find_user(username)
        if existing is not None:
            if not existing.is_admin:
                raise AuthenticationError("Invalid credentials or role mismatch.")
            logger.warning("Bootstrap admin login used for '%s'", username)
            return existing
        admin = User.admin(username, hash_password(self.settings.bootstrap_password))
        self.repository.add_user(admin)
        logger.warning("Bootstrap admin '%s' was missing and has been re-created", username)
        return admin

    # -------------------------------------- registration --------------------------------------
    def register(self, username: str, password: str) -> User:
        """Self-service registration; always creates a regular user."""
        return self._new_user(username, password, Role.USER)

    def add_admin(self, username: str, password: str) -> User:
        return self._new_user(username, password, Role.ADMIN)

    # -------------------------------------- login --------------------------------------
    def login(self, role: Role, username: str, password: str) -> User:
        username = (username or "").strip()
        if role is Role.ADMIN and self._is_bootstrap_credentials(username, password):
            return self._bootstrap_login()
        for index, user in enumerate(self.repository.users):
            if user.role is not role or user.username != username:
                continue
            if not verify_password(password, user.password):
                break
            if not is_hashed(user.password):
                # Upgrade legacy plaintext rows on first successful login.
                user = self.repository.update_user(index, new_password=hash_password(password))
            return user
        logger.warning("Failed %s login for '%s'", role.label.lower(), username)
        raise AuthenticationError("Invalid credentials or role mismatch.")

    # -------------------------------------- accounts --------------------------------------
    def change_username(self, index: int, new_username: str) -> User:
        return self.repository.update_user(index, new_username=(new_username or "").strip())

    def change_password(self, index: int, new_password: str) -> User:
        self._check_password(new_password)
        return self.repository.update_user(index, new_password=hash_password(new_password))

    def delete_user(self, index: int) -> User:
        return self.repository.delete_user(index)
