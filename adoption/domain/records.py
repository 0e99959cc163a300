"""Record types for users, pets and adoption applications."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class Role(Enum):
    """Account variant; the value is the integer stored in users.dat."""

    ADMIN = 0
    USER = 1

    @property
    def label(self) -> str:
        return "Admin" if self is Role.ADMIN else "User"


class ApplicationStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class User:
    """An account. ``role`` tags the variant (admin or regular user)."""

    username: str
    password: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def admin(cls, username: str, password: str) -> "User":
        return cls(username=username, password=password, role=Role.ADMIN)

    @classmethod
    def regular(cls, username: str, password: str) -> "User":
        return cls(username=username, password=password, role=Role.USER)

    def with_changes(self, **changes) -> "User":
        return replace(self, **changes)


# Dashboard entries per role.
DASHBOARDS: dict[Role, tuple[str, ...]] = {
    Role.ADMIN: (
        "Add Another Admin",
        "Manage User Accounts",
        "Manage Pet Records",
        "Process Applications",
        "Search Pets",
        "Logout",
    ),
    Role.USER: (
        "Browse Pets",
        "Check Application Status",
        "View History",
        "Logout",
    ),
}


def dashboard_for(user: User) -> tuple[str, ...]:
    return DASHBOARDS[user.role]


@dataclass
class Pet:
    name: str
    breed: str
    age: int
    vaccinated: bool = False
    adopted: bool = False

    def describe(self) -> str:
        return (
            f"{self.name} ({self.breed}), Age: {self.age}, "
            f"Vaccinated: {'Yes' if self.vaccinated else 'No'}, "
            f"Status: {'Adopted' if self.adopted else 'Available'}"
        )


@dataclass
class Application:
    id: int
    username: str
    pet_name: str
    status: ApplicationStatus = ApplicationStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status is ApplicationStatus.PENDING

    def approve(self) -> None:
        self.status = ApplicationStatus.APPROVED

    def reject(self) -> None:
        self.status = ApplicationStatus.REJECTED
