"""In-memory record collections with write-through persistence."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional
import logging

from adoption.core.config import get_settings
from adoption.core.errors import DuplicateUsernameError, InvalidInputError, OutOfRangeError
from adoption.domain.records import Application, Pet, User
from adoption.domain.validators import is_valid_breed, is_valid_name, is_valid_username
from adoption.repositories.flat_file import FlatFileStorage

logger = logging.getLogger(__name__)

PetPredicate = Callable[[Pet], bool]

DEFAULT_PETS = (
    Pet(name="Whiskers", breed="Siamese", age=2, vaccinated=True),
    Pet(name="Rex", breed="Labrador", age=3, vaccinated=True),
)


# -------------------------- search predicates --------------------------
def _contains(haystack: str, needle: str, case_sensitive: bool) -> bool:
    if case_sensitive:
        return needle in haystack
    return needle.casefold() in haystack.casefold()


@dataclass(frozen=True)
class NameContains:
    text: str
    case_sensitive: bool = False

    def __call__(self, pet: Pet) -> bool:
        return _contains(pet.name, self.text, self.case_sensitive)


@dataclass(frozen=True)
class BreedContains:
    text: str
    case_sensitive: bool = False

    def __call__(self, pet: Pet) -> bool:
        return _contains(pet.breed, self.text, self.case_sensitive)


@dataclass(frozen=True)
class AgeBetween:
    minimum: int
    maximum: int

    def __call__(self, pet: Pet) -> bool:
        return self.minimum <= pet.age <= self.maximum


def _check_index(kind: str, index: int, size: int) -> None:
    if not 0 <= index < size:
        raise OutOfRangeError(kind, index, size)


def _validate_pet_fields(name: str | None, breed: str | None, age: int | None) -> None:
    if name is not None and not is_valid_name(name):
        raise InvalidInputError("Invalid name")
    if breed is not None and not is_valid_breed(breed):
        raise InvalidInputError("Invalid breed")
    if age is not None and age < 0:
        raise InvalidInputError("Age must be a non-negative number of years")


class AdoptionRepository:
    """
    Owns the authoritative lists of users, pets and applications.

    Every mutating method persists the affected collection before returning.
    Indexes are zero-based positions in the stored lists.
    """

    def __init__(self, storage: FlatFileStorage) -> None:
        self.storage = storage
        self._users: list[User] = storage.load_users()
        self._pets: list[Pet] = storage.load_pets()
        snapshot = storage.load_applications()
        self._applications: list[Application] = snapshot.applications
        self._next_id = snapshot.next_id

    @classmethod
    def open(cls, storage: FlatFileStorage | None = None) -> "AdoptionRepository":
        """Load the data files and seed defaults (bootstrap admin, starter pets)."""
        settings = get_settings()
        repo = cls(storage or FlatFileStorage.from_settings(settings))
        if settings.seed_pets and not repo._pets and not repo.storage.pets_file.exists():
            repo._pets = [replace(p) for p in DEFAULT_PETS]
            repo._save_pets()
            logger.info("Seeded %d starter pets", len(repo._pets))
        return repo

    # -------------------------- persistence --------------------------
    def _save_users(self) -> None:
        self.storage.save_users(self._users)

    def _save_pets(self) -> None:
        self.storage.save_pets(self._pets)

    def _save_applications(self) -> None:
        self.storage.save_applications(self._applications, self._next_id)

    # -------------------------- users --------------------------
    @property
    def users(self) -> list[User]:
        return list(self._users)

    def sorted_users(self) -> list[User]:
        return sorted(self._users, key=lambda u: u.username)

    def find_user(self, username: str) -> Optional[User]:
        for user in self._users:
            if user.username == username:
                return user
        return None

    def index_of_user(self, username: str) -> int:
        for index, user in enumerate(self._users):
            if user.username == username:
                return index
        raise InvalidInputError(f"User '{username}' not found")

    def add_user(self, user: User) -> User:
        if not is_valid_username(user.username):
            raise InvalidInputError("Invalid username format")
        if self.find_user(user.username):
            raise DuplicateUsernameError(f"Username '{user.username}' already exists")
        self._users.append(user)
        self._save_users()
        logger.info("Added %s account %s", user.role.label.lower(), user.username)
        return user

    def update_user(self, index: int, new_username: str | None = None, new_password: str | None = None) -> User:
        _check_index("user", index, len(self._users))
        current = self._users[index]
        changes: dict = {}
        if new_username is not None and new_username != current.username:
            if not is_valid_username(new_username):
                raise InvalidInputError("Invalid username format")
            if self.find_user(new_username):
                raise DuplicateUsernameError(f"Username '{new_username}' already exists")
            changes["username"] = new_username
        if new_password is not None:
            if not new_password:
                raise InvalidInputError("Invalid password")
            changes["password"] = new_password
        if not changes:
            return current
        updated = current.with_changes(**changes)
        self._users[index] = updated
        self._save_users()
        logger.info("Updated account %s", updated.username)
        return updated

    def delete_user(self, index: int) -> User:
        _check_index("user", index, len(self._users))
        removed = self._users.pop(index)
        self._save_users()
        logger.info("Deleted account %s", removed.username)
        return removed

    # -------------------------- pets --------------------------
    @property
    def pets(self) -> list[Pet]:
        return list(self._pets)

    def get_pet(self, index: int) -> Pet:
        _check_index("pet", index, len(self._pets))
        return self._pets[index]

    def available_pets(self) -> list[Pet]:
        return [p for p in self._pets if not p.adopted]

    def adopted_pets(self) -> list[Pet]:
        return [p for p in self._pets if p.adopted]

    def find_pet(self, name: str) -> Optional[Pet]:
        """First pet with this name, adopted or not."""
        for pet in self._pets:
            if pet.name == name:
                return pet
        return None

    def add_pet(self, pet: Pet) -> Pet:
        _validate_pet_fields(pet.name, pet.breed, pet.age)
        self._pets.append(pet)
        self._save_pets()
        logger.info("Added pet %s (%s)", pet.name, pet.breed)
        return pet

    def edit_pet(
        self,
        index: int,
        name: str | None = None,
        breed: str | None = None,
        age: int | None = None,
        vaccinated: bool | None = None,
    ) -> Pet:
        _check_index("pet", index, len(self._pets))
        _validate_pet_fields(name, breed, age)
        pet = self._pets[index]
        old_name = pet.name
        if name is not None:
            pet.name = name
        if breed is not None:
            pet.breed = breed
        if age is not None:
            pet.age = age
        if vaccinated is not None:
            pet.vaccinated = vaccinated
        self._save_pets()
        # Pending applications follow the rename unless another pet still answers to the old name.
        if pet.name != old_name and self.find_pet(old_name) is None:
            renamed = 0
            for application in self._applications:
                if application.is_pending and application.pet_name == old_name:
                    application.pet_name = pet.name
                    renamed += 1
            if renamed:
                self._save_applications()
                logger.info("Moved %d pending application(s) from %s to %s", renamed, old_name, pet.name)
        logger.info("Edited pet #%d (%s)", index, pet.name)
        return pet

    def delete_pet(self, index: int) -> Pet:
        """Remove a pet and the pending applications that name it."""
        _check_index("pet", index, len(self._pets))
        removed = self._pets.pop(index)
        self._save_pets()
        remaining = [a for a in self._applications if not (a.is_pending and a.pet_name == removed.name)]
        dropped = len(self._applications) - len(remaining)
        if dropped:
            self._applications = remaining
            self._save_applications()
        logger.info("Deleted pet %s and %d pending application(s)", removed.name, dropped)
        return removed

    def search_pets(self, predicate: PetPredicate) -> list[Pet]:
        return [p for p in self._pets if predicate(p)]

    # -------------------------- applications --------------------------
    @property
    def applications(self) -> list[Application]:
        return list(self._applications)

    @property
    def next_id(self) -> int:
        return self._next_id

    def pending_applications(self) -> list[Application]:
        return [a for a in self._applications if a.is_pending]

    def applications_for(self, username: str) -> list[Application]:
        return [a for a in self._applications if a.username == username]

    def create_application(self, username: str, pet_name: str) -> Application:
        application = Application(id=self._next_id, username=username, pet_name=pet_name)
        self._next_id += 1
        self._applications.append(application)
        self._save_applications()
        logger.info("Application #%d created by %s for %s", application.id, username, pet_name)
        return application

    def process_application(self, index: int, approve: bool) -> Application:
        _check_index("application", index, len(self._applications))
        application = self._applications[index]
        if not application.is_pending:
            raise InvalidInputError(f"Application #{application.id} is already {application.status.value}")
        if approve:
            application.approve()
            pet = self.find_pet(application.pet_name)
            if pet is not None:
                pet.adopted = True
                self._save_pets()
            else:
                logger.warning("Approved application #%d names unknown pet %s", application.id, application.pet_name)
        else:
            application.reject()
        self._save_applications()
        logger.info("Application #%d %s", application.id, application.status.value.lower())
        return application

    def index_of_application(self, application_id: int) -> int:
        for index, application in enumerate(self._applications):
            if application.id == application_id:
                return index
        raise InvalidInputError(f"Application #{application_id} not found")
