"""Adoption use cases: browsing, applying, tracking and processing applications."""

from __future__ import annotations

from adoption.core.errors import InvalidInputError, OutOfRangeError
from adoption.domain.records import Application, Pet
from adoption.repositories.repository import AdoptionRepository


class AdoptionService:
    """Wraps the repository with the rules of the user and admin dashboards."""

    def __init__(self, repository: AdoptionRepository) -> None:
        self.repository = repository

    def browse(self) -> list[Pet]:
        return self.repository.available_pets()

    def apply(self, username: str, pet_index: int) -> Application:
        """Apply for the pet at ``pet_index`` in the available pets list."""
        available = self.browse()
        if not 0 <= pet_index < len(available):
            raise OutOfRangeError("available pet", pet_index, len(available))
        pet = available[pet_index]
        for application in self.repository.applications_for(username):
            if application.is_pending and application.pet_name == pet.name:
                raise InvalidInputError(f"You already have a pending application (#{application.id}) for {pet.name}")
        return self.repository.create_application(username, pet.name)

    def status_for(self, username: str) -> list[Application]:
        return self.repository.applications_for(username)

    def history(self) -> list[Pet]:
        return self.repository.adopted_pets()

    def pending(self) -> list[Application]:
        return self.repository.pending_applications()

    def process(self, pending_index: int, approve: bool) -> Application:
        """Approve or reject the application at ``pending_index`` in the pending list."""
        pending = self.pending()
        if not 0 <= pending_index < len(pending):
            raise OutOfRangeError("pending application", pending_index, len(pending))
        target = pending[pending_index]
        index = self.repository.index_of_application(target.id)
        return self.repository.process_application(index, approve)
