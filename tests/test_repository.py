"""
Repository tests against temporary .dat files.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from adoption.core import config as core_config  # noqa: E402
from adoption.core.errors import (  # noqa: E402
    DuplicateUsernameError,
    FileOperationError,
    InvalidFormatError,
    InvalidInputError,
    OutOfRangeError,
)
from adoption.domain.records import ApplicationStatus, Pet, User  # noqa: E402
from adoption.repositories.flat_file import FlatFileStorage  # noqa: E402
from adoption.repositories.repository import (  # noqa: E402
    AdoptionRepository,
    AgeBetween,
    BreedContains,
    NameContains,
)


@pytest.fixture()
def storage(tmp_path):
    return FlatFileStorage(tmp_path / "users.dat", tmp_path / "pets.dat", tmp_path / "applications.dat")


@pytest.fixture()
def repo(storage):
    repository = AdoptionRepository(storage)
    repository.add_user(User.admin("admin", "admin123"))
    repository.add_user(User.regular("alice", "pw"))
    repository.add_pet(Pet("Whiskers", "Siamese", 2, vaccinated=True))
    repository.add_pet(Pet("Rex", "Labrador", 3, vaccinated=True))
    return repository


def test_add_user_rejects_duplicate_username(repo, storage):
    before = storage.users_file.read_text(encoding="utf-8")
    with pytest.raises(DuplicateUsernameError):
        repo.add_user(User.regular("alice", "other"))
    assert [u.username for u in repo.users] == ["admin", "alice"]
    assert storage.users_file.read_text(encoding="utf-8") == before


def test_add_user_rejects_invalid_username(repo):
    with pytest.raises(InvalidInputError):
        repo.add_user(User.regular("ab", "pw"))


@pytest.mark.parametrize("index", [2, 99, -1])
def test_delete_user_out_of_range_leaves_list_unchanged(repo, index):
    before = repo.users
    with pytest.raises(OutOfRangeError):
        repo.delete_user(index)
    assert repo.users == before


def test_update_and_delete_user_write_through(repo, storage):
    repo.update_user(1, new_username="alice b", new_password="new")
    assert storage.load_users()[1] == User.regular("alice b", "new")
    with pytest.raises(DuplicateUsernameError):
        repo.update_user(1, new_username="admin")
    repo.delete_user(0)
    assert [u.username for u in storage.load_users()] == ["alice b"]


def test_files_use_legacy_layout(repo, storage):
    repo.create_application("alice", "Rex")
    assert storage.users_file.read_text(encoding="utf-8") == "admin,admin123,0\nalice,pw,1\n"
    assert storage.pets_file.read_text(encoding="utf-8") == "Whiskers,Siamese,2,1,0\nRex,Labrador,3,1,0\n"
    assert storage.applications_file.read_text(encoding="utf-8") == "NEXT_ID:2\n1,alice,Rex,Pending\n"


def test_application_ids_are_never_reused(repo, storage):
    first = repo.create_application("alice", "Rex")
    second = repo.create_application("alice", "Whiskers")
    assert (first.id, second.id) == (1, 2)

    # Deleting the pet drops the pending application but not the counter.
    repo.delete_pet(1)
    assert [a.id for a in repo.applications] == [2]
    third = repo.create_application("alice", "Whiskers")
    assert third.id == 3

    reloaded = AdoptionRepository(storage)
    assert reloaded.next_id == 4
    assert reloaded.create_application("alice", "Whiskers").id == 4


def test_next_id_without_header_follows_highest_id(storage):
    storage.applications_file.write_text("4,alice,Rex,Pending\n2,bob,Rex,Rejected\n", encoding="utf-8")
    repo = AdoptionRepository(storage)
    assert repo.next_id == 5


def test_approve_marks_pet_adopted(repo, storage):
    repo.create_application("alice", "Rex")
    application = repo.process_application(0, approve=True)
    assert application.status is ApplicationStatus.APPROVED
    assert repo.pets[1].adopted is True
    assert repo.pets[0].adopted is False

    reloaded = AdoptionRepository(storage)
    assert reloaded.pets[1].adopted is True
    assert reloaded.applications[0].status is ApplicationStatus.APPROVED


def test_reject_never_touches_pets(repo):
    repo.create_application("alice", "Rex")
    before = [Pet(p.name, p.breed, p.age, p.vaccinated, p.adopted) for p in repo.pets]
    application = repo.process_application(0, approve=False)
    assert application.status is ApplicationStatus.REJECTED
    assert repo.pets == before


def test_processed_application_is_terminal(repo):
    repo.create_application("alice", "Rex")
    repo.process_application(0, approve=False)
    with pytest.raises(InvalidInputError):
        repo.process_application(0, approve=True)
    assert repo.pets[1].adopted is False


def test_approve_with_duplicate_names_marks_first_match(repo):
    repo.edit_pet(0, name="Rex")
    repo.process_application(repo.index_of_application(repo.create_application("alice", "Rex").id), approve=True)
    assert [p.adopted for p in repo.pets] == [True, False]

    # The first Rex is already adopted; first match still wins.
    repo.create_application("admin", "Rex")
    repo.process_application(1, approve=True)
    assert [p.adopted for p in repo.pets] == [True, False]


def test_renaming_pet_moves_pending_applications(repo, storage):
    repo.create_application("alice", "Rex")
    repo.edit_pet(1, name="Max")
    assert repo.applications[0].pet_name == "Max"
    assert storage.load_applications().applications[0].pet_name == "Max"
    repo.process_application(0, approve=True)
    assert repo.pets[1] == Pet("Max", "Labrador", 3, vaccinated=True, adopted=True)


def test_renaming_one_of_two_same_named_pets_keeps_applications(repo):
    repo.add_pet(Pet("Rex", "Beagle", 1))
    repo.create_application("alice", "Rex")
    repo.edit_pet(2, name="Max")
    assert repo.applications[0].pet_name == "Rex"


def test_invalid_utf8_file_reports_invalid_format(storage):
    storage.users_file.write_bytes(b"admin,\xff\xfe,0\n")
    with pytest.raises(InvalidFormatError) as excinfo:
        AdoptionRepository(storage)
    assert "users.dat" in excinfo.value.message


def test_process_application_out_of_range(repo):
    with pytest.raises(OutOfRangeError):
        repo.process_application(0, approve=True)


def test_delete_pet_removes_only_pending_applications(repo):
    repo.create_application("alice", "Rex")
    repo.create_application("admin", "Rex")
    repo.create_application("alice", "Whiskers")
    repo.process_application(0, approve=False)
    repo.delete_pet(1)
    assert [(a.id, a.pet_name, a.status.value) for a in repo.applications] == [
        (1, "Rex", "Rejected"),
        (3, "Whiskers", "Pending"),
    ]


def test_edit_pet_validates_and_persists(repo, storage):
    with pytest.raises(InvalidInputError):
        repo.edit_pet(0, name="Bad  Name")
    assert repo.pets[0].name == "Whiskers"
    repo.edit_pet(0, name="Tom", age=5, vaccinated=False)
    assert storage.load_pets()[0] == Pet("Tom", "Siamese", 5, vaccinated=False)
    with pytest.raises(OutOfRangeError):
        repo.edit_pet(5, name="Tom")


def test_add_pet_rejects_invalid_fields(repo):
    with pytest.raises(InvalidInputError):
        repo.add_pet(Pet("", "Siamese", 1))
    with pytest.raises(InvalidInputError):
        repo.add_pet(Pet("Tom", "Siamese", -1))
    assert len(repo.pets) == 2


def test_search_pets(repo):
    repo.add_pet(Pet("Rexy", "Golden Retriever", 8))
    assert [p.name for p in repo.search_pets(NameContains("rex"))] == ["Rex", "Rexy"]
    assert repo.search_pets(NameContains("rex", case_sensitive=True)) == []
    assert [p.name for p in repo.search_pets(BreedContains("retr"))] == ["Rexy"]
    assert [p.name for p in repo.search_pets(AgeBetween(2, 3))] == ["Whiskers", "Rex"]
    assert repo.search_pets(AgeBetween(4, 7)) == []


def test_sorted_users_and_lookups(repo):
    repo.add_user(User.regular("Bob 2", "pw"))
    assert [u.username for u in repo.sorted_users()] == ["Bob 2", "admin", "alice"]
    assert repo.index_of_user("Bob 2") == 2
    assert repo.find_user("nobody") is None


def test_malformed_file_reports_file_and_line(storage):
    storage.pets_file.write_text("Rex,Labrador,3,1,0\nbroken line\n", encoding="utf-8")
    with pytest.raises(InvalidFormatError) as excinfo:
        AdoptionRepository(storage)
    assert "pets.dat:2" in excinfo.value.message


def test_write_failure_is_surfaced(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    storage = FlatFileStorage(blocker / "users.dat", tmp_path / "pets.dat", tmp_path / "applications.dat")
    repo = AdoptionRepository(storage)
    with pytest.raises(FileOperationError):
        repo.add_user(User.regular("alice", "pw"))


def test_open_seeds_starter_pets_once(tmp_path, monkeypatch):
    monkeypatch.setenv("ADOPTION_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("ADOPTION_SEED_PETS", raising=False)
    core_config.get_settings.cache_clear()
    try:
        repo = AdoptionRepository.open()
        assert [p.name for p in repo.pets] == ["Whiskers", "Rex"]
        repo.delete_pet(0)
        repo.delete_pet(0)
        assert AdoptionRepository.open().pets == []
    finally:
        core_config.get_settings.cache_clear()
