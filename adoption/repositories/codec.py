"""
Line codec for the .dat files.

One record per line, comma-delimited. Fields are written through the csv
module, so a value containing a comma, quote or newline is quoted instead of
corrupting the row; plain values produce exactly the legacy layout.
"""
from __future__ import annotations

import csv
import io

from adoption.core.errors import InvalidFormatError
from adoption.domain.records import Application, ApplicationStatus, Pet, Role, User

DELIMITER = ","
NEXT_ID_PREFIX = "NEXT_ID:"

_TRUE = "1"
_FALSE = "0"


def _join(fields: list[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=DELIMITER, lineterminator="", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(fields)
    return buffer.getvalue()


def _split(line: str, expected: int, kind: str) -> list[str]:
    try:
        fields = next(csv.reader([line.rstrip("\r\n")], delimiter=DELIMITER, strict=True))
    except (csv.Error, StopIteration) as exc:
        raise InvalidFormatError(f"Malformed {kind} line: {line!r}") from exc
    if len(fields) != expected:
        raise InvalidFormatError(f"Expected {expected} fields for {kind}, got {len(fields)}: {line!r}")
    return fields


def _int(token: str, kind: str, field: str) -> int:
    try:
        value = int(token)
    except ValueError as exc:
        raise InvalidFormatError(f"Invalid {kind} {field}: {token!r}") from exc
    if value < 0:
        raise InvalidFormatError(f"Negative {kind} {field}: {token!r}")
    return value


def _flag(token: str, kind: str, field: str) -> bool:
    if token == _TRUE:
        return True
    if token == _FALSE:
        return False
    raise InvalidFormatError(f"Invalid {kind} {field} flag: {token!r}")


def _bool_token(value: bool) -> str:
    return _TRUE if value else _FALSE


# -------------------------- users --------------------------
def encode_user(user: User) -> str:
    return _join([user.username, user.password, str(user.role.value)])


def decode_user(line: str) -> User:
    username, password, role_token = _split(line, 3, "user")
    try:
        role = Role(_int(role_token, "user", "role"))
    except ValueError as exc:
        raise InvalidFormatError(f"Unknown role: {role_token!r}") from exc
    return User(username=username, password=password, role=role)


# -------------------------- pets --------------------------
def encode_pet(pet: Pet) -> str:
    return _join([pet.name, pet.breed, str(pet.age), _bool_token(pet.vaccinated), _bool_token(pet.adopted)])


def decode_pet(line: str) -> Pet:
    name, breed, age, vaccinated, adopted = _split(line, 5, "pet")
    return Pet(
        name=name,
        breed=breed,
        age=_int(age, "pet", "age"),
        vaccinated=_flag(vaccinated, "pet", "vaccinated"),
        adopted=_flag(adopted, "pet", "adopted"),
    )


# -------------------------- applications --------------------------
def encode_application(application: Application) -> str:
    return _join([str(application.id), application.username, application.pet_name, application.status.value])


def decode_application(line: str) -> Application:
    app_id, username, pet_name, status = _split(line, 4, "application")
    try:
        status_value = ApplicationStatus(status)
    except ValueError as exc:
        raise InvalidFormatError(f"Unknown application status: {status!r}") from exc
    return Application(id=_int(app_id, "application", "id"), username=username, pet_name=pet_name, status=status_value)


def encode_next_id(next_id: int) -> str:
    return f"{NEXT_ID_PREFIX}{next_id}"


def decode_next_id(line: str) -> int:
    raw = line.strip()
    if not raw.startswith(NEXT_ID_PREFIX):
        raise InvalidFormatError(f"Missing {NEXT_ID_PREFIX} header: {line!r}")
    return _int(raw[len(NEXT_ID_PREFIX) :], "application", "next id")
