#!/usr/bin/env python3
"""
Command line entry point for the pet adoption system.

Usage:
  pet-adoption register [USERNAME] [--new-password PWD]
  pet-adoption -u admin -p admin123 add-pet Rex Labrador "3 years" --vaccinated
  pet-adoption -u alice -p secret apply 1
  pet-adoption -u admin -p admin123 process 1 approve

Listings are numbered from 1 and commands take those numbers back.
"""
from __future__ import annotations

import argparse
import sys
from typing import Callable, Sequence

from adoption.core.config import get_settings
from adoption.core.errors import AdoptionError, InvalidInputError, OutOfRangeError
from adoption.core.log import configure_logging
from adoption.domain.records import ApplicationStatus, Pet, Role, User, dashboard_for
from adoption.domain.validators import is_valid_breed, is_valid_name, is_valid_username, parse_age
from adoption.repositories.repository import AdoptionRepository, AgeBetween, BreedContains, NameContains
from adoption.services.adoption_service import AdoptionService
from adoption.services.auth_service import AuthService

CANCEL = "0"


def prompt_validated(
    prompt: str,
    validator: Callable[[str], bool],
    error_message: str,
    max_attempts: int,
    input_fn: Callable[[str], str] = input,
) -> str:
    """Ask until ``validator`` accepts the answer; '0' cancels, the attempt budget raises."""
    for attempt in range(max_attempts):
        value = input_fn(prompt).strip()
        if value == CANCEL:
            raise InvalidInputError("Operation cancelled.")
        if validator(value):
            return value
        remaining = max_attempts - attempt - 1
        print(f"{error_message} ({remaining} attempts remaining, or '0' to cancel)")
    raise InvalidInputError("Too many failed attempts. Returning to menu.")


def _number(value: str) -> int:
    """1-based listing number to a zero-based index."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError("numbers start at 1")
    return number - 1


def _yes_no(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"1", "y", "yes", "true"}:
        return True
    if lowered in {"0", "n", "no", "false"}:
        return False
    raise argparse.ArgumentTypeError("expected yes or no")


class App:
    """Wires settings, repository and services for one command invocation."""

    def __init__(self, input_fn: Callable[[str], str] = input) -> None:
        self.settings = get_settings()
        self.repository = AdoptionRepository.open()
        self.auth = AuthService(self.repository, self.settings)
        self.adoption = AdoptionService(self.repository)
        self.input_fn = input_fn
        self.auth.ensure_bootstrap_admin()

    def _ask(self, prompt: str, validator: Callable[[str], bool], error_message: str) -> str:
        return prompt_validated(prompt, validator, error_message, self.settings.max_attempts, self.input_fn)

    def _login(self, args: argparse.Namespace, role: Role) -> User:
        username = args.username or self._ask("Username: ", is_valid_username, "Invalid username format")
        password = args.password if args.password is not None else self.input_fn("Password: ")
        user = self.auth.login(role, username, password)
        print(f"Logged in as {user.username} ({user.role.label})")
        return user

    def cmd_dashboard(self, args: argparse.Namespace) -> None:
        user = self._login(args, Role.ADMIN if args.admin else Role.USER)
        title = "ADMIN DASHBOARD" if user.is_admin else "USER DASHBOARD"
        print(f"==== {title} ====")
        for number, entry in enumerate(dashboard_for(user), start=1):
            print(f"{number}. {entry}")

    # -------------------------------------- accounts --------------------------------------
    def cmd_register(self, args: argparse.Namespace) -> None:
        username = args.new_username or self._ask(
            "Enter username (4-20 alphanumeric chars, '0' to cancel): ", is_valid_username, "Invalid username format"
        )
        password = args.new_password if args.new_password is not None else self.input_fn("Enter password: ")
        user = self.auth.register(username, password)
        print(f"Registration successful! Welcome, {user.username}.")

    def cmd_add_admin(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        admin = self.auth.add_admin(args.new_username, args.new_password)
        print(f"Admin added: {admin.username}")

    def _user_index(self, number: int) -> int:
        listing = self.repository.sorted_users()
        if not 0 <= number < len(listing):
            raise OutOfRangeError("user", number, len(listing))
        return self.repository.index_of_user(listing[number].username)

    def cmd_users(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        users = self.repository.sorted_users()
        if not users:
            print("No users found.")
            return
        for number, user in enumerate(users, start=1):
            print(f"{number}. {user.username} ({user.role.label})")

    def cmd_update_user(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        index = self._user_index(args.number)
        if args.new_username is None and args.new_password is None:
            raise InvalidInputError("Nothing to update: pass --new-username and/or --new-password")
        if args.new_username is not None:
            updated = self.auth.change_username(index, args.new_username)
            print(f"Username updated: {updated.username}")
        if args.new_password is not None:
            self.auth.change_password(index, args.new_password)
            print("Password updated!")

    def cmd_delete_user(self, args: argparse.Namespace) -> None:
        current = self._login(args, Role.ADMIN)
        index = self._user_index(args.number)
        if self.repository.users[index].username == current.username:
            raise InvalidInputError("You cannot delete the account you are logged in with")
        removed = self.auth.delete_user(index)
        print(f"User deleted: {removed.username}")

    # -------------------------------------- pets --------------------------------------
    def cmd_add_pet(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        pet = self.repository.add_pet(
            Pet(name=args.name, breed=args.breed, age=parse_age(args.age), vaccinated=args.vaccinated)
        )
        print(f"Pet added successfully! {pet.describe()}")

    def cmd_edit_pet(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        age = parse_age(args.age) if args.age is not None else None
        pet = self.repository.edit_pet(args.number, name=args.name, breed=args.breed, age=age, vaccinated=args.vaccinated)
        print(f"Pet updated successfully! {pet.describe()}")

    def cmd_delete_pet(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        pet = self.repository.delete_pet(args.number)
        print(f"Pet deleted successfully! ({pet.name})")

    def cmd_pets(self, args: argparse.Namespace) -> None:
        if args.all:
            self._login(args, Role.ADMIN)
            pets = self.repository.pets
            empty = "No pets in the system."
        else:
            pets = self.adoption.browse()
            empty = "No pets available for adoption."
        if not pets:
            print(empty)
            return
        for number, pet in enumerate(pets, start=1):
            print(f"{number}. {pet.describe()}")

    def cmd_search(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        by_age = args.min_age is not None or args.max_age is not None
        chosen = [args.name is not None, args.breed is not None, by_age]
        if sum(chosen) != 1:
            raise InvalidInputError("Search by exactly one of --name, --breed or an age range (--min-age/--max-age)")
        if args.name is not None:
            if not is_valid_name(args.name):
                raise InvalidInputError("Invalid name")
            predicate = NameContains(args.name, case_sensitive=args.case_sensitive)
        elif args.breed is not None:
            if not is_valid_breed(args.breed):
                raise InvalidInputError("Invalid breed")
            predicate = BreedContains(args.breed, case_sensitive=args.case_sensitive)
        else:
            minimum = args.min_age if args.min_age is not None else 0
            maximum = args.max_age if args.max_age is not None else 30
            if minimum < 0 or maximum < minimum:
                raise InvalidInputError("Age range must satisfy 0 <= min <= max")
            predicate = AgeBetween(minimum, maximum)
        results = self.repository.search_pets(predicate)
        if not results:
            print("No matching pets found.")
            return
        for number, pet in enumerate(results, start=1):
            print(f"{number}. {pet.describe()}")

    # -------------------------------------- applications --------------------------------------
    def cmd_apply(self, args: argparse.Namespace) -> None:
        user = self._login(args, Role.USER)
        application = self.adoption.apply(user.username, args.number)
        print(f"Application #{application.id} submitted for {application.pet_name}!")

    def cmd_status(self, args: argparse.Namespace) -> None:
        user = self._login(args, Role.USER)
        applications = self.adoption.status_for(user.username)
        if not applications:
            print("No applications found.")
            return
        for application in applications:
            print(f"ID: {application.id}, Pet: {application.pet_name}, Status: {application.status.value}")

    def cmd_history(self, args: argparse.Namespace) -> None:
        self._login(args, Role.USER)
        adopted = self.adoption.history()
        if not adopted:
            print("No adoption history found.")
            return
        for pet in adopted:
            print(f"{pet.name} ({pet.breed})")

    def cmd_applications(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        pending = self.adoption.pending()
        if not pending:
            print("No applications to process.")
            return
        for number, application in enumerate(pending, start=1):
            print(f"{number}. ID: {application.id}, User: {application.username}, Pet: {application.pet_name}")

    def cmd_process(self, args: argparse.Namespace) -> None:
        self._login(args, Role.ADMIN)
        application = self.adoption.process(args.number, approve=args.action == "approve")
        if application.status is ApplicationStatus.APPROVED:
            print(f"Application #{application.id} approved!")
        else:
            print(f"Application #{application.id} rejected.")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pet-adoption", description="Pet adoption system")
    ap.add_argument("-u", "--username", help="Account used to run the command")
    ap.add_argument("-p", "--password", help="Password of --username (asked when omitted)")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("dashboard", help="Log in and show the actions available to your role")
    p.add_argument("--admin", action="store_true", help="Log in as an administrator")
    p.set_defaults(handler=App.cmd_dashboard)

    p = sub.add_parser("register", help="Create a regular user account")
    p.add_argument("new_username", nargs="?", help="4-20 letters, digits or single spaces")
    p.add_argument("--new-password", help="Password for the new account")
    p.set_defaults(handler=App.cmd_register)

    p = sub.add_parser("add-admin", help="Create another administrator (admin only)")
    p.add_argument("new_username")
    p.add_argument("new_password")
    p.set_defaults(handler=App.cmd_add_admin)

    p = sub.add_parser("users", help="List accounts sorted by username (admin only)")
    p.set_defaults(handler=App.cmd_users)

    p = sub.add_parser("update-user", help="Rename an account or reset its password (admin only)")
    p.add_argument("number", type=_number, help="Number shown by 'users'")
    p.add_argument("--new-username")
    p.add_argument("--new-password")
    p.set_defaults(handler=App.cmd_update_user)

    p = sub.add_parser("delete-user", help="Delete an account (admin only)")
    p.add_argument("number", type=_number, help="Number shown by 'users'")
    p.set_defaults(handler=App.cmd_delete_user)

    p = sub.add_parser("add-pet", help="Add a pet record (admin only)")
    p.add_argument("name")
    p.add_argument("breed")
    p.add_argument("age", help="e.g. 2, '3 years' or '6 months'")
    p.add_argument("--vaccinated", action="store_true")
    p.set_defaults(handler=App.cmd_add_pet)

    p = sub.add_parser("edit-pet", help="Edit a pet record (admin only)")
    p.add_argument("number", type=_number, help="Number shown by 'pets --all'")
    p.add_argument("--name")
    p.add_argument("--breed")
    p.add_argument("--age")
    p.add_argument("--vaccinated", type=_yes_no, help="yes or no")
    p.set_defaults(handler=App.cmd_edit_pet)

    p = sub.add_parser("delete-pet", help="Delete a pet and its pending applications (admin only)")
    p.add_argument("number", type=_number, help="Number shown by 'pets --all'")
    p.set_defaults(handler=App.cmd_delete_pet)

    p = sub.add_parser("pets", help="List pets available for adoption")
    p.add_argument("--all", action="store_true", help="Include adopted pets (admin only)")
    p.set_defaults(handler=App.cmd_pets)

    p = sub.add_parser("search", help="Search pets by name, breed or age range (admin only)")
    p.add_argument("--name")
    p.add_argument("--breed")
    p.add_argument("--min-age", type=int, help="Lower age bound, default 0")
    p.add_argument("--max-age", type=int, help="Upper age bound, default 30")
    p.add_argument("--case-sensitive", action="store_true")
    p.set_defaults(handler=App.cmd_search)

    p = sub.add_parser("apply", help="Apply to adopt a pet")
    p.add_argument("number", type=_number, help="Number shown by 'pets'")
    p.set_defaults(handler=App.cmd_apply)

    p = sub.add_parser("status", help="Show your applications")
    p.set_defaults(handler=App.cmd_status)

    p = sub.add_parser("history", help="Show adopted pets")
    p.set_defaults(handler=App.cmd_history)

    p = sub.add_parser("applications", help="List pending applications (admin only)")
    p.set_defaults(handler=App.cmd_applications)

    p = sub.add_parser("process", help="Approve or reject a pending application (admin only)")
    p.add_argument("number", type=_number, help="Number shown by 'applications'")
    p.add_argument("action", choices=["approve", "reject"])
    p.set_defaults(handler=App.cmd_process)

    return ap


def main(argv: Sequence[str] | None = None, input_fn: Callable[[str], str] = input) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)
    try:
        app = App(input_fn=input_fn)
        args.handler(app, args)
    except AdoptionError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
