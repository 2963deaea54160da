import argparse
import sys
from getpass import getpass

from passkeep.core.clock import get_current_time
from passkeep.core.config import DB_PATH, LOG_PATH
from passkeep.core.db import create_db_engine, create_session_factory, init_db, run_migrations
from passkeep.core.entry import CredentialDraft
from passkeep.core.errors import PersistenceError, ValidationError
from passkeep.core.ids import generate_id
from passkeep.core.logging import setup_logger
from passkeep.core.passwords import DEFAULT_LENGTH, generate_password
from passkeep.core.repository import SORT_FIELDS, SORT_ORDERS, SqlEntryRepository
from passkeep.core.service import EntryService

COMMANDS = ["init", "add", "list", "show", "edit", "delete", "gen-id", "now", "gen-password"]


def _optional(value: str):
    return value if value.strip() else None


def _prompt_draft(current=None) -> CredentialDraft:
    """
    Ask for every field. On edit, an empty answer keeps the current
    value and "-" clears an optional one.
    """
    def ask(label, field, optional=False):
        old = getattr(current, field) if current else None
        hint = f" [{old}]" if old else ""
        if optional:
            hint = hint or " (optional)"
        # keep the answer as typed; strip only to detect blank or "-"
        answer = input(f"{label}{hint}: ")
        if optional and answer.strip() == "-":
            return None
        if not answer.strip() and old:
            return old
        return _optional(answer) if optional else answer

    title = ask("Title (e.g. Github)", "title")
    username = ask("Username", "username")
    password = getpass("Password (leave empty to keep/generate): ")
    if not password:
        if current:
            password = current.password
        else:
            password = generate_password()
            print(f"Generated a {len(password)}-character password.")
    website = ask("Website", "website", optional=True)
    email = ask("Email", "email", optional=True)

    return CredentialDraft(
        title=title,
        username=username,
        password=password,
        website=website,
        email=email,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="passkeep", description="Local password manager")
    parser.add_argument("cmd", choices=COMMANDS)
    parser.add_argument("--id", help="Entry ID for show/edit/delete")
    parser.add_argument("--db", default=DB_PATH, help="Path to the vault database")
    parser.add_argument("--log", default=LOG_PATH, help="Path to the log file")
    parser.add_argument("--search", help="Filter entries for list")
    parser.add_argument("--sort", choices=SORT_FIELDS, default="created_at")
    parser.add_argument("--order", choices=SORT_ORDERS, default="desc")
    parser.add_argument("--length", type=int, default=DEFAULT_LENGTH, help="Length for gen-password")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # -------------------------
    # COMMANDS WITHOUT A VAULT
    # -------------------------
    if args.cmd == "gen-id":
        print(generate_id())
        return 0

    if args.cmd == "now":
        print(get_current_time())
        return 0

    if args.cmd == "gen-password":
        try:
            print(generate_password(args.length))
        except ValueError as e:
            print("Error:", e)
            return 1
        return 0

    setup_logger(args.log)
    engine = create_db_engine(args.db)
    db = create_session_factory(engine)()
    service = EntryService(SqlEntryRepository(db))

    try:
        # schema creation and migrations are idempotent, so every
        # vault command can run against a fresh or an old database
        init_db(engine)
        version = run_migrations(db)
        if args.cmd == "init":
            print(f"Vault initialized at {args.db} (schema v{version}).")
            return 0
        return _run(args, service)
    except ValidationError as e:
        print(f"Error: {e.field} {e.message}")
        return 1
    except PersistenceError as e:
        print("Error:", e)
        return 1
    finally:
        db.close()
        engine.dispose()


def _run(args, service: EntryService) -> int:
    # -------------------------
    # ADD NEW ENTRY
    # -------------------------
    if args.cmd == "add":
        e = service.create_entry(_prompt_draft())
        print(f"Entry created with ID: {e.id}")
        return 0

    # -------------------------
    # LIST ENTRIES (no secrets)
    # -------------------------
    if args.cmd == "list":
        entries = service.list_entries(args.search, args.sort, args.order)
        if not entries:
            print("No entries.")
            return 0
        print(f"{'ID':<38}{'Title':<20}{'Username':<24}{'Website'}")
        print("-" * 100)
        for e in entries:
            print(f"{e.id:<38}{e.title:<20}{e.username:<24}{e.website or ''}")
        return 0

    # the remaining commands act on a single entry
    if not args.id:
        print("Error: --id required")
        return 1

    # -------------------------
    # SHOW ENTRY
    # -------------------------
    if args.cmd == "show":
        e = service.get_entry(args.id)
        if not e:
            print("Entry not found.")
            return 1

        print(f"Title: {e.title}")
        print(f"Username: {e.username}")
        print(f"Password: {e.password}")
        print(f"Website: {e.website or ''}")
        print(f"Email: {e.email or ''}")
        print(f"Created: {e.created_at}")
        print(f"Updated: {e.updated_at}")
        return 0

    # -------------------------
    # EDIT ENTRY
    # -------------------------
    if args.cmd == "edit":
        current = service.get_entry(args.id)
        if not current:
            print("Entry not found.")
            return 1

        e = service.edit_entry(args.id, _prompt_draft(current))
        print(f"Entry {e.id} updated.")
        return 0

    # -------------------------
    # DELETE ENTRY
    # -------------------------
    if args.cmd == "delete":
        service.delete_entry(args.id)
        print(f"Entry {args.id} deleted.")
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
