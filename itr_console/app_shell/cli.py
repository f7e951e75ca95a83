import argparse
import logging
import secrets
import string
import sys
from datetime import datetime, timedelta

from itr_console.adapters.clock import SystemClock
from itr_console.adapters.sqlite.migrator import SQLiteMigrator
from itr_console.adapters.sqlite.repos import SQLiteCompanyRepo, SQLiteEventRepo
from itr_console.app_shell.config import Settings, get_settings
from itr_console.domain.entities import Company, ScheduledEvent
from itr_console.rules.loader import load_rules
from itr_console.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def new_invitation_code(length: int) -> str:
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


def _require_sqlite(rules: Rules) -> None:
    if rules.backend.provider != "sqlite":
        logger.error("This command only works with the sqlite backend.")
        sys.exit(1)


def handle_migrate(settings: Settings, rules: Rules) -> None:
    _require_sqlite(rules)
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_seed_demo(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    """Local dev data: one company with an invitation code and a few calendar events."""
    _require_sqlite(rules)
    SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()

    code = args.code or new_invitation_code(rules.auth.invitation_code_length)
    if len(code) != rules.auth.invitation_code_length:
        logger.error(f"Invitation code must be {rules.auth.invitation_code_length} characters.")
        sys.exit(1)

    companies = SQLiteCompanyRepo(settings.db_path)
    if companies.find_by_invitation_code(code):
        logger.error(f"A company already uses invitation code {code}.")
        sys.exit(1)
    company = companies.save(Company(name=args.name, invitation_code=code))

    events = SQLiteEventRepo(settings.db_path)
    start = SystemClock().now_utc().replace(hour=9, minute=0, second=0, microsecond=0)
    for i, title in enumerate(["Kick-off call", "WEDA training", "Go-live review"]):
        day_start: datetime = start + timedelta(days=i)
        events.save(
            ScheduledEvent(
                title=f"{title} - {company.name}",
                start_time=day_start,
                end_time=day_start + timedelta(hours=1),
            )
        )

    print(f"Company '{company.name}' created.")
    print(f"Invitation code: {code}")


def main() -> None:
    parser = argparse.ArgumentParser(description="ITR Onboarding Console CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending SQLite migrations")

    seed_parser = subparsers.add_parser("seed-demo", help="Create a demo company and events")
    seed_parser.add_argument("--name", default="Demo Clinic", help="Company name")
    seed_parser.add_argument("--code", help="Invitation code (random if omitted)")

    args = parser.parse_args()

    settings = get_settings()
    try:
        rules = load_rules(settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)

    if args.command == "migrate":
        handle_migrate(settings, rules)
    elif args.command == "seed-demo":
        handle_seed_demo(settings, rules, args)


if __name__ == "__main__":
    main()
