from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

PACKAGE_DIR = Path(__file__).resolve().parent
SRC_DIR = PACKAGE_DIR.parent
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from roster_attendance.config import Settings, UserSettingsStore, load_settings
from roster_attendance.data import Database, SQLiteRosterRepository, roster_key
from roster_attendance.models import TIME_SLOTS, Member
from roster_attendance.services import (
    CheckInStatus,
    QRCodeClient,
    ReconciliationService,
    RosterError,
    RosterStore,
    SessionStore,
    build_check_in_url,
    monthly_statistics,
    parse_check_in_url,
    qr_image_url,
)
from roster_attendance.utils import current_month, local_today, parse_iso_date


logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="roster-attendance", description="Roster attendance by date and time slot.")
    parser.add_argument("--roster", help="Roster (class/channel) identifier.")
    parser.add_argument("--database", type=Path, help="SQLite database path; defaults to DATABASE_PATH.")
    parser.add_argument("--env-file", help="Load environment variables from this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def with_session(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--date", default=None, help="YYYY-MM-DD, defaults to today.")
        sub.add_argument("--slot", choices=TIME_SLOTS, default=None)

    add = subparsers.add_parser("add", help="Register a member.")
    add.add_argument("name")

    remove = subparsers.add_parser("remove", help="Delete a member without attendance records.")
    remove.add_argument("name")
    remove.add_argument("--yes", action="store_true", help="Confirm the deletion.")

    subparsers.add_parser("members", help="List members.")

    ingest = subparsers.add_parser("ingest", help="Mark attendance from pasted roster text.")
    ingest.add_argument("text", nargs="?", help="Text to ingest; reads --file or stdin when omitted.")
    ingest.add_argument("--file", type=Path)
    with_session(ingest)

    toggle = subparsers.add_parser("toggle", help="Flip one member's presence.")
    toggle.add_argument("name")
    with_session(toggle)

    reset = subparsers.add_parser("reset", help="Clear a session's attendance.")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset.")
    with_session(reset)

    check_in = subparsers.add_parser("check-in", help="Member self check-in for today.")
    check_in.add_argument("name")
    check_in.add_argument("--slot", choices=TIME_SLOTS, default=None)
    check_in.add_argument("--link", default=None, help="Shared check-in link; supplies the roster and slot.")
    check_in.add_argument("--cancel", action="store_true", help="Cancel an existing check-in.")

    register = subparsers.add_parser("register", help="Self-register and check in for today.")
    register.add_argument("name")
    register.add_argument("--slot", choices=TIME_SLOTS, default=None)
    register.add_argument("--link", default=None, help="Shared check-in link; supplies the roster and slot.")

    stats = subparsers.add_parser("stats", help="Monthly statistics.")
    stats.add_argument("--month", default=None, help="YYYY-MM, defaults to the current month.")

    link = subparsers.add_parser("link", help="Print the self check-in link for a day and slot.")
    link.add_argument("--day", required=True, help="Weekday label shown to members, e.g. 월요일.")
    link.add_argument("--slot", choices=TIME_SLOTS, required=True)
    link.add_argument("--base-url", default=None)
    link.add_argument("--qr", type=Path, help="Also download the QR image to this PNG path.")

    config = subparsers.add_parser("config", help="Show or update stored preferences.")
    config.add_argument("--base-url", default=None)
    config.add_argument("--default-slot", choices=TIME_SLOTS, default=None)

    return parser


def _member_by_name(roster: RosterStore, name: str) -> Member:
    member = roster.find_by_name(name)
    if member is None:
        raise CommandError(f"'{name.strip()}' is not on the roster.")
    return member


def _read_ingest_text(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text
    if args.file is not None:
        return args.file.read_text(encoding="utf-8")
    return sys.stdin.read()


def _apply_check_in_link(args: argparse.Namespace) -> None:
    """Fill in the roster and slot of a self-service command from its link."""

    if getattr(args, "link", None) is None:
        if args.command in ("check-in", "register") and args.slot is None:
            raise CommandError("Pass --slot or --link.")
        return

    context = parse_check_in_url(args.link)
    if context is None:
        raise CommandError("The check-in link is missing its classId, day or slot.")
    if args.roster and roster_key(args.roster) != roster_key(context.roster_id):
        raise CommandError(f"The link is for roster '{context.roster_id}', not '{args.roster.strip()}'.")
    if args.slot is not None and args.slot != context.slot:
        raise CommandError(f"The link is for the {context.slot} slot, not {args.slot}.")
    args.roster = context.roster_id
    args.slot = context.slot
    logger.debug("Check-in link resolved to %s", context)


def _print_stats(roster: RosterStore, sessions: SessionStore, month: str) -> None:
    stats = monthly_statistics(roster.members(), sessions.sessions(), month, slots=sessions.slots)
    slots = stats.slots

    print(f"{stats.month} · {stats.session_count} sessions")
    print("  ".join(f"{slot} {stats.summary[slot]}" for slot in slots) + f"  total {stats.summary['total']}")
    print()
    for row in stats.members:
        counts = " ".join(str(row.slot_counts[slot]) for slot in slots)
        print(f"{row.name}\t{counts}\t{row.total}\t{row.rate}%")
    if stats.daily:
        print()
    for detail in stats.daily:
        parts = [f"{slot}({detail.counts_by_slot[slot]}): {', '.join(detail.names_by_slot[slot]) or '-'}" for slot in slots]
        print(f"{detail.date}  " + "  ".join(parts))


def run_command(args: argparse.Namespace, settings: Settings, store: UserSettingsStore) -> int:
    if args.command == "config":
        updates = {}
        if args.base_url is not None:
            updates["checkin_base_url"] = args.base_url.strip()
        if args.default_slot is not None:
            updates["default_slot"] = args.default_slot
        data = store.update(**updates) if updates else store.data
        for key in sorted(data):
            print(f"{key} = {data[key]}")
        return 0

    _apply_check_in_link(args)

    if not args.roster:
        raise CommandError("--roster is required for this command.")

    if args.command == "link":
        base_url = args.base_url or settings.checkin_base_url
        if not base_url:
            raise CommandError("No check-in base URL; pass --base-url or run 'config --base-url'.")
        url = build_check_in_url(base_url, args.roster, args.day, args.slot)
        print(url)
        print(qr_image_url(url, size=settings.qr_image_size, service_url=settings.qr_service_url))
        if args.qr is not None:
            client = QRCodeClient(service_url=settings.qr_service_url, timeout=settings.qr_timeout_seconds)
            try:
                args.qr.write_bytes(client.fetch_png(url, size=settings.qr_image_size))
            finally:
                client.close()
            print(f"QR image saved to {args.qr}")
        return 0

    database = Database(args.database or settings.database_path)
    repository = SQLiteRosterRepository(database)
    repository.initialize()
    roster = RosterStore(repository, args.roster)
    sessions = SessionStore(repository, args.roster)
    service = ReconciliationService(roster, sessions)

    day = getattr(args, "date", None) or local_today()
    slot = getattr(args, "slot", None) or settings.default_slot

    if args.command == "add":
        member = roster.add_member(args.name)
        print(f"Registered {member.name}.")
    elif args.command == "remove":
        member = _member_by_name(roster, args.name)
        if not args.yes:
            raise CommandError(f"Deleting '{member.name}' cannot be undone; re-run with --yes to confirm.")
        roster.remove_member(member.id)
        print(f"Deleted {member.name}.")
    elif args.command == "members":
        for member in roster.members():
            print(f"{member.name}\t{member.group}\t{member.id}")
    elif args.command == "ingest":
        if not settings.weekly_schedule.is_open(parse_iso_date(day), slot):
            print(f"Note: {slot} is not on the schedule for {day}.", file=sys.stderr)
        result = service.ingest(_read_ingest_text(args), day, slot)
        if result.registered:
            print("Registered: " + ", ".join(member.name for member in result.registered))
        print(f"{result.newly_present_count} newly marked present ({len(result.present_ids)} total) for {day} {slot}.")
    elif args.command == "toggle":
        member = _member_by_name(roster, args.name)
        present = service.toggle_presence(member.id, day, slot)
        print(f"{member.name}: {'present' if present else 'absent'} for {day} {slot}.")
    elif args.command == "reset":
        if not args.yes:
            raise CommandError(f"Clearing {day} {slot} cannot be undone; re-run with --yes to confirm.")
        cleared = service.reset_session(day, slot)
        print(f"Cleared {cleared} record(s) for {day} {slot}.")
    elif args.command == "check-in":
        member = _member_by_name(roster, args.name)
        if args.cancel:
            result = service.cancel_check_in(member.id, args.slot)
        else:
            result = service.self_check_in(member.id, args.slot)
        messages = {
            CheckInStatus.CHECKED_IN: f"{member.name} checked in for {result.date} {result.slot}.",
            CheckInStatus.ALREADY_PRESENT: f"{member.name} is already checked in; use --cancel to undo it.",
            CheckInStatus.CANCELLED: f"{member.name}'s check-in was cancelled.",
            CheckInStatus.NOT_PRESENT: f"{member.name} was not checked in.",
        }
        print(messages[result.status])
    elif args.command == "register":
        result = service.register_and_check_in(args.name, args.slot)
        print(f"{result.member.name} registered and checked in for {result.date} {result.slot}.")
    elif args.command == "stats":
        _print_stats(roster, sessions, args.month or current_month())
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    store = UserSettingsStore()
    settings = load_settings(args.env_file, user_settings_store=store)
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.WARNING))
    logger.debug("Loaded %s", settings.__print__())

    try:
        return run_command(args, settings, store)
    except (RosterError, CommandError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
