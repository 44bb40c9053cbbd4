from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from datetime import datetime
from threading import RLock
from typing import Callable, Protocol

from roster_attendance.data.database import Database
from roster_attendance.models import Member, Session

logger = logging.getLogger(__name__)

# (kind, roster_id, key) where kind is "member" or "session".
ChangeListener = Callable[[str, str, str], None]
Unsubscribe = Callable[[], None]


def roster_key(roster_id: str) -> str:
    """Storage key for a roster: the id without surrounding whitespace.

    Distinct ids always get distinct keys, so rosters never share rows.
    """

    key = (roster_id or "").strip()
    if not key:
        raise ValueError("Roster ids cannot be blank.")
    return key


class RosterRepository(Protocol):
    def read_members(self, roster_id: str) -> list[Member]: ...

    def write_member(self, roster_id: str, member: Member) -> None: ...

    def delete_member(self, roster_id: str, member_id: str) -> None: ...

    def read_sessions(self, roster_id: str) -> dict[str, Session]: ...

    def write_session(self, roster_id: str, session: Session) -> None: ...

    def subscribe(self, roster_id: str, listener: ChangeListener) -> Unsubscribe: ...


class _ListenerRegistry:
    def __init__(self) -> None:
        self._listeners: dict[str, list[ChangeListener]] = defaultdict(list)
        self._lock = RLock()

    def subscribe(self, roster_id: str, listener: ChangeListener) -> Unsubscribe:
        key = roster_key(roster_id)
        with self._lock:
            self._listeners[key].append(listener)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(key, [])
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def notify(self, kind: str, roster_id: str, key: str) -> None:
        with self._lock:
            listeners = list(self._listeners.get(roster_key(roster_id), []))
        for listener in listeners:
            try:
                listener(kind, roster_id, key)
            except Exception:  # pragma: no cover - a broken listener must not undo a write
                logger.exception("Change listener failed for %s %s/%s", kind, roster_id, key)


class InMemoryRosterRepository:
    """Single-process store; writes are visible to the next read immediately."""

    def __init__(self) -> None:
        self._members: dict[str, dict[str, Member]] = defaultdict(dict)
        self._sessions: dict[str, dict[str, Session]] = defaultdict(dict)
        self._registry = _ListenerRegistry()

    def read_members(self, roster_id: str) -> list[Member]:
        return list(self._members.get(roster_key(roster_id), {}).values())

    def write_member(self, roster_id: str, member: Member) -> None:
        self._members[roster_key(roster_id)][member.id] = member
        self._registry.notify("member", roster_id, member.id)

    def delete_member(self, roster_id: str, member_id: str) -> None:
        self._members.get(roster_key(roster_id), {}).pop(member_id, None)
        self._registry.notify("member", roster_id, member_id)

    def read_sessions(self, roster_id: str) -> dict[str, Session]:
        return dict(self._sessions.get(roster_key(roster_id), {}))

    def write_session(self, roster_id: str, session: Session) -> None:
        self._sessions[roster_key(roster_id)][session.id] = session
        self._registry.notify("session", roster_id, session.id)

    def subscribe(self, roster_id: str, listener: ChangeListener) -> Unsubscribe:
        return self._registry.subscribe(roster_id, listener)


class SQLiteRosterRepository:
    def __init__(self, database: Database) -> None:
        self._database = database
        self._registry = _ListenerRegistry()

    def initialize(self) -> None:
        self._database.initialize()

    def read_members(self, roster_id: str) -> list[Member]:
        with self._database.connect() as connection:
            rows = connection.execute(
                """
                SELECT id, name, member_group, created_at
                  FROM members
                 WHERE roster_id = ?
              ORDER BY name
                """,
                (roster_key(roster_id),),
            ).fetchall()

        return [
            Member(
                id=row["id"],
                name=row["name"],
                group=row["member_group"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    def write_member(self, roster_id: str, member: Member) -> None:
        with self._database.connect() as connection:
            try:
                connection.execute(
                    """
                    INSERT INTO members (roster_id, id, name, member_group, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(roster_id, id) DO UPDATE SET
                        name = excluded.name,
                        member_group = excluded.member_group
                    """,
                    (
                        roster_key(roster_id),
                        member.id,
                        member.name,
                        member.group,
                        member.created_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError as exc:
                # services imports this package, so the error type is resolved here.
                from roster_attendance.services.errors import DuplicateNameError

                raise DuplicateNameError(member.name) from exc
        self._registry.notify("member", roster_id, member.id)

    def delete_member(self, roster_id: str, member_id: str) -> None:
        with self._database.connect() as connection:
            connection.execute(
                "DELETE FROM members WHERE roster_id = ? AND id = ?",
                (roster_key(roster_id), member_id),
            )
        self._registry.notify("member", roster_id, member_id)

    def read_sessions(self, roster_id: str) -> dict[str, Session]:
        key = roster_key(roster_id)
        with self._database.connect() as connection:
            session_rows = connection.execute(
                "SELECT id, date, slot, updated_at FROM sessions WHERE roster_id = ?",
                (key,),
            ).fetchall()
            presence_rows = connection.execute(
                "SELECT session_id, member_id FROM session_presence WHERE roster_id = ?",
                (key,),
            ).fetchall()

        presence: dict[str, set[str]] = defaultdict(set)
        for row in presence_rows:
            presence[row["session_id"]].add(row["member_id"])

        return {
            row["id"]: Session(
                date=row["date"],
                slot=row["slot"],
                present_ids=frozenset(presence.get(row["id"], ())),
                updated_at=datetime.fromisoformat(row["updated_at"]),
            )
            for row in session_rows
        }

    def write_session(self, roster_id: str, session: Session) -> None:
        key = roster_key(roster_id)
        with self._database.connect() as connection:
            connection.execute(
                """
                INSERT INTO sessions (roster_id, id, date, slot, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(roster_id, id) DO UPDATE SET
                    updated_at = excluded.updated_at
                """,
                (key, session.id, session.date, session.slot, session.updated_at.isoformat()),
            )
            connection.execute(
                "DELETE FROM session_presence WHERE roster_id = ? AND session_id = ?",
                (key, session.id),
            )
            connection.executemany(
                "INSERT INTO session_presence (roster_id, session_id, member_id) VALUES (?, ?, ?)",
                [(key, session.id, member_id) for member_id in sorted(session.present_ids)],
            )
        self._registry.notify("session", roster_id, session.id)

    def subscribe(self, roster_id: str, listener: ChangeListener) -> Unsubscribe:
        return self._registry.subscribe(roster_id, listener)
