from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime


TIME_SLOTS: tuple[str, ...] = ("오전", "오후", "저녁")
DEFAULT_MEMBER_GROUP = "정회원"


def generate_member_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=5))
    return f"m_{int(time.time() * 1000)}_{suffix}"


def session_key(date: str, slot: str) -> str:
    return f"{date}_{slot}"


@dataclass(slots=True)
class Member:
    id: str
    name: str
    group: str = DEFAULT_MEMBER_GROUP
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, name: str, *, group: str = DEFAULT_MEMBER_GROUP) -> "Member":
        return cls(id=generate_member_id(), name=name, group=group)


@dataclass(slots=True)
class Session:
    date: str
    slot: str
    present_ids: frozenset[str] = frozenset()
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def id(self) -> str:
        return session_key(self.date, self.slot)

