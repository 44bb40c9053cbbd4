from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from roster_attendance.config.user_settings_store import DEFAULT_APP_NAME, UserSettingsStore
from roster_attendance.models import TIME_SLOTS, WeeklySchedule
from roster_attendance.services.share_links import DEFAULT_QR_SERVICE_URL, DEFAULT_QR_SIZE

BASE_DIR = Path(__file__).resolve().parents[3]
ENV_PATH = BASE_DIR / ".env"


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_data_dir: Path
    database_path: Path
    checkin_base_url: str
    default_slot: str
    qr_service_url: str
    qr_image_size: int
    qr_timeout_seconds: float
    weekly_schedule: WeeklySchedule
    log_level: str

    def __print__(self) -> str:
        return (
            f"Settings(app_name={self.app_name}, "
            f"database_path={self.database_path}, "
            f"checkin_base_url={self.checkin_base_url or '-'}, "
            f"default_slot={self.default_slot}, "
            f"qr_service_url={self.qr_service_url}, "
            f"log_level={self.log_level})"
        )


def load_settings(
    env_file: Optional[str | Path] = None,
    *,
    user_settings_store: Optional[UserSettingsStore] = None,
) -> Settings:
    """Build settings from the environment, a ``.env`` file and the user store.

    Environment variables win over stored user preferences.
    """

    load_dotenv(env_file or ENV_PATH)
    store = user_settings_store or UserSettingsStore()

    app_data_dir = Path(store.get("app_data_dir") or store.app_data_dir).expanduser()
    app_data_dir.mkdir(parents=True, exist_ok=True)

    default_slot = os.getenv("DEFAULT_SLOT") or store.get("default_slot") or TIME_SLOTS[0]
    if default_slot not in TIME_SLOTS:
        default_slot = TIME_SLOTS[0]

    return Settings(
        app_name=os.getenv("APP_NAME", DEFAULT_APP_NAME),
        app_data_dir=app_data_dir,
        database_path=Path(os.getenv("DATABASE_PATH", str(app_data_dir / "attendance.db"))).expanduser(),
        checkin_base_url=(os.getenv("CHECKIN_BASE_URL") or store.get("checkin_base_url") or "").strip(),
        default_slot=default_slot,
        qr_service_url=os.getenv("QR_SERVICE_URL", DEFAULT_QR_SERVICE_URL),
        qr_image_size=int(os.getenv("QR_IMAGE_SIZE", str(DEFAULT_QR_SIZE))),
        qr_timeout_seconds=float(os.getenv("QR_TIMEOUT_SECONDS", "10")),
        weekly_schedule=WeeklySchedule.parse(os.getenv("WEEKLY_SCHEDULE")),
        log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
    )
