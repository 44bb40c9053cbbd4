from .settings import Settings, load_settings
from .user_settings_store import UserSettingsStore

__all__ = ["Settings", "UserSettingsStore", "load_settings"]
