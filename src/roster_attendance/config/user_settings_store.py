from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = os.getenv("APP_NAME", "Roster Attendance")
DOCUMENTS_PATH = Path(os.path.expanduser("~")) / "Documents"
DEFAULT_POINTER_DIR = DOCUMENTS_PATH / DEFAULT_APP_NAME
DEFAULT_SETTINGS_FILENAME = "user_settings.json"


def _default_pointer_dir() -> Path:
	override = os.getenv("APP_SETTINGS_DIR")
	return Path(override).expanduser() if override else DEFAULT_POINTER_DIR


DEFAULT_SETTINGS: Dict[str, Any] = {
	"checkin_base_url": "",
	"default_slot": "오전",
	"app_data_dir": str(DEFAULT_POINTER_DIR),
}


@dataclass
class UserSettingsStore:
	"""Load and persist user-editable preferences in a JSON file.

	A pointer file in ``pointer_dir`` records where the data directory lives;
	the data directory holds its own copy, which wins on conflicts.
	"""

	pointer_dir: Path = field(default_factory=_default_pointer_dir)
	settings_filename: str = DEFAULT_SETTINGS_FILENAME
	_data: Dict[str, Any] = field(init=False, default_factory=dict)
	app_data_dir: Path = field(init=False)
	settings_file: Path = field(init=False)

	def __post_init__(self) -> None:
		self.pointer_dir = Path(self.pointer_dir).expanduser()
		self.pointer_dir.mkdir(parents=True, exist_ok=True)
		self.reload()

	# ------------------------------------------------------------------
	# Public API
	# ------------------------------------------------------------------
	@property
	def data(self) -> Dict[str, Any]:
		return dict(self._data)

	def get(self, key: str, default: Any = None) -> Any:
		return self._data.get(key, default)

	def reload(self) -> None:
		pointer_path = self.pointer_dir / self.settings_filename
		pointer_data = self._load_json(pointer_path)

		app_data_raw = pointer_data.get("app_data_dir") or str(self.pointer_dir)
		self.app_data_dir = Path(app_data_raw).expanduser()
		self.app_data_dir.mkdir(parents=True, exist_ok=True)

		self.settings_file = self.app_data_dir / self.settings_filename
		file_data = self._load_json(self.settings_file) if self.settings_file != pointer_path else {}

		combined = dict(DEFAULT_SETTINGS)
		combined.update(pointer_data)
		combined.update(file_data)

		base_url = combined.get("checkin_base_url")
		combined["checkin_base_url"] = str(base_url).strip() if base_url else ""

		combined["app_data_dir"] = str(self.app_data_dir)
		self._data = combined

	def update(self, **kwargs: Any) -> Dict[str, Any]:
		new_data = dict(self._data)
		app_data_dir_changed = False

		if "app_data_dir" in kwargs and kwargs["app_data_dir"]:
			new_dir = Path(kwargs.pop("app_data_dir")).expanduser()
			if new_dir != self.app_data_dir:
				app_data_dir_changed = True
				new_data["app_data_dir"] = str(new_dir)
			else:
				new_data["app_data_dir"] = str(self.app_data_dir)

		for key, value in kwargs.items():
			if key in DEFAULT_SETTINGS:
				new_data[key] = value
			else:
				logger.warning("Ignoring unknown user setting %r", key)

		self._data = new_data

		if app_data_dir_changed:
			self.app_data_dir = Path(self._data["app_data_dir"]).expanduser()
			self.app_data_dir.mkdir(parents=True, exist_ok=True)
			self.settings_file = self.app_data_dir / self.settings_filename

		self._persist()
		return dict(self._data)

	# ------------------------------------------------------------------
	# Internal helpers
	# ------------------------------------------------------------------
	def _persist(self) -> None:
		pointer_path = self.pointer_dir / self.settings_filename

		with pointer_path.open("w", encoding="utf-8") as handle:
			json.dump(self._data, handle, indent=2, ensure_ascii=False)

		if self.settings_file != pointer_path:
			with self.settings_file.open("w", encoding="utf-8") as handle:
				json.dump(self._data, handle, indent=2, ensure_ascii=False)

	@staticmethod
	def _load_json(path: Path) -> Dict[str, Any]:
		if not path.exists():
			return {}
		try:
			with path.open("r", encoding="utf-8") as handle:
				loaded = json.load(handle)
		except (OSError, ValueError) as exc:
			logger.warning("Could not read settings file %s: %s", path, exc)
			return {}
		return loaded if isinstance(loaded, dict) else {}
