from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Callable, List, Optional
from skirmish.core.logging import logger

SETTINGS_FILENAME = ".skirmish_settings.json"
LOG_LEVELS = {"DEBUG","INFO","WARN","ERROR"}

@dataclass
class SettingsData:
    log_level: str = "INFO"                 # DEBUG / INFO / WARN / ERROR
    critical_hit_chance: float = 1/16
    high_crit_chance: float = 1/8           # moves flagged high_crit
    paralysis_skip_chance: float = 0.25
    freeze_thaw_chance: float = 0.20
    confusion_self_hit_chance: float = 1/3
    max_turns: int = 200                    # auto-run guard (CLI / run_auto)
    seed: Optional[int] = None

    def normalize(self):
        if str(self.log_level).upper() not in LOG_LEVELS:
            self.log_level = "INFO"
        self.log_level = str(self.log_level).upper()
        defaults = SettingsData.__dataclass_fields__
        for name in ("critical_hit_chance","high_crit_chance","paralysis_skip_chance",
                     "freeze_thaw_chance","confusion_self_hit_chance"):
            val = getattr(self, name)
            if not isinstance(val, (int, float)) or isinstance(val, bool) or not 0.0 <= val <= 1.0:
                setattr(self, name, defaults[name].default)
        if not isinstance(self.max_turns, int) or self.max_turns < 1:
            self.max_turns = 200
        if self.seed is not None and not isinstance(self.seed, int):
            self.seed = None

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path
        self._listeners: List[Callable[[SettingsData], None]] = []

    @classmethod
    def _resolve_path(cls) -> Path:
        home = Path(os.path.expanduser("~"))
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = path or cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                if not isinstance(raw, dict):
                    raise ValueError("settings root must be an object")
                # Backfill missing fields (migration safe)
                field_names = {f.name for f in fields(SettingsData)}
                data = SettingsData(**{k: v for k, v in raw.items() if k in field_names})
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except (OSError, ValueError, TypeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def apply_logging(self):
        logger.set_level(self.data.log_level)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2), encoding="utf-8")
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))
            raise
        self._notify()

    def on_change(self, fn: Callable[[SettingsData], None]):
        self._listeners.append(fn)

    def _notify(self):
        for fn in self._listeners:
            fn(self.data)

__all__ = ["SettingsData","Settings","SETTINGS_FILENAME"]
