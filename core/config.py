from __future__ import annotations
import json
from pathlib import Path


_DEFAULTS = {
    "strict_voice_selection": False,
    "default_mod_depth": 50,
    "default_mod_mode": "LFO",
    "log_echo": True,
}

class AppConfig:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "baeng" / "config.json"
        self.strict_voice_selection: bool = _DEFAULTS["strict_voice_selection"]
        self.default_mod_depth: int = _DEFAULTS["default_mod_depth"]
        self.default_mod_mode: str = _DEFAULTS["default_mod_mode"]
        self.log_echo: bool = _DEFAULTS["log_echo"]
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text())
            for key in _DEFAULTS:
                if key in data:
                    setattr(self, key, data[key])
        except (json.JSONDecodeError, OSError):
            pass

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {key: getattr(self, key) for key in _DEFAULTS}
        self._path.write_text(json.dumps(data, indent=2))
