from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# QTimer takes the interval as a C int of milliseconds.
MAX_REFRESH_INTERVAL_S = (2**31 - 1) // 1000


@dataclass(frozen=True)
class ConfigPaths:
    path: Path


@dataclass(frozen=True)
class VolumeSettings:
    refresh_interval_s: int = 30
    usage_warn_percent: int = 90
    ignored_fstypes: list[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "VolumeSettings":
        section = cfg.get("volumes")
        if not isinstance(section, dict):
            return cls()

        defaults = cls()
        fstypes_obj = section.get("ignored_fstypes")
        fstypes = [str(x) for x in fstypes_obj] if isinstance(fstypes_obj, list) else []
        return cls(
            refresh_interval_s=min(
                MAX_REFRESH_INTERVAL_S,
                max(1, _as_int(section.get("refresh_interval_s"), defaults.refresh_interval_s)),
            ),
            usage_warn_percent=_as_int(section.get("usage_warn_percent"), defaults.usage_warn_percent),
            ignored_fstypes=fstypes,
        )

    def to_config(self) -> dict[str, Any]:
        return {
            "refresh_interval_s": self.refresh_interval_s,
            "usage_warn_percent": self.usage_warn_percent,
            "ignored_fstypes": list(self.ignored_fstypes),
        }


def _as_int(value: object, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return default


class ConfigService:
    def __init__(self, paths: ConfigPaths | None = None) -> None:
        self.paths = paths or ConfigPaths(path=self.default_path())

    @staticmethod
    def default_path() -> Path:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        if xdg:
            base = Path(xdg)
        else:
            base = Path.home() / ".config"
        return base / "disk_info" / "config.json"

    def load(self) -> dict[str, Any]:
        p = self.paths.path
        if not p.exists():
            return {}
        try:
            with open(p, "r", encoding="utf-8") as f:
                obj = json.load(f)
            return obj if isinstance(obj, dict) else {}
        except Exception:
            return {}

    def save(self, cfg: dict[str, Any]) -> None:
        p = self.paths.path
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(cfg, f, ensure_ascii=False, indent=2, sort_keys=True)
        tmp.replace(p)

    def load_volume_settings(self) -> VolumeSettings:
        return VolumeSettings.from_config(self.load())

    def save_volume_settings(self, settings: VolumeSettings) -> None:
        cfg = self.load()
        section = cfg.get("volumes")
        merged = dict(section) if isinstance(section, dict) else {}
        merged.update(settings.to_config())
        cfg["volumes"] = merged
        self.save(cfg)
