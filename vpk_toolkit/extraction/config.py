"""Extraction settings: which econ image folders to pull and where things live."""

import json
import os
import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

ECON_PATH = "panorama/images/econ"

# Category name -> archive directory, in extraction order
CATEGORY_PATHS: Dict[str, str] = {
    "stickers": f"{ECON_PATH}/stickers",
    "patches": f"{ECON_PATH}/patches",
    "graffiti": f"{ECON_PATH}/stickers/default",
    "characters": f"{ECON_PATH}/characters",
    "music_kits": f"{ECON_PATH}/music_kits",
    "cases": f"{ECON_PATH}/weapon_cases",
    "tools": f"{ECON_PATH}/tools",
    "status_icons": f"{ECON_PATH}/status_icons",
    "weapons": f"{ECON_PATH}/default_generated",
    "other_weapons": f"{ECON_PATH}/weapons",
    "season_icons": f"{ECON_PATH}/season_icons",
    "premier_seasons": f"{ECON_PATH}/premier_seasons",
    "tournaments": f"{ECON_PATH}/tournaments",
    "set_icons": f"{ECON_PATH}/set_icons",
}

# Always extracted alongside the selected categories
METADATA_FILES: Dict[str, str] = {
    "items_game": "scripts/items/items_game.txt",
    "csgo_english": "resource/csgo_english.txt",
}

DEFAULT_ARCHIVE = "game/csgo/pak01_dir.vpk"
DEFAULT_DECOMPILER = "Source2Viewer-CLI"
DEFAULT_TIMEOUT = 600.0


def _all_categories() -> Dict[str, bool]:
    return {name: True for name in CATEGORY_PATHS}


@dataclass
class ExtractorConfig:
    """Settings for one extraction run.

    Paths relative to ``directory`` are resolved against it; ``directory``
    doubles as the output directory, matching where Source2Viewer writes.
    """

    directory: Path = Path("data")
    categories: Dict[str, bool] = field(default_factory=_all_categories)
    log_level: str = "info"
    archive: str = DEFAULT_ARCHIVE
    decompiler: str = DEFAULT_DECOMPILER
    decompiler_path: Optional[Path] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT
    workers: Optional[int] = None

    def __post_init__(self):
        self.directory = Path(self.directory)
        if self.decompiler_path is not None:
            self.decompiler_path = Path(self.decompiler_path)

        unknown = set(self.categories) - set(CATEGORY_PATHS)
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(sorted(unknown))}")
        # Categories left out of a partial mapping stay enabled
        self.categories = {**_all_categories(), **self.categories}

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"Workers must be at least 1, got {self.workers}")

    @property
    def archive_path(self) -> Path:
        return self.directory / self.archive

    @property
    def output_dir(self) -> Path:
        return self.directory

    @property
    def executable_path(self) -> Path:
        """Decompiler location: explicit path, else ``<directory>/<decompiler>``."""
        if self.decompiler_path is not None:
            return self.decompiler_path
        name = self.decompiler
        if sys.platform == "win32" and not name.lower().endswith(".exe"):
            name += ".exe"
        return self.directory / name

    @property
    def max_workers(self) -> int:
        return self.workers or os.cpu_count() or 1

    @property
    def enabled_categories(self) -> List[str]:
        return [name for name in CATEGORY_PATHS if self.categories[name]]

    def requested_paths(self) -> List[str]:
        """Archive paths to extract: enabled category folders, then the metadata files."""
        paths = [CATEGORY_PATHS[name] for name in self.enabled_categories]
        paths.extend(METADATA_FILES.values())
        return paths

    def only(self, names: Iterable[str]) -> "ExtractorConfig":
        """Copy with just the named categories enabled."""
        categories = {name: False for name in CATEGORY_PATHS}
        categories.update({name: True for name in names})
        return replace(self, categories=categories)

    def without(self, names: Iterable[str]) -> "ExtractorConfig":
        """Copy with the named categories disabled."""
        categories = dict(self.categories)
        categories.update({name: False for name in names})
        return replace(self, categories=categories)

    @classmethod
    def from_json(cls, path: Union[str, Path], **overrides) -> "ExtractorConfig":
        """Load settings from a JSON object; keyword overrides win over the file."""
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"Config file must contain a JSON object: {path}")

        known = {f.name for f in fields(cls)}
        unknown = set(raw) - known
        if unknown:
            raise ValueError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")

        raw.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**raw)
