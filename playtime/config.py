from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import ConfigError


class ListenBrainzSettings(BaseModel):
    user: str
    range: str = "this_year"
    base_url: str = "https://api.listenbrainz.org/1"
    page_size: int = Field(default=100, gt=0, le=100)
    useragent: str = "playtime/0.1 (unknown@example.com)"

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class MusicBrainzSettings(BaseModel):
    base_url: str = "https://musicbrainz.org/ws/2"
    useragent: str = "playtime/0.1 (unknown@example.com)"
    min_request_interval_seconds: float = Field(default=1.0, ge=0.0)
    retry_statuses: List[int] = Field(default_factory=lambda: [503])

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class CacheSettings(BaseModel):
    backend: Literal["sqlite", "directory"] = "sqlite"
    path: Path = Field(default=Path("./cache/playtime.sqlite3"), validate_default=True)

    @field_validator("path", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()


class OverrideSettings(BaseModel):
    skip_path: Path = Field(default=Path("skip.json"), validate_default=True)
    remap_path: Path = Field(default=Path("bad_data.json"), validate_default=True)

    @field_validator("skip_path", "remap_path", mode="before")
    @classmethod
    def _expand_paths(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()


class Settings(BaseModel):
    listenbrainz: ListenBrainzSettings
    musicbrainz: MusicBrainzSettings = Field(default_factory=MusicBrainzSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    overrides: OverrideSettings = Field(default_factory=OverrideSettings)
    timeout_seconds: float = Field(default=10.0, gt=0.0)

    @classmethod
    def load(cls, path: Path) -> "Settings":
        try:
            with path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh)
        except OSError as exc:
            raise ConfigError(f"cannot read config {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
        try:
            return cls.model_validate(raw or {})
        except ValidationError as exc:
            raise ConfigError(f"invalid config {path}: {exc}") from exc


def find_config(explicit_path: Optional[Path]) -> Path:
    if explicit_path:
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    raise ConfigError("Could not find config.yaml - pass --config explicitly.")
