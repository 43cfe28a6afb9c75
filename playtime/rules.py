from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_validator

from .models import ConfigError, Recording

logger = logging.getLogger(__name__)


class MatchRule(BaseModel):
    """Matches recordings on any subset of artist, release and track name.

    Absent fields match everything; present fields must be exactly equal.
    """

    model_config = ConfigDict(frozen=True)

    artist_name: Optional[str] = None
    release_name: Optional[str] = None
    track_name: Optional[str] = None

    def matches(self, recording: Recording) -> bool:
        if self.artist_name is not None and self.artist_name != recording.artist_name:
            return False
        if self.release_name is not None and self.release_name != recording.release_name:
            return False
        if self.track_name is not None and self.track_name != recording.track_name:
            return False
        return True


class RemapRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_with: MatchRule
    recording_mbid: Optional[str] = None

    @field_validator("recording_mbid")
    @classmethod
    def _blank_is_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    def matches(self, recording: Recording) -> bool:
        return self.match_with.matches(recording)


SkipRule = MatchRule

_SKIP_LIST = TypeAdapter(list[MatchRule])
_REMAP_LIST = TypeAdapter(list[RemapRule])


@dataclass(frozen=True)
class OverrideRules:
    skip: tuple[MatchRule, ...] = ()
    remap: tuple[RemapRule, ...] = ()

    @classmethod
    def load(cls, skip_path: Path, remap_path: Path) -> "OverrideRules":
        skip = tuple(_validate(_SKIP_LIST, skip_path))
        remap = tuple(_validate(_REMAP_LIST, remap_path))
        logger.info(
            "Loaded %d skip rule(s) from %s and %d remap rule(s) from %s",
            len(skip),
            skip_path,
            len(remap),
            remap_path,
        )
        return cls(skip=skip, remap=remap)


def _validate(adapter: TypeAdapter, path: Path) -> list:
    try:
        return adapter.validate_python(_read_rule_file(path))
    except ValidationError as exc:
        raise ConfigError(f"invalid rules in {path}: {exc}") from exc


def _read_rule_file(path: Path) -> list:
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigError(f"cannot read override file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"malformed override file {path}: {exc}") from exc
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"override file {path} must contain a list, got {type(raw).__name__}")
    return raw
