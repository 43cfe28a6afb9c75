"""
Canonical identity resolution for listened recordings.

Decides which MusicBrainz recording id (if any) a ListenBrainz entry should be
looked up under. Skip rules win over everything; an id supplied by the history
service wins over remap rules; remap rules are scanned in file order and the
first match decides, even when its replacement id is missing.
"""

from __future__ import annotations

from typing import Sequence

from .models import Id, Recording, ResolvedIdentity, Skip, Unresolvable
from .rules import RemapRule, SkipRule


def resolve(
    recording: Recording,
    skip_rules: Sequence[SkipRule],
    remap_rules: Sequence[RemapRule],
) -> ResolvedIdentity:
    if any(rule.matches(recording) for rule in skip_rules):
        return Skip()
    if recording.recording_id:
        return Id(recording.recording_id)
    for rule in remap_rules:
        if rule.matches(recording):
            if rule.recording_mbid:
                return Id(rule.recording_mbid)
            return Unresolvable()
    return Unresolvable()
