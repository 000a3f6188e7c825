"""
Fold per-guess feedback into the running clue summary shown above the guess list.
Ranges only narrow and found sets only grow.
"""
from __future__ import annotations

from .models import EXACT, LONGER, NEWER, OLDER, SHORTER, GlobalClues, GuessFeedback, NameMatch, Range

# "older"/"shorter": the guess was below the target, so the target is at least this value
_RAISE_MIN = {OLDER, SHORTER}
_LOWER_MAX = {NEWER, LONGER}


def update_range(current: Range, value: int, diff: str) -> Range:
    if not value:
        return current
    if diff == EXACT:
        return Range(min=value, max=value)
    if diff in _RAISE_MIN:
        new_min = value if current.min is None else max(current.min, value)
        return Range(min=new_min, max=current.max)
    if diff in _LOWER_MAX:
        new_max = value if current.max is None else min(current.max, value)
        return Range(min=current.min, max=new_max)
    return current


def _add_names(found: tuple[str, ...], entries: tuple[NameMatch, ...]) -> tuple[str, ...]:
    """Append matched names not already present (case-insensitive, first casing wins)."""
    seen = {n.lower() for n in found}
    out = list(found)
    for entry in entries:
        if not entry.match or not entry.name:
            continue
        key = entry.name.lower()
        if key not in seen:
            seen.add(key)
            out.append(entry.name)
    return tuple(out)


def merge_clues(clues: GlobalClues, feedback: GuessFeedback) -> GlobalClues:
    """Return a new GlobalClues with `feedback` folded in. `clues` is left untouched."""
    found_language = clues.found_language
    if found_language is None and feedback.language.match and feedback.language.code:
        found_language = feedback.language.code.upper()

    found_cast = list(clues.found_cast)
    for member in feedback.cast:
        if member.match and member.id and member.id not in found_cast:
            found_cast.append(member.id)

    return GlobalClues(
        year_range=update_range(clues.year_range, feedback.year.value, feedback.year.diff),
        duration_range=update_range(clues.duration_range, feedback.runtime.value, feedback.runtime.diff),
        found_genres=_add_names(clues.found_genres, feedback.genres),
        found_cast=tuple(found_cast),
        found_language=found_language,
        found_companies=_add_names(clues.found_companies, feedback.production_companies),
        found_countries=_add_names(clues.found_countries, feedback.production_countries),
    )
