"""
Compare a guessed movie with the mystery movie and build the per-field feedback.
Pure functions: the result depends only on the two records.
"""
from __future__ import annotations

from .models import (
    DIRECTOR_ROLE,
    EXACT,
    LONGER,
    NEWER,
    OLDER,
    SHORTER,
    CastFeedback,
    DirectorFeedback,
    GuessFeedback,
    GuessHistoryEntry,
    LanguageFeedback,
    MovieRecord,
    NameMatch,
    RangeFeedback,
)

PROFILE_BASE_URL = "https://image.tmdb.org/t/p/w185"
# Only the top-billed part of the guess's cast is compared (and shown)
MAX_CAST_COMPARED = 10


def profile_url(path: str | None) -> str:
    if not path:
        return ""
    return PROFILE_BASE_URL + path


def _compare(guess_value: int, target_value: int, below: str, above: str) -> str:
    if guess_value == target_value:
        return EXACT
    return below if guess_value < target_value else above


def _director_match(target: MovieRecord, guess: MovieRecord) -> bool:
    # Two unknown directors are not a match
    return bool(guess.director) and guess.director == target.director


def _name_matches(names: tuple[str, ...], target_names: tuple[str, ...]) -> tuple[NameMatch, ...]:
    wanted = set(target_names)
    return tuple(NameMatch(name=n, match=n in wanted) for n in names)


def _cast_feedback(target: MovieRecord, guess: MovieRecord) -> tuple[CastFeedback, ...]:
    target_ids = {c.id for c in target.cast}
    billed = sorted(guess.cast, key=lambda c: c.order)[:MAX_CAST_COMPARED]
    out = [
        CastFeedback(
            id=member.id,
            name=member.name,
            photo=profile_url(member.profile_path),
            match=member.id in target_ids,
        )
        for member in billed
    ]
    if guess.director:
        out.append(
            CastFeedback(
                id=guess.director_id or 0,
                name=guess.director,
                photo=profile_url(guess.director_profile_path),
                match=_director_match(target, guess),
                role=DIRECTOR_ROLE,
            )
        )
    return tuple(out)


def evaluate(target: MovieRecord, guess: MovieRecord) -> GuessFeedback:
    """Structured diff of `guess` against `target`. Missing year/runtime count as 0."""
    guess_year = guess.year or 0
    target_year = target.year or 0
    guess_runtime = guess.runtime or 0
    target_runtime = target.runtime or 0

    language_code = guess.original_language or ""
    return GuessFeedback(
        year=RangeFeedback(value=guess_year, diff=_compare(guess_year, target_year, OLDER, NEWER)),
        runtime=RangeFeedback(value=guess_runtime, diff=_compare(guess_runtime, target_runtime, SHORTER, LONGER)),
        director=DirectorFeedback(match=_director_match(target, guess)),
        language=LanguageFeedback(
            code=language_code,
            match=bool(language_code) and language_code == target.original_language,
        ),
        genres=_name_matches(guess.genres, target.genres),
        cast=_cast_feedback(target, guess),
        production_companies=_name_matches(guess.production_companies, target.production_companies),
        production_countries=_name_matches(guess.production_countries, target.production_countries),
    )


def check_guess(target: MovieRecord, guess: MovieRecord) -> GuessHistoryEntry:
    """Evaluate and wrap as a history entry."""
    return GuessHistoryEntry(movie=guess, feedback=evaluate(target, guess))
