"""
Records shared by the engine: movies, per-guess feedback, global clues and session snapshots.
Every record has a fixed shape and converts to/from plain dicts for JSON storage.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field

from .errors import CorruptSnapshot

PLAYING = "playing"
WON = "won"
LOST = "lost"
GAME_STATES = (PLAYING, WON, LOST)

DAILY = "daily"
RANDOM = "random"
GAME_MODES = (DAILY, RANDOM)

EXACT = "exact"
OLDER = "older"
NEWER = "newer"
SHORTER = "shorter"
LONGER = "longer"

DIRECTOR_ROLE = "director"
YEAR_DIFFS = (EXACT, OLDER, NEWER)
RUNTIME_DIFFS = (EXACT, SHORTER, LONGER)


# Stored snapshots come back from disk or a database, so clue fields are type-checked on load.
# A ValueError here surfaces as CorruptSnapshot from SessionSnapshot.from_json.


def _optional_int(value, what: str) -> int | None:
    if value is None or (isinstance(value, int) and not isinstance(value, bool)):
        return value
    raise ValueError(f"{what} must be an integer or null, got {value!r}")


def _entries(values, kind: type, what: str) -> tuple:
    if values is None:
        return ()
    if not isinstance(values, list):
        raise ValueError(f"{what} must be a list, got {values!r}")
    for v in values:
        if not isinstance(v, kind) or isinstance(v, bool):
            raise ValueError(f"{what} entries must be {kind.__name__}, got {v!r}")
    return tuple(values)


@dataclass(frozen=True)
class CastMember:
    id: int
    name: str
    order: int = 0  # billing order, 0 = top billed
    profile_path: str | None = None

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "order": self.order, "profile_path": self.profile_path}

    @classmethod
    def from_dict(cls, data: dict) -> CastMember:
        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            order=int(data.get("order") or 0),
            profile_path=data.get("profile_path"),
        )


@dataclass(frozen=True)
class MovieRecord:
    id: int
    title: str
    release_date: str | None = None  # "YYYY-MM-DD"
    runtime: int | None = None  # minutes
    original_language: str = ""
    genres: tuple[str, ...] = ()
    cast: tuple[CastMember, ...] = ()
    director: str | None = None
    director_id: int | None = None
    director_profile_path: str | None = None
    production_companies: tuple[str, ...] = ()
    production_countries: tuple[str, ...] = ()
    poster_path: str | None = None

    @property
    def year(self) -> int | None:
        """Release year, or None when the date is missing or malformed."""
        if not self.release_date or len(self.release_date) < 4:
            return None
        try:
            return int(self.release_date[:4])
        except ValueError:
            return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "release_date": self.release_date,
            "runtime": self.runtime,
            "original_language": self.original_language,
            "genres": list(self.genres),
            "cast": [c.to_dict() for c in self.cast],
            "director": self.director,
            "director_id": self.director_id,
            "director_profile_path": self.director_profile_path,
            "production_companies": list(self.production_companies),
            "production_countries": list(self.production_countries),
            "poster_path": self.poster_path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> MovieRecord:
        runtime = data.get("runtime")
        director_id = data.get("director_id")
        return cls(
            id=int(data["id"]),
            title=data.get("title") or "",
            release_date=data.get("release_date") or None,
            runtime=int(runtime) if runtime is not None else None,
            original_language=data.get("original_language") or "",
            genres=tuple(data.get("genres") or ()),
            cast=tuple(CastMember.from_dict(c) for c in data.get("cast") or ()),
            director=data.get("director") or None,
            director_id=int(director_id) if director_id is not None else None,
            director_profile_path=data.get("director_profile_path"),
            production_companies=tuple(data.get("production_companies") or ()),
            production_countries=tuple(data.get("production_countries") or ()),
            poster_path=data.get("poster_path"),
        )


# --- Feedback ---


@dataclass(frozen=True)
class RangeFeedback:
    value: int  # the guess's own year/runtime, 0 when unknown
    diff: str  # exact | older | newer  (year)  or  exact | shorter | longer  (runtime)

    def to_dict(self) -> dict:
        return {"value": self.value, "diff": self.diff}

    @classmethod
    def from_dict(cls, data: dict) -> RangeFeedback:
        diff = data["diff"]
        if diff not in YEAR_DIFFS + RUNTIME_DIFFS:
            raise ValueError(f"unknown diff {diff!r}")
        return cls(value=_optional_int(data.get("value"), "feedback value") or 0, diff=diff)


@dataclass(frozen=True)
class DirectorFeedback:
    match: bool

    def to_dict(self) -> dict:
        return {"match": self.match}

    @classmethod
    def from_dict(cls, data: dict) -> DirectorFeedback:
        return cls(match=bool(data.get("match")))


@dataclass(frozen=True)
class LanguageFeedback:
    code: str
    match: bool

    def to_dict(self) -> dict:
        return {"code": self.code, "match": self.match}

    @classmethod
    def from_dict(cls, data: dict) -> LanguageFeedback:
        return cls(code=data.get("code") or "", match=bool(data.get("match")))


@dataclass(frozen=True)
class NameMatch:
    name: str
    match: bool

    def to_dict(self) -> dict:
        return {"name": self.name, "match": self.match}

    @classmethod
    def from_dict(cls, data: dict) -> NameMatch:
        return cls(name=data.get("name") or "", match=bool(data.get("match")))


@dataclass(frozen=True)
class CastFeedback:
    id: int
    name: str
    photo: str  # full image URL, "" when the person has no picture
    match: bool
    role: str | None = None  # "director" for the director entry

    def to_dict(self) -> dict:
        out = {"id": self.id, "name": self.name, "photo": self.photo, "match": self.match}
        if self.role:
            out["role"] = self.role
        return out

    @classmethod
    def from_dict(cls, data: dict) -> CastFeedback:
        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            photo=data.get("photo") or "",
            match=bool(data.get("match")),
            role=data.get("role"),
        )


@dataclass(frozen=True)
class GuessFeedback:
    year: RangeFeedback
    runtime: RangeFeedback
    director: DirectorFeedback
    language: LanguageFeedback
    genres: tuple[NameMatch, ...]
    cast: tuple[CastFeedback, ...]
    production_companies: tuple[NameMatch, ...]
    production_countries: tuple[NameMatch, ...]

    def to_dict(self) -> dict:
        return {
            "year": self.year.to_dict(),
            "runtime": self.runtime.to_dict(),
            "director": self.director.to_dict(),
            "language": self.language.to_dict(),
            "genres": [g.to_dict() for g in self.genres],
            "cast": [c.to_dict() for c in self.cast],
            "productionCompanies": [c.to_dict() for c in self.production_companies],
            "productionCountries": [c.to_dict() for c in self.production_countries],
        }

    @classmethod
    def from_dict(cls, data: dict) -> GuessFeedback:
        return cls(
            year=RangeFeedback.from_dict(data["year"]),
            runtime=RangeFeedback.from_dict(data["runtime"]),
            director=DirectorFeedback.from_dict(data["director"]),
            language=LanguageFeedback.from_dict(data["language"]),
            genres=tuple(NameMatch.from_dict(g) for g in data.get("genres") or ()),
            cast=tuple(CastFeedback.from_dict(c) for c in data.get("cast") or ()),
            production_companies=tuple(NameMatch.from_dict(c) for c in data.get("productionCompanies") or ()),
            production_countries=tuple(NameMatch.from_dict(c) for c in data.get("productionCountries") or ()),
        )


@dataclass(frozen=True)
class GuessHistoryEntry:
    movie: MovieRecord
    feedback: GuessFeedback

    def to_dict(self) -> dict:
        return {"movie": self.movie.to_dict(), "feedback": self.feedback.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> GuessHistoryEntry:
        return cls(movie=MovieRecord.from_dict(data["movie"]), feedback=GuessFeedback.from_dict(data["feedback"]))


# --- Clues ---


@dataclass(frozen=True)
class Range:
    min: int | None = None
    max: int | None = None

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max}

    @classmethod
    def from_dict(cls, data: dict | None) -> Range:
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError(f"range must be an object, got {data!r}")
        lo = _optional_int(data.get("min"), "range min")
        hi = _optional_int(data.get("max"), "range max")
        if lo is not None and hi is not None and lo > hi:
            raise ValueError(f"empty range {lo}..{hi}")
        return cls(min=lo, max=hi)


@dataclass(frozen=True)
class GlobalClues:
    year_range: Range = field(default_factory=Range)
    duration_range: Range = field(default_factory=Range)
    found_genres: tuple[str, ...] = ()
    found_cast: tuple[int, ...] = ()
    found_language: str | None = None
    found_companies: tuple[str, ...] = ()
    found_countries: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "yearRange": self.year_range.to_dict(),
            "durationRange": self.duration_range.to_dict(),
            "foundGenres": list(self.found_genres),
            "foundCast": list(self.found_cast),
            "foundLanguage": self.found_language,
            "foundCompanies": list(self.found_companies),
            "foundCountries": list(self.found_countries),
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> GlobalClues:
        data = data or {}
        found_language = data.get("foundLanguage")
        if found_language is not None and not isinstance(found_language, str):
            raise ValueError(f"foundLanguage must be a string, got {found_language!r}")
        return cls(
            year_range=Range.from_dict(data.get("yearRange")),
            duration_range=Range.from_dict(data.get("durationRange")),
            found_genres=_entries(data.get("foundGenres"), str, "foundGenres"),
            found_cast=_entries(data.get("foundCast"), int, "foundCast"),
            found_language=found_language or None,
            found_companies=_entries(data.get("foundCompanies"), str, "foundCompanies"),
            found_countries=_entries(data.get("foundCountries"), str, "foundCountries"),
        )


EMPTY_CLUES = GlobalClues()


# --- Persistence ---


@dataclass(frozen=True)
class SessionSnapshot:
    """What gets written to the store after every mutation of a session."""

    date: str
    guesses: tuple[GuessHistoryEntry, ...]
    state: str
    global_clues: GlobalClues
    mystery_id: int | None = None
    mode: str = DAILY

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "guesses": [g.to_dict() for g in self.guesses],
            "gameState": self.state,
            "globalClues": self.global_clues.to_dict(),
            "mysteryId": self.mystery_id,
            "mode": self.mode,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> SessionSnapshot:
        state = data.get("gameState") or PLAYING
        if state not in GAME_STATES:
            raise ValueError(f"unknown game state {state!r}")
        mystery_id = data.get("mysteryId")
        return cls(
            date=str(data["date"]),
            guesses=tuple(GuessHistoryEntry.from_dict(g) for g in data.get("guesses") or ()),
            state=state,
            global_clues=GlobalClues.from_dict(data.get("globalClues")),
            mystery_id=int(mystery_id) if mystery_id is not None else None,
            mode=data.get("mode") or DAILY,
        )

    @classmethod
    def from_json(cls, text: str) -> SessionSnapshot:
        """Parse stored text. Raises CorruptSnapshot on anything unreadable."""
        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ValueError("snapshot is not an object")
            return cls.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CorruptSnapshot(str(e)) from e
