"""
Error kinds raised by the game engine and its collaborators.
Only EmptyCatalog is meant to reach the caller; the others are absorbed at the boundary.
"""
from __future__ import annotations


class MysteryMovieError(Exception):
    """Base class for every error raised by this package."""


class EmptyCatalog(MysteryMovieError):
    """The candidate bank has no ids, so no mystery movie can be picked."""


class LookupFailed(MysteryMovieError):
    """Fetching or parsing a movie record from the catalog failed."""

    def __init__(self, movie_id: int, reason: str = "") -> None:
        self.movie_id = movie_id
        self.reason = reason
        msg = f"Lookup failed for movie {movie_id}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CorruptSnapshot(MysteryMovieError):
    """A stored session snapshot could not be parsed."""
