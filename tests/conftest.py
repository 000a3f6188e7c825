from __future__ import annotations

import pytest

from mystery_movie.catalog import StaticCatalog
from mystery_movie.models import CastMember, MovieRecord
from mystery_movie.storage import MemoryStore


def movie(
    movie_id: int = 1,
    *,
    title: str = "",
    year: int | None = 2010,
    runtime: int | None = 120,
    genres: tuple[str, ...] = ("Action",),
    director: str | None = "Jane Doe",
    cast: tuple[tuple[int, str], ...] = (),
    language: str = "en",
    companies: tuple[str, ...] = (),
    countries: tuple[str, ...] = (),
) -> MovieRecord:
    return MovieRecord(
        id=movie_id,
        title=title or f"Movie {movie_id}",
        release_date=f"{year}-01-01" if year else None,
        runtime=runtime,
        original_language=language,
        genres=genres,
        cast=tuple(CastMember(id=i, name=n, order=pos) for pos, (i, n) in enumerate(cast)),
        director=director,
        production_companies=companies,
        production_countries=countries,
    )


@pytest.fixture
def make_movie():
    return movie


@pytest.fixture
def movies() -> list[MovieRecord]:
    return [
        movie(
            i,
            year=1990 + i,
            runtime=90 + i * 5,
            genres=("Drama",) if i % 2 else ("Comedy",),
            director=f"Director {i}",
            cast=((100 + i, f"Actor {i}"), (200, "Shared Star")),
        )
        for i in range(1, 11)
    ]


@pytest.fixture
def catalog(movies) -> StaticCatalog:
    return StaticCatalog(movies)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
