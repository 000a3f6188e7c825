"""
Print today's mystery movie (answer key). Run: python -m mystery_movie.daily [YYYY-MM-DD]
"""
import logging
import sys

from .catalog import TmdbCatalog, fetch_or_degraded
from .config import load_settings
from .selector import local_date_string, select_daily


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = load_settings()
    date = sys.argv[1] if len(sys.argv) > 1 else local_date_string()
    catalog = TmdbCatalog(settings.tmdb_api_key, settings.movie_bank_path, language=settings.tmdb_language)
    ids = catalog.list_candidate_ids()
    movie_id = select_daily(date, ids)
    movie = fetch_or_degraded(catalog, movie_id)
    print(f"Mystery movie for {date} ({len(ids)} candidates):")
    print(f"  {movie.title or '?'} ({movie.year or '?'})  id={movie.id}")
    if movie.director:
        print(f"  Directed by {movie.director}")


if __name__ == "__main__":
    main()
