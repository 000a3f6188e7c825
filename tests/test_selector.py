import random
from datetime import datetime

import pytest

from mystery_movie.errors import EmptyCatalog
from mystery_movie.selector import local_date_string, new_seed, select_daily, select_random

CATALOG = list(range(1000, 1050))


def test_daily_is_repeatable():
    first = select_daily("2024-05-01", CATALOG)
    for _ in range(5):
        assert select_daily("2024-05-01", CATALOG) == first
    assert first in CATALOG


def test_daily_survives_catalog_refetch():
    assert select_daily("2024-05-01", list(CATALOG)) == select_daily("2024-05-01", tuple(CATALOG))


def test_daily_varies_across_dates():
    picks = {select_daily(f"2024-05-{day:02d}", CATALOG) for day in range(1, 31)}
    assert len(picks) > 1


def test_empty_catalog():
    with pytest.raises(EmptyCatalog):
        select_daily("2024-05-01", [])
    with pytest.raises(EmptyCatalog):
        select_random([])


def test_random_pick_is_in_catalog():
    for _ in range(20):
        assert select_random(CATALOG) in CATALOG


def test_seeded_random_is_reproducible():
    assert select_random(CATALOG, random.Random("abc")) == select_random(CATALOG, random.Random("abc"))


def test_local_date_string():
    assert local_date_string(datetime(2024, 2, 9, 23, 59)) == "2024-02-09"


def test_new_seed_is_fresh():
    assert new_seed() != new_seed()
