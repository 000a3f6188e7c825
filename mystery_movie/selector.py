"""
Pick the mystery movie: one per calendar day for everybody, or a random one for replays.
"""
from __future__ import annotations

import random
import secrets
from collections.abc import Sequence
from datetime import datetime

from .errors import EmptyCatalog


def local_date_string(now: datetime | None = None) -> str:
    """Current local date as YYYY-MM-DD (the daily key)."""
    now = now or datetime.now()
    return now.strftime("%Y-%m-%d")


def select_daily(date: str, catalog: Sequence[int]) -> int:
    """Deterministic movie for a date. Same date + same catalog order -> same id."""
    if not catalog:
        raise EmptyCatalog("Cannot pick a daily movie from an empty catalog.")
    # str seeds are hashed with SHA-512, so the index does not depend on PYTHONHASHSEED
    rng = random.Random(date)
    return catalog[rng.randrange(len(catalog))]


def select_random(catalog: Sequence[int], rng: random.Random | None = None) -> int:
    """Uniform pick for replay sessions."""
    if not catalog:
        raise EmptyCatalog("Cannot pick a random movie from an empty catalog.")
    rng = rng or random.Random()
    return rng.choice(list(catalog))


def new_seed() -> str:
    return secrets.token_hex(8)
