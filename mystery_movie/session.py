"""
Game session: owns the mystery movie, the guess history, the global clues and the
playing -> won / lost state machine. Every mutation is written to the snapshot store.
"""
from __future__ import annotations

import logging
import random

from .catalog import MovieCatalogProvider, fetch_or_degraded
from .clues import merge_clues
from .errors import CorruptSnapshot
from .evaluate import check_guess
from .models import (
    DAILY,
    EMPTY_CLUES,
    GAME_MODES,
    LOST,
    PLAYING,
    RANDOM,
    WON,
    GlobalClues,
    GuessHistoryEntry,
    MovieRecord,
    SessionSnapshot,
)
from .selector import local_date_string, new_seed, select_daily, select_random
from .storage import SnapshotStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 6


def make_session_key(mode: str, date: str, seed: str | None = None) -> str:
    """"daily-<date>" or "random-<seed>"."""
    if mode == RANDOM:
        return f"{RANDOM}-{seed}"
    return f"{DAILY}-{date}"


class GameSession:
    """
    One player's game. Construction picks the mystery movie for `mode` and resumes a
    stored snapshot when it still applies (same day for daily games, same movie always).
    Callers must not mutate one session from several threads at once.
    """

    def __init__(
        self,
        catalog: MovieCatalogProvider,
        store: SnapshotStore,
        *,
        mode: str = DAILY,
        seed: str | None = None,
        today: str | None = None,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self._fixed_today = today
        self.mode = DAILY
        self.seed: str | None = None
        self.date = today or local_date_string()
        self.mystery_movie: MovieRecord | None = None
        self.guesses: list[GuessHistoryEntry] = []
        self.state = PLAYING
        self.global_clues: GlobalClues = EMPTY_CLUES
        self._open(mode, seed, resume=True)

    # --- properties ---

    @property
    def session_key(self) -> str:
        return make_session_key(self.mode, self.date, self.seed)

    @property
    def attempts(self) -> int:
        return len(self.guesses)

    @property
    def remaining_attempts(self) -> int:
        return MAX_ATTEMPTS - len(self.guesses)

    @property
    def is_over(self) -> bool:
        return self.state != PLAYING

    # --- lifecycle ---

    def start_new_session(self, mode: str = DAILY, seed: str | None = None) -> None:
        """Pick a new mystery movie and reset guesses, clues and state (nothing is resumed)."""
        self._open(mode, seed, resume=False)

    def _open(self, mode: str, seed: str | None, *, resume: bool) -> None:
        if mode not in GAME_MODES:
            raise ValueError(f"mode must be one of {', '.join(GAME_MODES)}, got {mode!r}")
        self.mode = mode
        self.date = self._fixed_today or local_date_string()
        self.seed = (seed or new_seed()) if mode == RANDOM else None
        self.guesses = []
        self.state = PLAYING
        self.global_clues = EMPTY_CLUES

        ids = self.catalog.list_candidate_ids()
        if mode == DAILY:
            mystery_id = select_daily(self.date, ids)
        else:
            # Seeded so that a random session can be resumed from its key alone
            mystery_id = select_random(ids, random.Random(self.seed))

        snapshot = self._load_snapshot() if resume else None
        if snapshot is not None and not self._snapshot_applies(snapshot, mystery_id):
            logger.info("Discarding stale snapshot %s", self.session_key)
            self._safe_remove()
            snapshot = None

        self.mystery_movie = fetch_or_degraded(self.catalog, mystery_id)
        if snapshot is not None:
            self.guesses = list(snapshot.guesses)
            self.state = snapshot.state
            self.global_clues = snapshot.global_clues
            logger.info("Resumed %s (%d guesses, %s)", self.session_key, len(self.guesses), self.state)
        else:
            logger.info("Started %s", self.session_key)
        self._persist()

    def _snapshot_applies(self, snapshot: SessionSnapshot, mystery_id: int) -> bool:
        if self.mode == DAILY and snapshot.date != self.date:
            return False
        if snapshot.mystery_id is not None and snapshot.mystery_id != mystery_id:
            return False
        if snapshot.state == PLAYING:
            # a game still in play has at least one attempt left
            return len(snapshot.guesses) < MAX_ATTEMPTS
        return len(snapshot.guesses) <= MAX_ATTEMPTS

    # --- play ---

    def submit_guess(self, guess: MovieRecord) -> GuessHistoryEntry | None:
        """
        Evaluate `guess`, record it and advance the state machine.
        Returns None (and changes nothing) once the game is over or the attempts are used up.
        """
        if self.mystery_movie is None or self.state != PLAYING or len(self.guesses) >= MAX_ATTEMPTS:
            return None

        entry = check_guess(self.mystery_movie, guess)
        self.guesses.append(entry)
        self.global_clues = merge_clues(self.global_clues, entry.feedback)

        if guess.id == self.mystery_movie.id:
            self.state = WON
            logger.info("%s won in %d attempts", self.session_key, len(self.guesses))
        elif len(self.guesses) >= MAX_ATTEMPTS:
            self.state = LOST
            logger.info("%s lost (mystery movie was %s)", self.session_key, self.mystery_movie.id)

        self._persist()
        return entry

    # --- persistence ---

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            date=self.date,
            guesses=tuple(self.guesses),
            state=self.state,
            global_clues=self.global_clues,
            mystery_id=self.mystery_movie.id if self.mystery_movie else None,
            mode=self.mode,
        )

    def _load_snapshot(self) -> SessionSnapshot | None:
        key = self.session_key
        try:
            text = self.store.get(key)
        except Exception as e:
            logger.warning("Could not read snapshot %s: %s", key, e)
            return None
        if text is None:
            return None
        try:
            return SessionSnapshot.from_json(text)
        except CorruptSnapshot as e:
            logger.warning("Corrupt snapshot %s removed: %s", key, e)
            self._safe_remove()
            return None

    def _persist(self) -> None:
        # A failed write only loses resumability, never the game in progress
        try:
            self.store.set(self.session_key, self.snapshot().to_json())
        except Exception as e:
            logger.warning("Could not save snapshot %s: %s", self.session_key, e)

    def _safe_remove(self) -> None:
        try:
            self.store.remove(self.session_key)
        except Exception as e:
            logger.warning("Could not remove snapshot %s: %s", self.session_key, e)

    # --- output ---

    def to_public_dict(self, reveal: bool = False) -> dict:
        """State for the front-end. The mystery movie is hidden until the game ends."""
        out = {
            "mode": self.mode,
            "date": self.date,
            "seed": self.seed,
            "sessionKey": self.session_key,
            "gameState": self.state,
            "attempts": self.attempts,
            "maxAttempts": MAX_ATTEMPTS,
            "guesses": [g.to_dict() for g in self.guesses],
            "globalClues": self.global_clues.to_dict(),
        }
        if (reveal or self.is_over) and self.mystery_movie is not None:
            out["mystery"] = self.mystery_movie.to_dict()
        return out
