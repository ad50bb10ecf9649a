"""Tests for ninaivu.core.scores – streak tracking."""

from __future__ import annotations

from ninaivu.core.scores import BEST_STREAK_KEY, ScoreTracker, StreakUpdate
from ninaivu.core.storage import MemoryStore


class TestStreakUpdate:
    def test_new_record(self):
        assert StreakUpdate(current=4, best=4, previous_best=3).is_new_record

    def test_not_a_record(self):
        assert not StreakUpdate(current=2, best=5, previous_best=5).is_new_record


class TestCurrentBest:
    def test_absent_is_zero(self, scores: ScoreTracker):
        assert scores.current_best() == 0

    def test_reads_store(self):
        assert ScoreTracker(MemoryStore({BEST_STREAK_KEY: "8"})).current_best() == 8

    def test_corrupt_is_zero(self):
        assert ScoreTracker(MemoryStore({BEST_STREAK_KEY: "many"})).current_best() == 0

    def test_negative_is_zero(self):
        assert ScoreTracker(MemoryStore({BEST_STREAK_KEY: "-3"})).current_best() == 0


class TestIncrement:
    def test_starts_at_zero(self, scores: ScoreTracker):
        assert scores.current_streak == 0

    def test_increments(self, scores: ScoreTracker):
        scores.increment()
        update = scores.increment()
        assert update.current == 2
        assert scores.current_streak == 2

    def test_first_increment_sets_record(self, scores: ScoreTracker, kv: MemoryStore):
        update = scores.increment()
        assert update == StreakUpdate(current=1, best=1, previous_best=0)
        assert kv.get(BEST_STREAK_KEY) == "1"

    def test_below_best_does_not_persist(self, kv: MemoryStore):
        kv.set(BEST_STREAK_KEY, "5")
        scores = ScoreTracker(kv)
        update = scores.increment()
        assert update == StreakUpdate(current=1, best=5, previous_best=5)
        assert not update.is_new_record
        assert kv.get(BEST_STREAK_KEY) == "5"

    def test_beating_best(self, kv: MemoryStore):
        kv.set(BEST_STREAK_KEY, "2")
        scores = ScoreTracker(kv)
        scores.increment()
        scores.increment()
        update = scores.increment()
        assert update.is_new_record
        assert update.previous_best == 2
        assert scores.current_best() == 3


class TestReset:
    def test_reset_clears_current_only(self, scores: ScoreTracker):
        scores.increment()
        scores.increment()
        scores.reset()
        assert scores.current_streak == 0
        assert scores.current_best() == 2

    def test_best_never_decreases(self, scores: ScoreTracker):
        history = []
        for run_length in (3, 1, 5, 2, 0, 4):
            scores.reset()
            for _ in range(run_length):
                scores.increment()
            history.append(scores.current_best())
        assert history == sorted(history)
        assert history[-1] == 5
