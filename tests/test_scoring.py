import pytest

from blockudoku.game import MemoryHighScoreStore, ScoreManager, ScoringRules


@pytest.fixture
def manager():
    return ScoreManager(store=MemoryHighScoreStore())


def test_placement_only(manager):
    assert manager.calculate_score(4, 0) == 40
    assert manager.streak == 0


def test_single_clear_first_turn(manager):
    assert manager.calculate_score(4, 1) == 140
    assert manager.streak == 1


def test_combo_on_second_clearing_turn_has_no_streak_bonus(manager):
    manager.calculate_score(4, 1)
    assert manager.calculate_score(4, 2) == 40 + 200 + 50
    assert manager.streak == 2


def test_streak_bonus_from_third_turn(manager):
    manager.calculate_score(1, 1)
    manager.calculate_score(1, 1)
    # 10 + 100 + 3 * 25
    assert manager.calculate_score(1, 1) == 185
    # 10 + 300 + 2 * 50 + 4 * 25
    assert manager.calculate_score(1, 3) == 510


def test_clearless_turn_resets_streak(manager):
    manager.calculate_score(1, 1)
    manager.calculate_score(1, 1)
    manager.calculate_score(2, 0)
    assert manager.streak == 0
    assert manager.calculate_score(1, 1) == 110


def test_returns_turn_points_and_accumulates(manager):
    manager.calculate_score(4, 0)
    manager.calculate_score(4, 1)
    assert manager.current_score == 180


def test_high_score_persisted_when_beaten():
    store = MemoryHighScoreStore(100)
    manager = ScoreManager(store=store)
    assert manager.high_score == 100
    manager.calculate_score(5, 0)
    assert store.value == 100
    manager.calculate_score(6, 0)
    assert manager.high_score == 110
    assert store.value == 110


def test_reset_keeps_high_score(manager):
    manager.calculate_score(3, 1)
    manager.reset()
    assert manager.current_score == 0
    assert manager.streak == 0
    assert manager.high_score == 130


def test_rules_are_configurable():
    rules = ScoringRules(points_per_block=1, points_per_clear=10, combo_bonus=5, streak_bonus=2, streak_threshold=2)
    assert rules.points_for(3, 2, streak=2) == 3 + 20 + 5 + 4
    assert rules.points_for(3, 0, streak=5) == 3
