import pytest

from ttt_search.config import DEFAULT_DEPTHS, Difficulty, Settings, depth_for, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("TTT_DEPTH_EASY", "TTT_DEPTH_MEDIUM", "TTT_DEPTH_HARD", "TTT_BOT_DELAY_MS", "TTT_DIFFICULTY"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = load_settings()
    assert s.depths == DEFAULT_DEPTHS
    assert s.depths[Difficulty.EASY] == 2
    assert s.bot_delay_ms == 600
    assert s.default_difficulty is Difficulty.MEDIUM


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TTT_DEPTH_HARD", "8")
    monkeypatch.setenv("TTT_DEPTH_MEDIUM", "4")
    monkeypatch.setenv("TTT_BOT_DELAY_MS", "0")
    monkeypatch.setenv("TTT_DIFFICULTY", "hard")
    s = load_settings()
    assert depth_for(Difficulty.HARD, s) == 8
    assert depth_for("Medium", s) == 4
    assert s.bot_delay_ms == 0
    assert s.default_difficulty is Difficulty.HARD


@pytest.mark.parametrize("value", ["deep", "-1", "2.5"])
def test_bad_env_value_rejected(monkeypatch, value):
    monkeypatch.setenv("TTT_DEPTH_EASY", value)
    with pytest.raises(ValueError):
        load_settings()


def test_parse_difficulty():
    assert Difficulty.parse("easy") is Difficulty.EASY
    assert Difficulty.parse(" Hard ") is Difficulty.HARD
    with pytest.raises(ValueError):
        Difficulty.parse("impossible")


def test_depth_for_uses_given_settings():
    s = Settings()
    s.depths[Difficulty.EASY] = 1
    assert depth_for(Difficulty.EASY, s) == 1
    assert depth_for(Difficulty.EASY) == 2
