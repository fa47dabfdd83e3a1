import pytest
from games.combo import ComboScorer, ComboTier


def hit_many(scorer, count, start=0, spacing=100):
    result = None
    for i in range(count):
        result = scorer.register_hit(start + i * spacing)
    return result


def test_first_hit_starts_new_streak():
    scorer = ComboScorer()

    result = scorer.register_hit(1000)

    assert result == {'combo': 1, 'multiplier': 1.0, 'isNew': True}
    assert scorer.state.is_active


def test_multiplier_steps_every_five_hits():
    scorer = ComboScorer()

    assert hit_many(scorer, 4)['multiplier'] == 1.0
    assert scorer.register_hit(400)['multiplier'] == 1.25
    assert hit_many(scorer, 5, start=500)['multiplier'] == 1.5


def test_multiplier_is_capped():
    scorer = ComboScorer()

    result = hit_many(scorer, 200)

    assert result['combo'] == 200
    assert result['multiplier'] == 5
    assert scorer.multiplier_for(10 ** 6) == 5


def test_hit_after_timeout_starts_over():
    scorer = ComboScorer()
    hit_many(scorer, 6)
    last = scorer.state.last_hit_time

    result = scorer.register_hit(last + 2001)

    assert result == {'combo': 1, 'multiplier': 1.0, 'isNew': True}
    assert scorer.state.max_combo == 6


def test_hit_exactly_at_timeout_extends_streak():
    scorer = ComboScorer()
    scorer.register_hit(0)

    result = scorer.register_hit(2000)

    assert result['combo'] == 2
    assert not result['isNew']


def test_update_breaks_idle_streak():
    scorer = ComboScorer()
    hit_many(scorer, 3)

    scorer.update(200 + 2000)
    assert scorer.state.count == 3

    scorer.update(200 + 2001)
    assert scorer.state.count == 0
    assert scorer.state.multiplier == 1.0
    assert not scorer.state.is_active


def test_break_combo_keeps_max():
    scorer = ComboScorer()
    hit_many(scorer, 12)

    scorer.break_combo()

    assert scorer.state.count == 0
    assert scorer.state.max_combo == 12


def test_points_are_floored():
    scorer = ComboScorer()
    hit_many(scorer, 5)

    assert scorer.calculate_points(5) == 6


@pytest.mark.parametrize("hits,tier", [
    (0, ComboTier.NONE),
    (4, ComboTier.NONE),
    (5, ComboTier.BRONZE),
    (10, ComboTier.SILVER),
    (20, ComboTier.GOLD),
    (49, ComboTier.GOLD),
    (50, ComboTier.PLATINUM),
])
def test_tiers(hits, tier):
    scorer = ComboScorer()
    hit_many(scorer, hits)

    assert scorer.tier() is tier


def test_multiplier_stays_in_bounds():
    scorer = ComboScorer()
    now = 0
    for i in range(300):
        # every seventh gap exceeds the timeout
        now += 2500 if i % 7 == 0 else 1000
        scorer.register_hit(now)
        assert 1 <= scorer.state.multiplier <= scorer.max_multiplier


def test_get_state_is_a_copy():
    scorer = ComboScorer()
    scorer.register_hit(0)

    state = scorer.get_state()
    scorer.register_hit(10)

    assert state.count == 1
    assert scorer.state.count == 2


def test_reset_keeps_max_combo():
    scorer = ComboScorer()
    hit_many(scorer, 7)

    scorer.reset()

    assert scorer.state.count == 0
    assert scorer.state.last_hit_time is None
    assert scorer.state.max_combo == 7
