import pytest
from config import Config
from src.features.rewards import RewardCalculator

TOKEN = 10 ** 18


@pytest.fixture
def calculator():
    return RewardCalculator()


def test_base_reward_for_zero_score(calculator):
    assert calculator.calculate_reward(0, False) == 10 * TOKEN


def test_score_bonus_is_one_token_per_hundred_points(calculator):
    assert calculator.calculate_reward(100, False) == 11 * TOKEN
    assert calculator.calculate_reward(1, False) == 10 * TOKEN + 10 ** 16


def test_winner_multiplier(calculator):
    assert calculator.calculate_reward(100, True) == 16_500_000_000_000_000_000
    assert calculator.calculate_reward(1, True) == 15_015_000_000_000_000_000


def test_integer_math_truncates():
    calculator = RewardCalculator(decimals=0, base_reward=0, score_bonus_divisor=3,
                                  winner_multiplier_bps=15000)

    assert calculator.calculate_reward(5, False) == 1
    assert calculator.calculate_reward(5, True) == 1
    assert calculator.calculate_reward(8, True) == 3


def test_large_scores_stay_exact(calculator):
    assert calculator.calculate_reward(50000, True) == (10 * TOKEN + 500 * TOKEN) * 3 // 2


def test_breakdown(calculator):
    breakdown = calculator.get_reward_breakdown(100, True)

    assert breakdown == {
        'baseReward': 10 * TOKEN,
        'scoreBonus': TOKEN,
        'winnerMultiplier': "1.5x",
        'totalReward': 16_500_000_000_000_000_000,
        'formattedTotal': "16.5000"
    }
    assert calculator.get_reward_breakdown(0, False)['winnerMultiplier'] == "1x"


def test_format_reward_truncates(calculator):
    assert calculator.format_reward(1_234_567_890_000_000_000) == "1.2345"
    assert calculator.format_reward(999_999_999_999_999_999) == "0.9999"
    assert calculator.format_reward(0) == "0.0000"


def test_format_units_full_precision(calculator):
    assert calculator.format_units(10 * TOKEN) == "10.0"
    assert calculator.format_units(15_015_000_000_000_000_000) == "15.015"
    assert calculator.format_units(1) == "0.000000000000000001"


def test_gas_helpers(calculator):
    gas = calculator.estimate_gas_cost()

    assert gas == 50000 * 20 * 10 ** 9
    assert calculator.get_net_reward(10, 20) == 0
    assert calculator.get_net_reward(100, 40) == 60
    assert calculator.is_reward_profitable(2 * gas + 1, gas)
    assert not calculator.is_reward_profitable(2 * gas, gas)


def test_minimum_score_for_profit(calculator):
    assert calculator.get_minimum_score_for_profit(calculator.estimate_gas_cost()) == 0

    gas = 6 * TOKEN
    score = calculator.get_minimum_score_for_profit(gas)
    assert score == 201
    assert calculator.is_reward_profitable(calculator.calculate_reward(score, False), gas)
    assert not calculator.is_reward_profitable(calculator.calculate_reward(score - 1, False), gas)

    assert calculator.get_minimum_score_for_profit(gas, is_winner=True) == 0


@pytest.mark.parametrize("score", [-1, True, 1.5, "10"])
def test_invalid_scores_rejected(calculator, score):
    with pytest.raises(ValueError):
        calculator.calculate_reward(score, False)


def test_from_config():
    calculator = RewardCalculator.from_config(Config())

    assert calculator.calculate_reward(100, False) == 11 * TOKEN


@pytest.mark.parametrize("is_winner", [False, True])
def test_reward_never_decreases_with_score(calculator, is_winner):
    previous = calculator.calculate_reward(0, is_winner)
    for score in range(1, 50001):
        reward = calculator.calculate_reward(score, is_winner)
        assert reward >= previous
        previous = reward


def test_zero_winner_multiplier_rejected():
    with pytest.raises(ValueError):
        RewardCalculator(winner_multiplier_bps=0)
