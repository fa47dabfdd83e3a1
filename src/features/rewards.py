import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10000

# Rough claim cost: 50,000 gas at 20 gwei
ESTIMATED_CLAIM_GAS = 50000
ESTIMATED_GAS_PRICE_WEI = 20 * 10 ** 9


class RewardCalculator:
    """Token rewards in integer base units (like wei).

    total = BASE_REWARD * 10**decimals + (score * 10**decimals) // divisor,
    then scaled by winner_multiplier_bps / 10000 for winners. Every division
    truncates; nothing is ever rounded up.
    """

    def __init__(self, base_reward: int = 10, decimals: int = 18,
                 score_bonus_divisor: int = 100, winner_multiplier_bps: int = 15000,
                 display_decimals: int = 4):
        for name, value in (('base_reward', base_reward), ('decimals', decimals),
                            ('score_bonus_divisor', score_bonus_divisor),
                            ('winner_multiplier_bps', winner_multiplier_bps),
                            ('display_decimals', display_decimals)):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer")
        if score_bonus_divisor == 0:
            raise ValueError("score_bonus_divisor must be positive")
        if winner_multiplier_bps == 0:
            raise ValueError("winner_multiplier_bps must be positive")

        self.base_reward = base_reward
        self.decimals = decimals
        self.unit = 10 ** decimals
        self.score_bonus_divisor = score_bonus_divisor
        self.winner_multiplier_bps = winner_multiplier_bps
        self.display_decimals = min(display_decimals, decimals)

    @classmethod
    def from_config(cls, cfg) -> 'RewardCalculator':
        return cls(
            base_reward=cfg.BASE_REWARD,
            decimals=cfg.TOKEN_DECIMALS,
            score_bonus_divisor=cfg.SCORE_BONUS_DIVISOR,
            winner_multiplier_bps=cfg.WINNER_MULTIPLIER_BPS,
            display_decimals=cfg.DISPLAY_DECIMALS
        )

    @property
    def base_reward_units(self) -> int:
        return self.base_reward * self.unit

    def score_bonus(self, score: int) -> int:
        self._check_score(score)
        return (score * self.unit) // self.score_bonus_divisor

    def calculate_reward(self, score: int, is_winner: bool) -> int:
        total = self.base_reward_units + self.score_bonus(score)
        if is_winner:
            total = (total * self.winner_multiplier_bps) // BPS_DENOMINATOR
        return total

    def get_reward_breakdown(self, score: int, is_winner: bool) -> Dict[str, Any]:
        total = self.calculate_reward(score, is_winner)
        return {
            'baseReward': self.base_reward_units,
            'scoreBonus': self.score_bonus(score),
            'winnerMultiplier': self.winner_multiplier_label(is_winner),
            'totalReward': total,
            'formattedTotal': self.format_reward(total)
        }

    def winner_multiplier_label(self, is_winner: bool) -> str:
        if not is_winner:
            return "1x"
        return f"{self.winner_multiplier_bps / BPS_DENOMINATOR:g}x"

    def format_reward(self, amount: int) -> str:
        """Display string truncated (never rounded) to display_decimals"""
        integer_part, fractional_part = self._split(amount)
        fractional = str(fractional_part).rjust(self.decimals, '0')[:self.display_decimals]
        if not fractional:
            return str(integer_part)
        return f"{integer_part}.{fractional}"

    def format_units(self, amount: int) -> str:
        """Full-precision decimal string, e.g. 10 tokens -> '10.0'"""
        integer_part, fractional_part = self._split(amount)
        fractional = str(fractional_part).rjust(self.decimals, '0').rstrip('0') or '0'
        return f"{integer_part}.{fractional}"

    def estimate_gas_cost(self) -> int:
        return ESTIMATED_CLAIM_GAS * ESTIMATED_GAS_PRICE_WEI

    def get_net_reward(self, reward: int, gas_cost: int) -> int:
        if reward <= gas_cost:
            return 0
        return reward - gas_cost

    def is_reward_profitable(self, reward: int, gas_cost: int) -> bool:
        return reward > gas_cost * 2

    def get_minimum_score_for_profit(self, gas_cost: int, is_winner: bool = False) -> int:
        """Smallest score whose reward is worth the claim transaction"""
        required = gas_cost * 2
        if is_winner:
            required = -(-required * BPS_DENOMINATOR // self.winner_multiplier_bps)
        if required <= self.base_reward_units:
            score = 0
        else:
            bonus_needed = required - self.base_reward_units
            score = -(-bonus_needed * self.score_bonus_divisor // self.unit)

        while not self.is_reward_profitable(self.calculate_reward(score, is_winner), gas_cost):
            score += 1
        return score

    def _split(self, amount: int):
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValueError("amount must be a non-negative integer")
        return divmod(amount, self.unit)

    def _check_score(self, score: int) -> None:
        if not isinstance(score, int) or isinstance(score, bool) or score < 0:
            raise ValueError("score must be a non-negative integer")
