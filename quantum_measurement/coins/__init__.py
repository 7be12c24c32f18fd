"""Coin experiments."""
from .coin_experiment import CoinExperimentScene

__all__ = [
    "CoinExperimentScene",
]
