"""
Seeded sampling of account returns for Monte Carlo simulation.

Every simulation gets its own generator spawned from one ``SeedSequence``, so
simulation ``i`` draws the same returns whether simulations run sequentially
or in worker processes.
"""

from typing import List, Sequence

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field


class ReturnSamplingConfig(BaseModel):
    """Parameters for sampling annual account returns."""

    simulations: int = Field(..., ge=1, description="Number of simulations")
    volatility_pct: float = Field(
        ..., ge=0, description="Standard deviation of annual return (%)"
    )
    seed: int = Field(..., ge=0, description="Root seed")


def simulation_generators(seed: int, simulations: int) -> List[np.random.Generator]:
    """One independent generator per simulation, spawned from ``seed``."""
    children = np.random.SeedSequence(seed).spawn(simulations)
    return [np.random.default_rng(child) for child in children]


def sample_account_returns(
    expected_returns_pct: Sequence[float], config: ReturnSamplingConfig
) -> NDArray[np.float64]:
    """
    Draw one annual return per account for every simulation.

    Each draw is normal with mean equal to the account's expected return and
    standard deviation ``config.volatility_pct`` (both in percent).

    Args:
        expected_returns_pct: Expected annual return of each account (%)
        config: Simulation count, volatility and seed

    Returns:
        Array of shape (simulations, accounts) with sampled returns in percent
    """
    means = np.asarray(expected_returns_pct, dtype=np.float64)
    samples = np.empty((config.simulations, means.size), dtype=np.float64)
    for i, rng in enumerate(simulation_generators(config.seed, config.simulations)):
        samples[i] = rng.normal(means, config.volatility_pct)
    return samples
