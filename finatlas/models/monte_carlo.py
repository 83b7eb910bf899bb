"""
Monte Carlo simulation over the projection loop.

Each simulation replaces every account's expected return with a normally
distributed draw and reruns ``run_projection`` unchanged. Net worth per month
is collected into a (months x simulations) array, from which percentile bands
and success rates are computed. Identical input, seed, simulation count and
volatility always give identical results, with or without worker processes.
"""

import logging
import threading
import time
from concurrent.futures import Future, ProcessPoolExecutor
from typing import List, Optional

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .dates import format_iso
from .normalize import ScenarioData, prepare_input
from .numeric import clamp, round_money
from .projection import TaxAdjustment, goal_target_nominal, run_projection
from .random_returns import ReturnSamplingConfig, sample_account_returns
from .results import MonteCarloResult, PercentileBand
from .scenario import ScenarioInput

logger = logging.getLogger(__name__)

DEFAULT_SIMULATIONS = 500
DEFAULT_VOLATILITY_PCT = 15.0
DEFAULT_SEED = 42
MIN_SIMULATIONS, MAX_SIMULATIONS = 50, 2000
MIN_VOLATILITY_PCT, MAX_VOLATILITY_PCT = 1.0, 50.0
PERCENTILES = (10, 25, 50, 75, 90)


class MonteCarloCancelled(RuntimeError):
    """Raised when a Monte Carlo run is cancelled or exceeds its deadline."""


class MonteCarloConfig(BaseModel):
    """Monte Carlo settings. Falsy values fall back to the defaults."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    simulations: Optional[int] = Field(
        default=DEFAULT_SIMULATIONS, description="Simulation count (50-2000)"
    )
    volatility_pct: Optional[float] = Field(
        default=DEFAULT_VOLATILITY_PCT, description="Return volatility % (1-50)"
    )
    seed: Optional[int] = Field(default=DEFAULT_SEED, ge=0, description="Root seed")
    max_workers: int = Field(
        default=1, ge=1, description="Worker processes (1 runs in-process)"
    )
    deadline_seconds: Optional[float] = Field(
        default=None, gt=0, description="Wall-clock budget for the whole run"
    )

    @property
    def effective_simulations(self) -> int:
        return int(
            clamp(
                self.simulations or DEFAULT_SIMULATIONS,
                MIN_SIMULATIONS,
                MAX_SIMULATIONS,
            )
        )

    @property
    def effective_volatility_pct(self) -> float:
        return float(
            clamp(
                self.volatility_pct or DEFAULT_VOLATILITY_PCT,
                MIN_VOLATILITY_PCT,
                MAX_VOLATILITY_PCT,
            )
        )

    @property
    def effective_seed(self) -> int:
        return DEFAULT_SEED if self.seed is None else self.seed


def _with_sampled_returns(
    scenario: ScenarioInput, returns_pct: NDArray[np.float64]
) -> ScenarioInput:
    accounts = [
        account.model_copy(update={"expected_return_pct": float(sampled)})
        for account, sampled in zip(scenario.accounts, returns_pct)
    ]
    return scenario.model_copy(update={"accounts": accounts})


def simulate_net_worth(
    scenario: ScenarioInput,
    returns_pct: NDArray[np.float64],
    tax_adjustment: TaxAdjustment = TaxAdjustment.DAMPENED,
) -> List[float]:
    """Net worth per month for one simulation's sampled account returns."""
    run = run_projection(_with_sampled_returns(scenario, returns_pct), tax_adjustment)
    return [month.net_worth for month in run.months]


class _CancellationCheck:
    def __init__(
        self,
        cancel_event: Optional[threading.Event],
        deadline_seconds: Optional[float],
    ):
        self.cancel_event = cancel_event
        self.deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds else None
        )

    def __call__(self, completed: int) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise MonteCarloCancelled(
                f"Monte Carlo run cancelled after {completed} simulations"
            )
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise MonteCarloCancelled(
                f"Monte Carlo deadline exceeded after {completed} simulations"
            )


def _run_sequential(
    scenario: ScenarioInput,
    samples: NDArray[np.float64],
    net_worth: NDArray[np.float64],
    tax_adjustment: TaxAdjustment,
    check: _CancellationCheck,
) -> None:
    for sim in range(samples.shape[0]):
        check(sim)
        net_worth[:, sim] = simulate_net_worth(scenario, samples[sim], tax_adjustment)


def _run_parallel(
    scenario: ScenarioInput,
    samples: NDArray[np.float64],
    net_worth: NDArray[np.float64],
    tax_adjustment: TaxAdjustment,
    check: _CancellationCheck,
    max_workers: int,
) -> None:
    executor = ProcessPoolExecutor(max_workers=max_workers)
    try:
        futures: List[Future] = [
            executor.submit(simulate_net_worth, scenario, samples[sim], tax_adjustment)
            for sim in range(samples.shape[0])
        ]
        for sim, future in enumerate(futures):
            check(sim)
            net_worth[:, sim] = future.result()
    finally:
        executor.shutdown(wait=True, cancel_futures=True)


def _percentile_bands(
    months: List[str], net_worth: NDArray[np.float64]
) -> List[PercentileBand]:
    values = np.percentile(net_worth, PERCENTILES, axis=1, method="linear")
    bands = []
    for i, t in enumerate(months):
        p10, p25, p50, p75, p90 = (round_money(float(v)) for v in values[:, i])
        bands.append(PercentileBand(t=t, p10=p10, p25=p25, p50=p50, p75=p75, p90=p90))
    return bands


def run_monte_carlo(
    data: ScenarioData,
    config: Optional[MonteCarloConfig] = None,
    cancel_event: Optional[threading.Event] = None,
    tax_adjustment: TaxAdjustment = TaxAdjustment.DAMPENED,
) -> MonteCarloResult:
    """
    Run a Monte Carlo simulation of a scenario.

    Args:
        data: ScenarioInput or camelCase JSON-like mapping
        config: Simulation settings (defaults when None)
        cancel_event: Set from another thread to stop between simulations
        tax_adjustment: Tax mode passed to every projection

    Returns:
        MonteCarloResult with bands, success rates and final net worth stats

    Raises:
        ScenarioValidationError: if the scenario is invalid
        MonteCarloCancelled: if cancelled or the deadline passes
    """
    config = config or MonteCarloConfig()
    simulations = config.effective_simulations
    volatility_pct = config.effective_volatility_pct
    seed = config.effective_seed

    scenario = prepare_input(data)
    baseline = run_projection(scenario, tax_adjustment)
    months = [format_iso(month.date) for month in baseline.months]

    samples = sample_account_returns(
        [account.expected_return_pct for account in scenario.accounts],
        ReturnSamplingConfig(
            simulations=simulations, volatility_pct=volatility_pct, seed=seed
        ),
    )
    net_worth = np.empty((len(months), simulations), dtype=np.float64)
    check = _CancellationCheck(cancel_event, config.deadline_seconds)

    logger.debug(
        "Monte Carlo %s: %d simulations x %d months, volatility %.1f%%, seed %d",
        scenario.scenario_id,
        simulations,
        len(months),
        volatility_pct,
        seed,
    )
    if config.max_workers > 1:
        _run_parallel(
            scenario, samples, net_worth, tax_adjustment, check, config.max_workers
        )
    else:
        _run_sequential(scenario, samples, net_worth, tax_adjustment, check)

    final = net_worth[-1]
    final_p10, final_p50, final_p90 = np.percentile(
        final, (10, 50, 90), method="linear"
    )

    last_month = baseline.months[-1].date
    goal_success_rates = {}
    for goal in scenario.goals:
        target = goal_target_nominal(
            goal.target_amount_real, baseline.inflation_index, last_month
        )
        goal_success_rates[goal.id] = round_money(float(np.mean(final >= target)), 4)

    return MonteCarloResult(
        bands=_percentile_bands(months, net_worth),
        success_rate=round_money(float(np.mean(final > 0)), 4),
        goal_success_rates=goal_success_rates,
        simulations=simulations,
        volatility_pct=volatility_pct,
        seed=seed,
        median_final_net_worth=round_money(float(final_p50)),
        p10_final_net_worth=round_money(float(final_p10)),
        p90_final_net_worth=round_money(float(final_p90)),
    )
