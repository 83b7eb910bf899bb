"""
Projection service wrapping the engine entry points.

This service applies application settings (tax adjustment mode, Monte Carlo
defaults) to engine calls and logs each run with its duration.
"""

import logging
import threading
import time
from typing import Any, Dict, Mapping, Optional

from finatlas.config import Settings, get_global_settings
from finatlas.models.contract import (
    get_input_hash,
    run_engine,
    run_monte_carlo,
    validate_input,
)
from finatlas.models.hashing import short_hash
from finatlas.models.monte_carlo import MonteCarloConfig
from finatlas.models.normalize import ScenarioData
from finatlas.models.results import MonteCarloResult, ProjectionResult


class ProjectionService:
    """Service for running projections and Monte Carlo simulations."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the projection service.

        Args:
            settings: Application settings; the global settings when omitted
        """
        self.settings = settings or get_global_settings()
        self.logger = logging.getLogger(__name__)

    def project(self, scenario: ScenarioData) -> ProjectionResult:
        """Run a deterministic projection.

        Args:
            scenario: Scenario JSON (camelCase) or ScenarioInput

        Returns:
            ProjectionResult for the scenario

        Raises:
            ScenarioValidationError: If the scenario is invalid
        """
        started = time.perf_counter()
        try:
            result = run_engine(scenario, tax_adjustment=self.settings.tax_adjustment)
        except Exception as e:
            self.logger.error(f"Projection failed: {str(e)}")
            raise

        self.logger.info(
            f"Projection {result.input_hash[:8]} completed: "
            f"{len(result.monthly)} months, {len(result.warnings)} warnings "
            f"in {time.perf_counter() - started:.3f}s"
        )
        return result

    def build_monte_carlo_config(
        self, overrides: Optional[Mapping[str, Any]] = None
    ) -> MonteCarloConfig:
        """Merge request overrides (camelCase or snake_case) over the defaults."""
        defaults = self.settings.monte_carlo_defaults()
        if not overrides:
            return defaults
        requested = MonteCarloConfig.model_validate(overrides)
        merged: Dict[str, Any] = defaults.model_dump()
        merged.update(requested.model_dump(exclude_unset=True))
        return MonteCarloConfig.model_validate(merged)

    def simulate(
        self,
        scenario: ScenarioData,
        overrides: Optional[Mapping[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> MonteCarloResult:
        """Run a Monte Carlo simulation.

        Args:
            scenario: Scenario JSON (camelCase) or ScenarioInput
            overrides: Monte Carlo settings from the request
            cancel_event: Event that cancels the run when set

        Returns:
            MonteCarloResult for the scenario

        Raises:
            ScenarioValidationError: If the scenario is invalid
            MonteCarloCancelled: If the run is cancelled or times out
        """
        config = self.build_monte_carlo_config(overrides)
        started = time.perf_counter()
        try:
            result = run_monte_carlo(
                scenario,
                config,
                cancel_event=cancel_event,
                tax_adjustment=self.settings.tax_adjustment,
            )
        except Exception as e:
            self.logger.error(f"Monte Carlo run failed: {str(e)}")
            raise

        self.logger.info(
            f"Monte Carlo completed: {result.simulations} simulations, "
            f"success rate {result.success_rate:.2%} "
            f"in {time.perf_counter() - started:.3f}s"
        )
        return result

    def validate(self, scenario: ScenarioData) -> bool:
        """Validate a scenario without projecting it."""
        return validate_input(scenario)

    def input_hash(self, scenario: ScenarioData) -> str:
        """Cache key of a scenario."""
        digest = get_input_hash(scenario)
        self.logger.debug(f"Hashed scenario {short_hash(scenario)} -> {digest[:8]}")
        return digest
