"""
2024 US tax tables.

Federal brackets, standard deductions, FICA parameters, approximate state
income tax rates and contribution limits.
"""

import math
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .scenario import FilingStatus


class TaxBracket(BaseModel):
    """A marginal tax bracket covering income in [lower, upper)."""

    model_config = ConfigDict(frozen=True)

    lower: float = Field(..., ge=0, description="Lower bound of the bracket")
    upper: float = Field(..., description="Upper bound (inf for the top bracket)")
    rate: float = Field(..., ge=0, le=1, description="Marginal rate (0-1)")

    def scaled(self, factor: float) -> "TaxBracket":
        """Bracket with bounds multiplied by ``factor`` (inflation indexing)."""
        if factor == 1:
            return self
        return TaxBracket(
            lower=self.lower * factor, upper=self.upper * factor, rate=self.rate
        )


def _brackets(*rows) -> List[TaxBracket]:
    return [TaxBracket(lower=lower, upper=upper, rate=rate) for lower, upper, rate in rows]


FEDERAL_BRACKETS_2024: Dict[FilingStatus, List[TaxBracket]] = {
    FilingStatus.SINGLE: _brackets(
        (0, 11600, 0.10),
        (11600, 47150, 0.12),
        (47150, 100525, 0.22),
        (100525, 191950, 0.24),
        (191950, 243725, 0.32),
        (243725, 609350, 0.35),
        (609350, math.inf, 0.37),
    ),
    FilingStatus.MFJ: _brackets(
        (0, 23200, 0.10),
        (23200, 94300, 0.12),
        (94300, 201050, 0.22),
        (201050, 383900, 0.24),
        (383900, 487450, 0.32),
        (487450, 731200, 0.35),
        (731200, math.inf, 0.37),
    ),
    FilingStatus.HOH: _brackets(
        (0, 16550, 0.10),
        (16550, 63100, 0.12),
        (63100, 100500, 0.22),
        (100500, 191950, 0.24),
        (191950, 243700, 0.32),
        (243700, 609350, 0.35),
        (609350, math.inf, 0.37),
    ),
}

STANDARD_DEDUCTIONS_2024: Dict[FilingStatus, float] = {
    FilingStatus.SINGLE: 14600,
    FilingStatus.MFJ: 29200,
    FilingStatus.HOH: 21900,
}

SOCIAL_SECURITY_RATE = 0.062
SOCIAL_SECURITY_WAGE_CAP_2024 = 168600
MEDICARE_RATE = 0.0145
MEDICARE_ADDITIONAL_RATE = 0.009
MEDICARE_ADDITIONAL_THRESHOLDS: Dict[FilingStatus, float] = {
    FilingStatus.SINGLE: 200000,
    FilingStatus.MFJ: 250000,
    FilingStatus.HOH: 200000,
}

DEFAULT_STATE_RATE = 0.05

# Flat rates, or an effective-rate approximation for progressive states.
STATE_TAX_RATES: Dict[str, float] = {
    # No wage income tax
    "AK": 0.0,
    "FL": 0.0,
    "NV": 0.0,
    "SD": 0.0,
    "TN": 0.0,
    "TX": 0.0,
    "WA": 0.0,
    "WY": 0.0,
    "NH": 0.0,
    # Flat
    "AZ": 0.025,
    "CO": 0.044,
    "ID": 0.058,
    "IL": 0.0495,
    "IN": 0.0305,
    "KY": 0.04,
    "MA": 0.05,
    "MI": 0.0405,
    "NC": 0.0525,
    "ND": 0.0195,
    "PA": 0.0307,
    "UT": 0.0465,
    # Progressive
    "AL": 0.05,
    "AR": 0.047,
    "CA": 0.093,
    "CT": 0.0699,
    "DE": 0.066,
    "GA": 0.055,
    "HI": 0.0825,
    "IA": 0.06,
    "KS": 0.057,
    "LA": 0.0425,
    "ME": 0.0715,
    "MD": 0.0575,
    "MN": 0.0985,
    "MO": 0.048,
    "MS": 0.05,
    "MT": 0.059,
    "NE": 0.0664,
    "NJ": 0.0637,
    "NM": 0.059,
    "NY": 0.0685,
    "OH": 0.0399,
    "OK": 0.0475,
    "OR": 0.099,
    "RI": 0.0599,
    "SC": 0.064,
    "VT": 0.0875,
    "VA": 0.0575,
    "WV": 0.055,
    "WI": 0.0765,
    "DC": 0.105,
}

CONTRIBUTION_LIMITS_2024 = {
    "traditional_401k": 23000,
    "traditional_401k_catch_up": 7500,  # age 50+
    "traditional_ira": 7000,
    "traditional_ira_catch_up": 1000,  # age 50+
    "roth_ira": 7000,
    "roth_ira_catch_up": 1000,  # age 50+
    "hsa": {
        "individual": 4150,
        "family": 8300,
        "catch_up": 1000,  # age 55+
    },
    "college_529": math.inf,  # no federal limit
}


def state_rate(state_code: str) -> float:
    """Approximate state income tax rate; unknown states use the default."""
    return STATE_TAX_RATES.get(state_code.upper(), DEFAULT_STATE_RATE)
