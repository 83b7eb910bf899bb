"""
Investment account state tracking.

The ledger keeps one AccountState per scenario account, in scenario order, and
resolves each contribution rule to its account position once. Within a month,
contributions are credited before returns are applied.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .dates import DateLike
from .numeric import annual_to_monthly_rate, round_money, total
from .scenario import AccountType, ContributionRule, GrowthRule, InvestmentAccount
from .schedules import is_date_in_period
from .time_grid import InflationIndex, apply_growth


class AccountState(BaseModel):
    """Running state of one investment account."""

    account_id: str = Field(..., description="Account identifier")
    account_type: AccountType = Field(default="TAXABLE", description="Tax treatment")
    balance: float = Field(default=0.0, description="Current balance")
    contributions: float = Field(
        default=0.0, description="Contributions credited this period"
    )
    returns: float = Field(default=0.0, description="Returns credited this period")


def initial_balance(account: InvestmentAccount) -> float:
    """Market value of an account's holdings (last price, else average cost)."""
    value = total(
        holding.shares
        * (holding.last_price if holding.last_price is not None else holding.avg_price)
        for holding in account.holdings
    )
    return round_money(value)


def initialize_account_states(
    accounts: Sequence[InvestmentAccount],
) -> List[AccountState]:
    return [
        AccountState(
            account_id=account.id,
            account_type=account.type,
            balance=initial_balance(account),
        )
        for account in accounts
    ]


class AccountLedger:
    """Arena of account states indexed by scenario position."""

    def __init__(
        self,
        accounts: Sequence[InvestmentAccount],
        contributions: Sequence[ContributionRule] = (),
    ):
        self.states = initialize_account_states(accounts)
        self._positions: Dict[str, int] = {
            state.account_id: position for position, state in enumerate(self.states)
        }
        self._rules: List[Tuple[ContributionRule, int]] = [
            (rule, self._positions[rule.account_id])
            for rule in contributions
            if rule.account_id in self._positions
        ]
        self._monthly_rates: List[float] = [
            annual_to_monthly_rate(account.expected_return_pct / 100)
            for account in accounts
        ]

    def position_of(self, account_id: str) -> Optional[int]:
        return self._positions.get(account_id)

    def reset_period_counters(self) -> None:
        """Zero the per-month contribution and return counters."""
        for state in self.states:
            state.contributions = 0.0
            state.returns = 0.0

    def process_contributions(self, when: DateLike, index: InflationIndex) -> None:
        """
        Credit every contribution rule active in the month of ``when``.

        A positive ``escalation_pct`` grows the monthly amount with the
        CUSTOM_PERCENT rule, measured from the first month of the projection.

        Args:
            when: First day of the month being simulated
            index: Inflation index of the run
        """
        for rule, position in self._rules:
            if not is_date_in_period(when, rule.start_date, rule.end_date):
                continue

            amount = rule.amount_monthly
            if rule.escalation_pct is not None and rule.escalation_pct > 0:
                amount = apply_growth(
                    rule.amount_monthly,
                    GrowthRule.CUSTOM_PERCENT,
                    rule.escalation_pct / 100,
                    index,
                    when,
                )

            state = self.states[position]
            state.balance = round_money(state.balance + amount)
            state.contributions = round_money(state.contributions + amount)

    def apply_returns(self) -> None:
        """Credit one month of expected return on each account's balance."""
        for state, rate in zip(self.states, self._monthly_rates):
            monthly_return = round_money(state.balance * rate)
            state.balance = round_money(state.balance + monthly_return)
            state.returns = round_money(state.returns + monthly_return)

    def total_balance(self) -> float:
        return round_money(total(state.balance for state in self.states))

    def total_contributions(self) -> float:
        return round_money(total(state.contributions for state in self.states))

    def total_returns(self) -> float:
        return round_money(total(state.returns for state in self.states))

    def snapshot(self) -> Dict[str, float]:
        """Balance of every account keyed by account id."""
        return {state.account_id: state.balance for state in self.states}

    def balance_of(self, account_id: str) -> float:
        position = self._positions.get(account_id)
        if position is None:
            return 0.0
        return self.states[position].balance

    def balance_by_type(self, account_type: AccountType) -> float:
        """Total balance of accounts with the given tax treatment."""
        return round_money(
            total(
                state.balance
                for state in self.states
                if state.account_type == account_type
            )
        )

    def __len__(self) -> int:
        return len(self.states)
