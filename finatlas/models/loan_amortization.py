"""
Loan amortization calculations.

This module produces month-by-month amortization schedules for scenario loans,
including payment overrides, extra principal payments and loans that started
before the projection window.
"""

import logging
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, PrivateAttr

from .dates import DateLike, add_months, is_after, is_before, month_key, start_of_month
from .numeric import annual_to_monthly_rate, calculate_pmt, round_money, total
from .scenario import Loan

logger = logging.getLogger(__name__)


class AmortizationRow(BaseModel):
    """A single month of an amortization schedule."""

    month: str = Field(..., description="Month key (YYYY-MM)")
    payment: float = Field(..., ge=0, description="Total payment for the month")
    principal: float = Field(..., ge=0, description="Principal portion of payment")
    interest: float = Field(..., ge=0, description="Interest portion of payment")
    balance: float = Field(..., ge=0, description="Balance after the payment")


class AmortizationSchedule(BaseModel):
    """Amortization rows for one loan within a projection window."""

    loan_id: str = Field(..., description="Loan identifier")
    rows: List[AmortizationRow] = Field(
        default_factory=list, description="Rows in chronological order"
    )

    _by_month: Dict[str, AmortizationRow] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        self._by_month = {row.month: row for row in self.rows}

    def row_at(self, when: DateLike) -> Optional[AmortizationRow]:
        return self._by_month.get(month_key(when))

    def payment_at(self, when: DateLike) -> float:
        """Payment due in the month containing ``when``; 0 outside the schedule."""
        row = self.row_at(when)
        return row.payment if row else 0.0

    def balance_at(self, when: DateLike) -> float:
        """
        Outstanding balance after the payment of the given month.

        Before the first row the first row's balance is returned; after the
        last row the loan is paid off.
        """
        if not self.rows:
            return 0.0
        key = month_key(when)
        row = self._by_month.get(key)
        if row is not None:
            return row.balance
        if key < self.rows[0].month:
            return self.rows[0].balance
        if key > self.rows[-1].month:
            return 0.0
        for candidate in reversed(self.rows):
            if candidate.month <= key:
                return candidate.balance
        return 0.0

    @property
    def total_interest(self) -> float:
        return round_money(total(row.interest for row in self.rows))

    @property
    def total_payments(self) -> float:
        return round_money(total(row.payment for row in self.rows))

    @property
    def total_principal(self) -> float:
        return round_money(total(row.principal for row in self.rows))

    @property
    def payoff_month(self) -> Optional[str]:
        """Month key of the final payment, if the loan is paid off in the window."""
        if self.rows and self.rows[-1].balance == 0:
            return self.rows[-1].month
        return None

    def __len__(self) -> int:
        return len(self.rows)


class LoanCalculator:
    """Calculator for loan payments and amortization schedules."""

    @staticmethod
    def calculate_monthly_payment(
        principal: float, annual_rate: float, term_months: int
    ) -> float:
        """
        Calculate the level monthly payment of a loan.

        Args:
            principal: Loan principal amount
            annual_rate: Annual interest rate (as decimal, e.g., 0.04 for 4%)
            term_months: Loan term in months

        Returns:
            Monthly payment rounded to cents
        """
        return calculate_pmt(principal, annual_rate, term_months)

    @staticmethod
    def scheduled_payment(loan: Loan) -> float:
        """Payment made each month: the override (or PMT) plus any extra."""
        if loan.payment_override_monthly:
            base = loan.payment_override_monthly
        else:
            base = LoanCalculator.calculate_monthly_payment(
                loan.principal, loan.apr_pct / 100, loan.term_months
            )
        return base + (loan.extra_payment_monthly or 0.0)

    @staticmethod
    def _amortize_month(
        balance: float, monthly_rate: float, payment: float, final: bool
    ) -> Tuple[float, float, float, float]:
        """
        Apply one month of interest and payment to a balance.

        The final term month, or any month the payment covers the balance,
        pays the loan off. A payment below the interest pays interest only.

        Returns:
            (payment, principal, interest, balance) after the month
        """
        interest = round_money(balance * monthly_rate)
        if final or balance + interest <= payment:
            return round_money(balance + interest), balance, interest, 0.0
        if payment <= interest:
            return interest, 0.0, interest, balance
        principal = round_money(payment - interest)
        return payment, principal, interest, round_money(balance - principal)

    @staticmethod
    def generate_amortization_schedule(
        loan: Loan, start: DateLike, end: DateLike
    ) -> AmortizationSchedule:
        """
        Generate the amortization schedule of a loan inside a window.

        Months before the window are simulated to find the opening balance but
        do not produce rows. The schedule stops when the window ends or the
        balance reaches zero. The last month of the loan term pays off the
        remaining balance.

        Args:
            loan: Loan definition
            start: Projection start date
            end: Projection end date

        Returns:
            AmortizationSchedule for the window
        """
        monthly_rate = annual_to_monthly_rate(loan.apr_pct / 100)
        payment = LoanCalculator.scheduled_payment(loan)
        window_start = start_of_month(start)

        balance = loan.principal
        current = start_of_month(loan.start_date)
        elapsed = 0

        while is_before(current, window_start) and balance > 0:
            elapsed += 1
            _, _, _, balance = LoanCalculator._amortize_month(
                balance, monthly_rate, payment, elapsed >= loan.term_months
            )
            current = add_months(current, 1)

        rows: List[AmortizationRow] = []
        while not is_after(current, end) and balance > 0:
            elapsed += 1
            actual_payment, principal, interest, balance = (
                LoanCalculator._amortize_month(
                    balance, monthly_rate, payment, elapsed >= loan.term_months
                )
            )
            rows.append(
                AmortizationRow(
                    month=month_key(current),
                    payment=actual_payment,
                    principal=principal,
                    interest=interest,
                    balance=balance,
                )
            )
            current = add_months(current, 1)

        logger.debug("Loan %s amortized over %d months", loan.id, len(rows))
        return AmortizationSchedule(loan_id=loan.id, rows=rows)
