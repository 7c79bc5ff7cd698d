"""Exceptions raised by the EMI calculator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .data_models import PayoffSchedule


class EmiCalcError(Exception):
    """Base class for calculator errors."""


class InvalidLoanTerms(EmiCalcError, ValueError):
    """Raised when principal, rate, tenure or EMI are outside their valid range."""


class InvalidPrepaymentPlan(EmiCalcError, ValueError):
    """Raised for an unknown prepayment strategy or a negative extra amount."""


class NonConvergentPrepayment(EmiCalcError):
    """The simulated plan did not pay the loan off within the iteration cap.

    The simulator reports this as a result state (``PayoffSchedule.converged``
    is False). The exception is only raised by
    ``PayoffSchedule.ensure_converged`` for callers that want a hard failure.
    """

    def __init__(self, schedule: "PayoffSchedule") -> None:
        self.schedule = schedule
        super().__init__(
            f"Loan not paid off after {schedule.months_to_payoff} months; "
            f"{schedule.remaining_balance:.2f} still outstanding"
        )
