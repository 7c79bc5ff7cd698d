"""Data models for the EMI calculator.

This module defines dataclasses representing the entities used by the
calculator: the loan terms, the baseline EMI figures derived from them, a
prepayment plan, the month-by-month simulation entries and the payoff
summary, plus the records used to compare several loan options. All of them
are frozen; a change of input means building a new object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple

from .errors import InvalidLoanTerms, InvalidPrepaymentPlan, NonConvergentPrepayment
from .utils import Number, round_money, tenure_to_months, to_decimal

MONTHLY = "monthly"
YEARLY = "yearly"
ONE_TIME = "onetime"
STRATEGIES = (MONTHLY, YEARLY, ONE_TIME)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _coerce_tenure(tenure_months: object) -> int:
    if isinstance(tenure_months, bool):
        raise InvalidLoanTerms(f"Tenure must be a whole number of months; got {tenure_months!r}")
    if isinstance(tenure_months, int):
        return tenure_months
    try:
        value = to_decimal(tenure_months)  # type: ignore[arg-type]
    except ValueError as exc:
        raise InvalidLoanTerms(f"Tenure must be a whole number of months; got {tenure_months!r}") from exc
    if value != value.to_integral_value():
        raise InvalidLoanTerms(f"Tenure must be a whole number of months; got {tenure_months!r}")
    return int(value)


@dataclass(frozen=True)
class LoanTerms:
    """Principal, annual rate and tenure of a single loan.

    Attributes
    ----------
    principal: Decimal
        The amount borrowed. Must be positive.
    annual_rate_percent: Decimal
        Nominal annual interest rate in percent (``8.5`` means 8.5 %).
        Must not be negative.
    tenure_months: int
        Number of monthly installments. Must be at least one.

    Values are coerced to ``Decimal``/``int`` on construction and validated;
    invalid terms raise ``InvalidLoanTerms``.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    tenure_months: int

    def __post_init__(self) -> None:
        try:
            principal = to_decimal(self.principal)
            rate = to_decimal(self.annual_rate_percent)
        except ValueError as exc:
            raise InvalidLoanTerms(str(exc)) from exc
        tenure = _coerce_tenure(self.tenure_months)
        if principal <= 0:
            raise InvalidLoanTerms(f"Principal must be greater than 0; got {principal}")
        if rate < 0:
            raise InvalidLoanTerms(f"Interest rate cannot be negative; got {rate}")
        if tenure < 1:
            raise InvalidLoanTerms(f"Tenure must be at least 1 month; got {tenure}")
        object.__setattr__(self, "principal", principal)
        object.__setattr__(self, "annual_rate_percent", rate)
        object.__setattr__(self, "tenure_months", tenure)

    @classmethod
    def from_tenure(cls, principal: Number, annual_rate_percent: Number, tenure: int, unit: str = "months") -> "LoanTerms":
        """Build terms from a tenure expressed in ``"months"`` or ``"years"``."""
        try:
            months = tenure_to_months(_coerce_tenure(tenure), unit)
        except ValueError as exc:
            raise InvalidLoanTerms(str(exc)) from exc
        return cls(principal, annual_rate_percent, months)

    @property
    def monthly_rate(self) -> Decimal:
        """Per-period rate as a fraction: annual percent / 12 / 100."""
        return self.annual_rate_percent / Decimal(12) / HUNDRED


@dataclass(frozen=True)
class AmortizationResult:
    """Baseline figures for a loan repaid by equal monthly installments.

    ``emi``, ``total_amount`` and ``total_interest`` are rounded to two
    decimal places (half away from zero).
    """

    terms: LoanTerms
    emi: Decimal
    total_amount: Decimal
    total_interest: Decimal

    @property
    def principal_share_percent(self) -> Decimal:
        return round_money(self.terms.principal / self.total_amount * HUNDRED)

    @property
    def interest_share_percent(self) -> Decimal:
        return round_money(self.total_interest / self.total_amount * HUNDRED)


@dataclass(frozen=True)
class PrepaymentPlan:
    """Extra payments made on top of the EMI.

    Attributes
    ----------
    strategy: str
        ``"monthly"`` applies ``extra_monthly`` after every installment,
        ``"yearly"`` applies ``extra_yearly`` after every twelfth installment
        and ``"onetime"`` applies ``one_time_amount`` once, before the first
        installment. Only the field matching the strategy is used.
    extra_monthly, extra_yearly, one_time_amount: Decimal
        Non-negative amounts.
    """

    strategy: str
    extra_monthly: Decimal = ZERO
    extra_yearly: Decimal = ZERO
    one_time_amount: Decimal = ZERO

    def __post_init__(self) -> None:
        strategy = str(self.strategy).lower()
        if strategy not in STRATEGIES:
            raise InvalidPrepaymentPlan(
                f"Prepayment strategy must be one of {', '.join(STRATEGIES)}; got {self.strategy}"
            )
        object.__setattr__(self, "strategy", strategy)
        for name in ("extra_monthly", "extra_yearly", "one_time_amount"):
            try:
                amount = to_decimal(getattr(self, name))
            except ValueError as exc:
                raise InvalidPrepaymentPlan(str(exc)) from exc
            if amount < 0:
                raise InvalidPrepaymentPlan(f"{name} cannot be negative; got {amount}")
            object.__setattr__(self, name, amount)

    @classmethod
    def monthly(cls, amount: Number) -> "PrepaymentPlan":
        return cls(MONTHLY, extra_monthly=amount)

    @classmethod
    def yearly(cls, monthly_equivalent: Number) -> "PrepaymentPlan":
        """Yearly lump sum entered as a monthly figure; applied as twelve times it."""
        try:
            amount = to_decimal(monthly_equivalent) * 12
        except ValueError as exc:
            raise InvalidPrepaymentPlan(str(exc)) from exc
        return cls(YEARLY, extra_yearly=amount)

    @classmethod
    def one_time(cls, amount: Number) -> "PrepaymentPlan":
        return cls(ONE_TIME, one_time_amount=amount)

    @classmethod
    def none(cls) -> "PrepaymentPlan":
        """A plan with no extra payments, i.e. the plain EMI schedule."""
        return cls(MONTHLY)

    @property
    def amount(self) -> Decimal:
        """The amount consulted for this plan's strategy."""
        if self.strategy == MONTHLY:
            return self.extra_monthly
        if self.strategy == YEARLY:
            return self.extra_yearly
        return self.one_time_amount


@dataclass(frozen=True)
class ScheduleEntry:
    """One simulated month.

    ``principal`` is the part of the EMI that reduced the balance and
    ``prepayment`` any extra amount applied in the same month.
    """

    period: int
    opening_balance: Decimal
    interest: Decimal
    principal: Decimal
    prepayment: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class PayoffSchedule:
    """Outcome of simulating a loan under a prepayment plan.

    ``months_to_payoff`` never exceeds ``iteration_cap``. When the cap is hit
    with money still owed, ``converged`` is False and ``remaining_balance``
    holds what is left. ``final_adjustment`` is the EMI rounding residue that
    the last scheduled installment paid on top of the EMI.
    """

    terms: LoanTerms
    emi: Decimal
    plan: PrepaymentPlan
    months_to_payoff: int
    total_interest_paid: Decimal
    total_prepayment_applied: Decimal
    remaining_balance: Decimal
    original_total_interest: Decimal
    final_adjustment: Decimal = ZERO
    entries: Tuple[ScheduleEntry, ...] = field(default=(), repr=False)

    @property
    def iteration_cap(self) -> int:
        return 2 * self.terms.tenure_months

    @property
    def converged(self) -> bool:
        return self.remaining_balance <= 0

    @property
    def months_saved(self) -> int:
        return max(0, self.terms.tenure_months - self.months_to_payoff)

    @property
    def years_saved(self) -> Decimal:
        return Decimal(self.months_saved) / Decimal(12)

    @property
    def interest_saved(self) -> Decimal:
        return max(ZERO, self.original_total_interest - self.total_interest_paid)

    @property
    def savings_percentage(self) -> Decimal:
        if self.original_total_interest <= 0:
            return ZERO
        return self.interest_saved / self.original_total_interest * HUNDRED

    @property
    def total_amount_with_prepayment(self) -> Decimal:
        return self.emi * self.months_to_payoff + self.total_prepayment_applied + self.final_adjustment

    def ensure_converged(self) -> "PayoffSchedule":
        """Return ``self``, or raise ``NonConvergentPrepayment`` if the loan is not paid off."""
        if not self.converged:
            raise NonConvergentPrepayment(self)
        return self


@dataclass(frozen=True)
class LoanOption:
    """A named set of loan terms, one column of a comparison."""

    name: str
    terms: LoanTerms


@dataclass(frozen=True)
class ComparisonRow:
    option: LoanOption
    result: AmortizationResult
    lowest_emi: bool
    lowest_interest: bool
    lowest_total: bool


@dataclass(frozen=True)
class LoanComparison:
    """EMI figures for several loan options and the best value of each metric."""

    rows: Tuple[ComparisonRow, ...]
    lowest_emi: Decimal
    lowest_interest: Decimal
    lowest_total: Decimal

    def best(self, metric: str) -> Optional[ComparisonRow]:
        """Return the first row flagged as lowest for ``metric`` (``emi``, ``interest`` or ``total``)."""
        if metric not in ("emi", "interest", "total"):
            raise ValueError(f"Unknown comparison metric: {metric}")
        flag = f"lowest_{metric}"
        for row in self.rows:
            if getattr(row, flag):
                return row
        return None
