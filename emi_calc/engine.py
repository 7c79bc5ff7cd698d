"""Core calculation engine for the EMI calculator.

This module implements the financial logic: the equated monthly installment
for a loan, a month-by-month payoff simulation under a prepayment plan, and
the comparison of several loan options. Every function is pure; results are
returned as frozen dataclasses from ``data_models``.
"""

from __future__ import annotations

import logging
from decimal import Decimal, Overflow, getcontext
from typing import Iterable, List, NamedTuple, Optional, Tuple

from .data_models import (
    MONTHLY,
    ONE_TIME,
    YEARLY,
    ZERO,
    AmortizationResult,
    ComparisonRow,
    LoanComparison,
    LoanOption,
    LoanTerms,
    PayoffSchedule,
    PrepaymentPlan,
    ScheduleEntry,
)
from .errors import InvalidLoanTerms
from .utils import Number, round_money, to_decimal

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

HALF_PAISA = Decimal("0.005")


class _ScheduleRun(NamedTuple):
    months: int
    total_interest: Decimal
    total_prepayment: Decimal
    final_adjustment: Decimal
    balance: Decimal
    entries: Tuple[ScheduleEntry, ...]


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``. When ``(1 + i)^n`` is too large for a
    Decimal the payment has already converged to the interest-only ``P * i``.
    """
    if rate_per_month == 0:
        return principal / Decimal(term)
    try:
        factor = (1 + rate_per_month) ** term
    except Overflow:
        return principal * rate_per_month
    return principal * (rate_per_month * factor) / (factor - 1)


def _total_amount(principal: Decimal, emi: Decimal, term: int) -> Decimal:
    # Rounding the EMI down can leave emi * n a few paise under the principal
    # (e.g. 83,333.33 * 12); interest is never negative.
    return max(round_money(emi * term), principal)


def compute_emi_for_terms(terms: LoanTerms) -> AmortizationResult:
    """Compute the EMI, total payment and total interest for validated terms."""
    emi = round_money(_calculate_annuity_payment(terms.principal, terms.monthly_rate, terms.tenure_months))
    total_amount = _total_amount(terms.principal, emi, terms.tenure_months)
    total_interest = round_money(total_amount - terms.principal)
    logger.debug(
        "EMI for %s at %s%% over %d months: %s",
        terms.principal,
        terms.annual_rate_percent,
        terms.tenure_months,
        emi,
    )
    return AmortizationResult(
        terms=terms,
        emi=emi,
        total_amount=total_amount,
        total_interest=total_interest,
    )


def compute_emi(principal: Number, annual_rate_percent: Number, tenure_months: int) -> AmortizationResult:
    """Compute the equated monthly installment for a loan.

    Parameters
    ----------
    principal:
        Amount borrowed; must be positive.
    annual_rate_percent:
        Nominal annual rate in percent; must not be negative.
    tenure_months:
        Number of installments; must be at least one.

    Returns
    -------
    AmortizationResult
        ``emi``, ``total_amount`` and ``total_interest`` rounded to two
        decimal places.

    Raises
    ------
    InvalidLoanTerms
        If any input is out of range or not numeric.
    """
    return compute_emi_for_terms(LoanTerms(principal, annual_rate_percent, tenure_months))


def _rounding_shortfall_limit(rate_per_month: Decimal, term: int) -> Optional[Decimal]:
    """Return the largest balance a rounded EMI can leave after ``term`` installments.

    Rounding to the paisa shaves at most half a paisa off each installment;
    that shortfall compounds at the loan rate until the last one. ``None``
    means the bound is too large to represent.
    """
    if rate_per_month == 0:
        return HALF_PAISA * term
    try:
        growth = ((1 + rate_per_month) ** term - 1) / rate_per_month
    except Overflow:
        return None
    return HALF_PAISA * growth


def _run_schedule(terms: LoanTerms, installment: Decimal, plan: PrepaymentPlan) -> _ScheduleRun:
    rate_per_month = terms.monthly_rate
    cap = 2 * terms.tenure_months
    shortfall_limit = _rounding_shortfall_limit(rate_per_month, terms.tenure_months)
    balance = terms.principal
    total_interest = ZERO
    total_prepayment = ZERO
    final_adjustment = ZERO
    entries: List[ScheduleEntry] = []

    if plan.strategy == ONE_TIME and plan.one_time_amount > 0:
        applied = min(plan.one_time_amount, balance)
        balance -= applied
        total_prepayment += applied

    months = 0
    while balance > 0 and months < cap:
        opening_balance = balance
        interest = balance * rate_per_month
        total_interest += interest

        principal_part = max(ZERO, min(installment - interest, balance))
        balance -= principal_part

        extra = ZERO
        if plan.strategy == MONTHLY and plan.extra_monthly > 0 and balance > 0:
            extra = min(plan.extra_monthly, balance)
        elif plan.strategy == YEARLY and (months + 1) % 12 == 0 and plan.extra_yearly > 0 and balance > 0:
            extra = min(plan.extra_yearly, balance)
        balance -= extra
        total_prepayment += extra

        months += 1
        # The last scheduled installment also clears what EMI rounding left behind.
        if months == terms.tenure_months and 0 < balance and shortfall_limit is not None and balance <= shortfall_limit:
            final_adjustment = balance
            principal_part += balance
            balance = ZERO

        entries.append(
            ScheduleEntry(
                period=months,
                opening_balance=opening_balance,
                interest=interest,
                principal=principal_part,
                prepayment=extra,
                closing_balance=balance,
            )
        )

    return _ScheduleRun(months, total_interest, total_prepayment, final_adjustment, balance, tuple(entries))


def simulate_prepayment(
    principal: Number,
    annual_rate_percent: Number,
    tenure_months: int,
    emi: Number,
    plan: PrepaymentPlan,
) -> PayoffSchedule:
    """Simulate paying a loan off with ``emi`` each month plus the extra payments of ``plan``.

    Each month interest accrues on the outstanding balance, the rest of the
    EMI reduces the balance, and then the plan's extra amount (if due) is
    applied. The loop stops as soon as the balance reaches zero, or after
    ``2 * tenure_months`` months. An EMI smaller than the month's interest
    reduces nothing; the balance never grows. If the EMI was rounded down,
    installment ``tenure_months`` settles the few paise left over, so a plain
    schedule ends on time.

    ``original_total_interest`` is the interest of the same EMI with no extra
    payments, which makes ``interest_saved`` and ``months_saved`` zero for an
    empty plan and never negative for any other.

    Reaching the cap is not an error: the returned schedule has
    ``converged == False`` and a positive ``remaining_balance``.
    """
    terms = LoanTerms(principal, annual_rate_percent, tenure_months)
    try:
        installment = to_decimal(emi)
    except ValueError as exc:
        raise InvalidLoanTerms(str(exc)) from exc
    if installment <= 0:
        raise InvalidLoanTerms(f"EMI must be greater than 0; got {installment}")

    run = _run_schedule(terms, installment, plan)
    if plan.amount > 0:
        baseline = _run_schedule(terms, installment, PrepaymentPlan.none())
    else:
        baseline = run

    schedule = PayoffSchedule(
        terms=terms,
        emi=installment,
        plan=plan,
        months_to_payoff=run.months,
        total_interest_paid=run.total_interest,
        total_prepayment_applied=run.total_prepayment,
        remaining_balance=run.balance,
        original_total_interest=baseline.total_interest,
        final_adjustment=run.final_adjustment,
        entries=run.entries,
    )
    if not schedule.converged:
        logger.warning(
            "%s plan does not pay off %s within %d months; %.2f outstanding",
            plan.strategy,
            terms.principal,
            schedule.iteration_cap,
            run.balance,
        )
    else:
        logger.debug(
            "%s plan pays off %s in %d months (%d saved)",
            plan.strategy,
            terms.principal,
            run.months,
            schedule.months_saved,
        )
    return schedule


def simulate_plan(result: AmortizationResult, plan: PrepaymentPlan) -> PayoffSchedule:
    """Run ``simulate_prepayment`` for the terms and EMI of a computed result."""
    terms = result.terms
    return simulate_prepayment(
        terms.principal,
        terms.annual_rate_percent,
        terms.tenure_months,
        result.emi,
        plan,
    )


def compare_loans(options: Iterable[LoanOption]) -> LoanComparison:
    """Compute the EMI figures of each option and flag the cheapest ones.

    Every option whose value equals the minimum is flagged, so ties mark more
    than one row.
    """
    options = list(options)
    if not options:
        raise ValueError("At least one loan option is required for a comparison")
    results = [compute_emi_for_terms(option.terms) for option in options]
    lowest_emi = min(r.emi for r in results)
    lowest_interest = min(r.total_interest for r in results)
    lowest_total = min(r.total_amount for r in results)
    rows = tuple(
        ComparisonRow(
            option=option,
            result=result,
            lowest_emi=result.emi == lowest_emi,
            lowest_interest=result.total_interest == lowest_interest,
            lowest_total=result.total_amount == lowest_total,
        )
        for option, result in zip(options, results)
    )
    return LoanComparison(
        rows=rows,
        lowest_emi=lowest_emi,
        lowest_interest=lowest_interest,
        lowest_total=lowest_total,
    )
