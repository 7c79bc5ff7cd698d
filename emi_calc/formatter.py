"""Output helpers for the EMI calculator.

Plain-text renderings of EMI results, prepayment outcomes and loan
comparisons for the terminal. Amounts use Indian digit grouping
(``25,00,000.00``) since the calculator's users quote loans in lakh and
crore; the arithmetic itself is currency independent.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from .data_models import AmortizationResult, LoanComparison, PayoffSchedule, ScheduleEntry
from .utils import round_money


def format_inr(amount: Decimal) -> str:
    """Format an amount with Indian digit grouping and two decimals.

    >>> format_inr(Decimal("2500000"))
    '25,00,000.00'
    """
    value = round_money(Decimal(amount))
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    last_three = whole[-3:]
    rest = whole[:-3]
    groups = []
    while len(rest) > 2:
        groups.insert(0, rest[-2:])
        rest = rest[:-2]
    if rest:
        groups.insert(0, rest)
    groups.append(last_three)
    return f"{sign}{','.join(groups)}.{frac}"


def print_result(result: AmortizationResult) -> None:
    """Print the EMI figures of a single loan."""
    terms = result.terms
    print("EMI")
    print("-" * 72)
    print(f"Loan amount        : {format_inr(terms.principal)}")
    print(f"Interest rate      : {terms.annual_rate_percent}% p.a.")
    print(f"Tenure             : {terms.tenure_months} months")
    print(f"Monthly EMI        : {format_inr(result.emi)}")
    print(f"Total interest     : {format_inr(result.total_interest)}")
    print(f"Total amount       : {format_inr(result.total_amount)}")
    print(
        f"Principal/interest : {result.principal_share_percent}% / {result.interest_share_percent}%"
    )
    print("-" * 72)


def print_payoff(schedule: PayoffSchedule) -> None:
    """Print the outcome of a prepayment simulation against the plain EMI schedule."""
    print("Prepayment")
    print("-" * 72)
    print(f"Strategy           : {schedule.plan.strategy} ({format_inr(schedule.plan.amount)})")
    print(f"Original tenure    : {schedule.terms.tenure_months} months")
    print(f"New tenure         : {schedule.months_to_payoff} months")
    print(f"Time saved         : {schedule.years_saved:.1f} years ({schedule.months_saved} months)")
    print(f"Original interest  : {format_inr(schedule.original_total_interest)}")
    print(f"New interest       : {format_inr(schedule.total_interest_paid)}")
    print(f"Interest saved     : {format_inr(schedule.interest_saved)} ({schedule.savings_percentage:.1f}%)")
    print(f"Total prepayment   : {format_inr(schedule.total_prepayment_applied)}")
    print(f"Total paid         : {format_inr(schedule.total_amount_with_prepayment)}")
    if not schedule.converged:
        print(
            f"Not paid off after {schedule.months_to_payoff} months; "
            f"{format_inr(schedule.remaining_balance)} outstanding"
        )
    print("-" * 72)


def print_schedule(entries: Iterable[ScheduleEntry]) -> None:
    """Print simulated months as a tab-separated table."""
    headers = ["Period", "Opening", "Interest", "Principal", "Prepay", "Closing"]
    print("\t".join(headers))
    for entry in entries:
        row = [
            str(entry.period),
            f"{entry.opening_balance:.2f}",
            f"{entry.interest:.2f}",
            f"{entry.principal:.2f}",
            f"{entry.prepayment:.2f}",
            f"{entry.closing_balance:.2f}",
        ]
        print("\t".join(row))


def print_comparison(comparison: LoanComparison) -> None:
    """Print loan options side by side, marking the lowest value of each metric with ``*``."""
    print("Comparison")
    print("=" * 72)
    print(f"{'Option':14s} {'EMI':>14s} {'Interest':>18s} {'Total':>18s}")
    for row in comparison.rows:
        emi = format_inr(row.result.emi) + ("*" if row.lowest_emi else " ")
        interest = format_inr(row.result.total_interest) + ("*" if row.lowest_interest else " ")
        total = format_inr(row.result.total_amount) + ("*" if row.lowest_total else " ")
        print(f"{row.option.name:14s} {emi:>14s} {interest:>18s} {total:>18s}")
    print("=" * 72)
    for metric, label in (("emi", "Lowest EMI"), ("interest", "Lowest interest"), ("total", "Lowest total")):
        best = comparison.best(metric)
        if best is not None:
            print(f"{label:18s} : {best.option.name}")
