"""Command‑line interface for the EMI calculator.

This module uses the ``click`` library to implement a multi‑command
interface. Users can compute a loan's EMI, simulate prepayment plans or
compare several loan options. Results are printed to the terminal or
exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .config import (
    DEFAULT_EXTRA_PAYMENT,
    DEFAULT_ONE_TIME_PAYMENT,
    MAX_COMPARISON_OPTIONS,
    configure_logging,
)
from .data_models import MONTHLY, ONE_TIME, STRATEGIES, YEARLY, AmortizationResult, LoanComparison, LoanOption, LoanTerms, PayoffSchedule, PrepaymentPlan
from .engine import compare_loans, compute_emi_for_terms, simulate_plan
from .errors import EmiCalcError, NonConvergentPrepayment
from .formatter import print_comparison, print_payoff, print_result, print_schedule
from .utils import TENURE_UNITS, parse_amount


def _amount(value: str) -> Any:
    try:
        return parse_amount(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def build_terms_from_options(principal: str, rate: float, tenure: int, unit: str) -> LoanTerms:
    try:
        return LoanTerms.from_tenure(_amount(principal), str(rate), tenure, unit)
    except EmiCalcError as exc:
        raise click.BadParameter(str(exc))


def build_plan_from_options(strategy: str, amount: Optional[str]) -> PrepaymentPlan:
    """Build a plan from the CLI options.

    For the yearly strategy ``amount`` is the monthly figure; twelve times it
    is paid at the end of each year.
    """
    if amount is None:
        value = DEFAULT_ONE_TIME_PAYMENT if strategy == ONE_TIME else DEFAULT_EXTRA_PAYMENT
    else:
        value = _amount(amount)
    try:
        if strategy == MONTHLY:
            return PrepaymentPlan.monthly(value)
        if strategy == YEARLY:
            return PrepaymentPlan.yearly(value)
        return PrepaymentPlan.one_time(value)
    except EmiCalcError as exc:
        raise click.BadParameter(str(exc))


def parse_option_strings(values: Tuple[str, ...]) -> List[LoanOption]:
    """Parse ``NAME:AMOUNT:RATE:TENURE[:UNIT]`` strings into loan options."""
    options: List[LoanOption] = []
    for item in values:
        parts = item.split(":")
        if len(parts) not in (4, 5):
            raise click.BadParameter(
                f"Option must be in NAME:AMOUNT:RATE:TENURE[:UNIT] format; got {item}"
            )
        name, amount_str, rate_str, tenure_str = parts[:4]
        unit = parts[4] if len(parts) == 5 else "years"
        try:
            tenure = int(tenure_str)
        except ValueError:
            raise click.BadParameter(f"Tenure must be a whole number; got {tenure_str}")
        try:
            terms = LoanTerms.from_tenure(_amount(amount_str), rate_str, tenure, unit)
        except EmiCalcError as exc:
            raise click.BadParameter(f"{name}: {exc}")
        options.append(LoanOption(name=name, terms=terms))
    return options


def result_to_dict(result: AmortizationResult) -> Dict[str, Any]:
    terms = result.terms
    return {
        "principal": float(terms.principal),
        "annual_rate_percent": float(terms.annual_rate_percent),
        "tenure_months": terms.tenure_months,
        "emi": float(result.emi),
        "total_amount": float(result.total_amount),
        "total_interest": float(result.total_interest),
        "principal_share_percent": float(result.principal_share_percent),
        "interest_share_percent": float(result.interest_share_percent),
    }


def payoff_to_dict(schedule: PayoffSchedule, include_entries: bool = False) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "strategy": schedule.plan.strategy,
        "amount": float(schedule.plan.amount),
        "emi": float(schedule.emi),
        "original_tenure_months": schedule.terms.tenure_months,
        "months_to_payoff": schedule.months_to_payoff,
        "months_saved": schedule.months_saved,
        "years_saved": float(schedule.years_saved),
        "original_total_interest": float(schedule.original_total_interest),
        "total_interest_paid": float(schedule.total_interest_paid),
        "interest_saved": float(schedule.interest_saved),
        "savings_percentage": float(schedule.savings_percentage),
        "total_prepayment_applied": float(schedule.total_prepayment_applied),
        "final_adjustment": float(schedule.final_adjustment),
        "total_amount_with_prepayment": float(schedule.total_amount_with_prepayment),
        "remaining_balance": float(schedule.remaining_balance),
        "converged": schedule.converged,
    }
    if include_entries:
        data["schedule"] = [
            {
                "period": e.period,
                "opening_balance": float(e.opening_balance),
                "interest": float(e.interest),
                "principal": float(e.principal),
                "prepayment": float(e.prepayment),
                "closing_balance": float(e.closing_balance),
            }
            for e in schedule.entries
        ]
    return data


def comparison_to_dict(comparison: LoanComparison) -> Dict[str, Any]:
    return {
        "options": [
            dict(
                name=row.option.name,
                lowest_emi=row.lowest_emi,
                lowest_interest=row.lowest_interest,
                lowest_total=row.lowest_total,
                **result_to_dict(row.result),
            )
            for row in comparison.rows
        ],
        "lowest_emi": float(comparison.lowest_emi),
        "lowest_interest": float(comparison.lowest_interest),
        "lowest_total": float(comparison.lowest_total),
    }


def export_to_json(path: Path, data: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: PayoffSchedule) -> None:
    """Export the simulated months to a CSV file."""
    header = ["Period", "Opening_Balance", "Interest", "Principal", "Prepayment", "Closing_Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule.entries:
            writer.writerow(
                [
                    e.period,
                    f"{e.opening_balance:.2f}",
                    f"{e.interest:.2f}",
                    f"{e.principal:.2f}",
                    f"{e.prepayment:.2f}",
                    f"{e.closing_balance:.2f}",
                ]
            )


def loan_options(func):
    func = click.option("--unit", "unit", type=click.Choice(TENURE_UNITS), default="months", help="Unit of --tenure")(func)
    func = click.option("--tenure", "-t", "tenure", required=True, type=int, help="Loan tenure")(func)
    func = click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")(func)
    func = click.option("--principal", "-p", "principal", required=True, help="Loan amount, e.g. 2500000, 25l or 2.5m")(func)
    return func


@click.group()
@click.option("--log-level", "log_level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), help="Logging level (default: $EMI_CALC_LOG_LEVEL or WARNING)")
def cli(log_level: Optional[str]) -> None:
    """An EMI calculator with prepayment simulation and loan comparison."""
    try:
        configure_logging(log_level)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'--log-level' / $EMI_CALC_LOG_LEVEL")


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def emi(principal: str, rate: float, tenure: int, unit: str, output: Optional[str]) -> None:
    """Compute the EMI, total interest and total amount for a loan."""
    terms = build_terms_from_options(principal, rate, tenure, unit)
    result = compute_emi_for_terms(terms)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("EMI export must use .json extension")
        export_to_json(path, {"result": result_to_dict(result)})
        click.echo(f"Result exported to {path}")
    else:
        print_result(result)


@cli.command()
@loan_options
@click.option("--strategy", "strategy", type=click.Choice(STRATEGIES), default=MONTHLY, help="When the extra amount is paid")
@click.option(
    "--amount",
    "amount",
    help="Extra amount. For 'yearly' this is a monthly figure paid as a 12x lump sum at each year end.",
)
@click.option("--schedule", "show_schedule", is_flag=True, help="Also print the month-by-month schedule")
@click.option("--strict", is_flag=True, help="Exit with an error if the plan does not pay the loan off")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def prepay(
    principal: str,
    rate: float,
    tenure: int,
    unit: str,
    strategy: str,
    amount: Optional[str],
    show_schedule: bool,
    strict: bool,
    output: Optional[str],
) -> None:
    """Simulate a prepayment plan and show the time and interest saved."""
    terms = build_terms_from_options(principal, rate, tenure, unit)
    plan = build_plan_from_options(strategy, amount)
    result = compute_emi_for_terms(terms)
    schedule = simulate_plan(result, plan)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, {"result": result_to_dict(result), "prepayment": payoff_to_dict(schedule, include_entries=True)})
            click.echo(f"Schedule exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, schedule)
            click.echo(f"Schedule exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
    else:
        print_result(result)
        print_payoff(schedule)
        if show_schedule:
            print_schedule(schedule.entries)
    if strict:
        try:
            schedule.ensure_converged()
        except NonConvergentPrepayment as exc:
            raise click.ClickException(str(exc))


@cli.command()
@click.option(
    "--option",
    "option",
    multiple=True,
    required=True,
    help="Loan option in NAME:AMOUNT:RATE:TENURE[:UNIT] format (unit defaults to years)",
)
@click.option("--output", "output", type=str, help="Output file path (.json)")
def compare(option: Tuple[str, ...], output: Optional[str]) -> None:
    """Compare up to four loan options.

    For example:

        emi-calc compare --option "A:25l:8.5:20" --option "B:25l:9:15"
    """
    if len(option) > MAX_COMPARISON_OPTIONS:
        raise click.UsageError(f"At most {MAX_COMPARISON_OPTIONS} options can be compared")
    comparison = compare_loans(parse_option_strings(option))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Comparison export must use .json extension")
        export_to_json(path, comparison_to_dict(comparison))
        click.echo(f"Comparison exported to {path}")
    else:
        print_comparison(comparison)


if __name__ == "__main__":
    cli()
