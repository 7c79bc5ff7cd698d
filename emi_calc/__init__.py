"""EMI calculator: equated monthly installments, prepayment simulation and loan comparison."""

from .data_models import (
    AmortizationResult,
    ComparisonRow,
    LoanComparison,
    LoanOption,
    LoanTerms,
    PayoffSchedule,
    PrepaymentPlan,
    ScheduleEntry,
)
from .engine import compare_loans, compute_emi, compute_emi_for_terms, simulate_plan, simulate_prepayment
from .errors import EmiCalcError, InvalidLoanTerms, InvalidPrepaymentPlan, NonConvergentPrepayment

__all__ = [
    "AmortizationResult",
    "ComparisonRow",
    "EmiCalcError",
    "InvalidLoanTerms",
    "InvalidPrepaymentPlan",
    "LoanComparison",
    "LoanOption",
    "LoanTerms",
    "NonConvergentPrepayment",
    "PayoffSchedule",
    "PrepaymentPlan",
    "ScheduleEntry",
    "compare_loans",
    "compute_emi",
    "compute_emi_for_terms",
    "simulate_plan",
    "simulate_prepayment",
]
