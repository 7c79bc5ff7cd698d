from decimal import Decimal

import pytest

from emi_calc.data_models import LoanTerms
from emi_calc.engine import compute_emi_for_terms


@pytest.fixture
def home_loan() -> LoanTerms:
    """25 lakh at 8.5% over 20 years, the calculator's default loan."""
    return LoanTerms(Decimal("2500000"), Decimal("8.5"), 240)


@pytest.fixture
def home_loan_result(home_loan):
    return compute_emi_for_terms(home_loan)


@pytest.fixture
def underpaid_loan() -> LoanTerms:
    # 1,000 of interest a month against a 500 EMI
    return LoanTerms(Decimal("100000"), Decimal("12"), 12)
