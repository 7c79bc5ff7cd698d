import logging
import os

from flask import Flask, jsonify, request

from emi_calc.config import MAX_COMPARISON_OPTIONS, configure_logging, defaults
from emi_calc.data_models import MONTHLY, ONE_TIME, YEARLY, LoanOption, LoanTerms, PrepaymentPlan
from emi_calc.engine import compare_loans, compute_emi_for_terms, simulate_plan
from emi_calc.main import comparison_to_dict, payoff_to_dict, result_to_dict
from emi_calc.utils import parse_amount

logger = logging.getLogger(__name__)

app = Flask(__name__)


def _payload() -> dict:
    """Return the request body as a dict, accepting JSON or form data."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _field(data: dict, name: str, default=None):
    value = data.get(name, default)
    if value is None or value == "":
        raise ValueError(f"Missing field: {name}")
    return value


def _amount(value) -> object:
    # Numbers pass straight through; strings may carry "25l"-style suffixes.
    if isinstance(value, str):
        return parse_amount(value)
    return value


def _data_to_terms(data: dict) -> LoanTerms:
    tenure = _field(data, "tenure")
    if isinstance(tenure, str):
        tenure = int(tenure)
    return LoanTerms.from_tenure(
        _amount(_field(data, "principal")),
        _field(data, "rate"),
        tenure,
        str(data.get("tenure_unit") or "months"),
    )


def _data_to_plan(data: dict) -> PrepaymentPlan:
    strategy = str(data.get("strategy", MONTHLY)).lower()
    amount = _amount(_field(data, "amount"))
    if strategy == YEARLY:
        return PrepaymentPlan.yearly(amount)
    if strategy == ONE_TIME:
        return PrepaymentPlan.one_time(amount)
    return PrepaymentPlan(strategy, extra_monthly=amount)


@app.errorhandler(ValueError)
def handle_value_error(exc: ValueError):
    logger.warning("Rejected %s %s: %s", request.method, request.path, exc)
    return jsonify({"error": str(exc)}), 400


@app.get("/healthz")
def healthz():
    return jsonify({"status": "ok"})


@app.get("/api/defaults")
def get_defaults():
    return jsonify(defaults())


@app.post("/api/emi")
def emi():
    terms = _data_to_terms(_payload())
    return jsonify(result_to_dict(compute_emi_for_terms(terms)))


@app.post("/api/prepayment")
def prepayment():
    data = _payload()
    terms = _data_to_terms(data)
    plan = _data_to_plan(data)
    result = compute_emi_for_terms(terms)
    schedule = simulate_plan(result, plan)
    include_entries = str(data.get("include_schedule", "")).lower() in ("1", "true", "yes")
    payload = payoff_to_dict(schedule, include_entries=include_entries)
    payload["status"] = "paid_off" if schedule.converged else "non_convergent"
    return jsonify({"result": result_to_dict(result), "prepayment": payload})


@app.post("/api/compare")
def compare():
    """Compare up to four loans.

    The options are a list of objects, which form data cannot carry, so this
    endpoint only reads a JSON body: ``{"options": [{"principal": ...}, ...]}``.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Comparison expects a JSON object body with an 'options' list")
    options = data.get("options")
    if not isinstance(options, list) or not options:
        raise ValueError("Field 'options' must be a non-empty list")
    if len(options) > MAX_COMPARISON_OPTIONS:
        raise ValueError(f"At most {MAX_COMPARISON_OPTIONS} options can be compared")
    loan_options = []
    for index, item in enumerate(options):
        if not isinstance(item, dict):
            raise ValueError("Each option must be a JSON object")
        name = item.get("name") or f"Option {chr(ord('A') + index)}"
        loan_options.append(LoanOption(name=name, terms=_data_to_terms(item)))
    return jsonify(comparison_to_dict(compare_loans(loan_options)))


def main() -> None:
    try:
        configure_logging()
    except ValueError as exc:
        configure_logging("WARNING")
        logger.warning("%s; logging at WARNING instead", exc)
    host = os.environ.get("EMI_WEB_HOST", "0.0.0.0")
    port = int(os.environ.get("EMI_WEB_PORT", "8710"))
    logger.info("Starting EMI calculator API on %s:%d", host, port)
    app.run(host=host, port=port)


if __name__ == "__main__":
    main()
