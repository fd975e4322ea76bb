# tests/conftest.py
from __future__ import annotations

import pytest
from click.testing import CliRunner

from mortgage_calc_web.app import create_app
from mortgage_calc_web.scenario_store import ScenarioStore


# -------- Sample loans --------
@pytest.fixture
def standard_loan() -> dict:
    """4,000,000 at 8.5 % over 20 years on a 5,000,000 property."""
    return {
        "loanAmount": 4_000_000,
        "interestRate": 8.5,
        "loanTenure": 20,
        "propertyPrice": 5_000_000,
        "downPayment": 1_000_000,
    }


@pytest.fixture
def zero_rate_loan() -> dict:
    return {"loanAmount": 1_200_000, "interestRate": 0, "loanTenure": 10}


# -------- Web fixtures --------
@pytest.fixture
def app():
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SCENARIO_DATABASE_URL": "sqlite://",
            "SCENARIO_MAX_PER_USER": 3,
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store() -> ScenarioStore:
    return ScenarioStore("sqlite://", max_per_user=3)


# -------- CLI --------
@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()
