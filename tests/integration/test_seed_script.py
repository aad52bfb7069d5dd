"""
Integration tests - Demo seeding script.
"""

import importlib.util
from decimal import Decimal
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "seed_database.py"


@pytest.fixture(scope="module")
def seed_script():
    spec = importlib.util.spec_from_file_location("seed_database", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestSeedScript:

    def test_seed_posts_a_balanced_demo_ledger(self, seed_script, db, sample_company_id):
        result = seed_script.seed(db, sample_company_id)

        assert result["accounts"] == 15
        assert result["entries"] == 3
        trial_balance = result["trial_balance"]
        assert trial_balance.is_balanced
        assert trial_balance.total_debit == Decimal("52625.00")

    def test_second_run_seeds_nothing(self, seed_script, db, sample_company_id):
        seed_script.seed(db, sample_company_id)
        again = seed_script.seed(db, sample_company_id)
        assert again["accounts"] == 0
        assert again["entries"] == 0
