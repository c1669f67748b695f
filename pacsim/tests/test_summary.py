from __future__ import annotations

import io
import unittest
from contextlib import redirect_stdout

import pandas as pd

from pacsim.helpers.pac.calibration import calibrate
from pacsim.helpers.pac.constants import BASELINE_AMOUNT, ELIGIBLE_AREA, WEIGHT
from pacsim.helpers.pac.scenario import BudgetConstantScenario, simulate_scenario
from pacsim.helpers.pac.summary import (
    budget_gap,
    format_currency,
    format_percent,
    format_value,
    print_budget_check,
    print_calibration_summary,
)


class TestSummary(unittest.TestCase):
    def test_formatting(self) -> None:
        self.assertEqual(format_currency(1234567.4), "1,234,567 €")
        self.assertEqual(format_percent(12.345), "12.35%")
        self.assertEqual(format_value(0.5, 2), "0.50")
        self.assertEqual(format_value(float("nan")), "--")
        self.assertEqual(format_currency(pd.NA), "--")

    def test_print_calibration_summary(self) -> None:
        result = calibrate(lambda p: 2.0 * p, 10.0, 0.0, 10.0, name="rate")
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            print_calibration_summary(result)
        self.assertTrue(buffer.getvalue().startswith("rate: parameter=5.000000"))

    def test_print_budget_check(self) -> None:
        holdings = pd.DataFrame(
            {
                WEIGHT: [1.0, 1.0],
                ELIGIBLE_AREA: [10.0, 30.0],
                BASELINE_AMOUNT: [100.0, 400.0],
            }
        )
        result = simulate_scenario(holdings, BudgetConstantScenario())
        gap, gap_pct = budget_gap(result)
        self.assertAlmostEqual(gap, 0.0, places=6)
        self.assertAlmostEqual(gap_pct, 0.0, places=6)
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            print_budget_check(result)
        self.assertIn("target=500 €", buffer.getvalue())


if __name__ == "__main__":
    unittest.main()
