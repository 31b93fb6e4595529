"""Retirement planning entry points with logging and metrics"""

import time
from typing import Any, Dict

from sure_forecast.domain.models import RetirementProjectionResult
from sure_forecast.domain.retirement import RetirementCalculator
from sure_forecast.infrastructure.observability.logging import log_retirement
from sure_forecast.infrastructure.observability.metrics import (
    calculation_duration_histogram,
    record_retirement,
)


class RetirementService:
    def project(self, **inputs: Any) -> RetirementProjectionResult:
        """
        Validate inputs and project retirement savings.

        Raises:
            InvalidArgumentError: inputs fail validation (nothing is computed)
        """
        start_time = time.time()
        calculator = RetirementCalculator(**inputs)

        with calculation_duration_histogram.labels(calculator="retirement").time():
            result = calculator.calculate()

        record_retirement(result.is_on_track)
        log_retirement(
            is_on_track=result.is_on_track,
            gap_cents=result.gap.cents,
            years_until_retirement=result.years_until_retirement,
            duration_ms=(time.time() - start_time) * 1000,
        )
        return result

    def compare_scenarios(self, **inputs: Any) -> Dict[str, RetirementProjectionResult]:
        """Conservative / moderate / aggressive presets for the same person"""
        calculator = RetirementCalculator(**inputs)
        with calculation_duration_histogram.labels(calculator="retirement_scenarios").time():
            return calculator.calculate_scenarios()
