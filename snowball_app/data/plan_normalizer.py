"""
Plan normalization for converting raw investment plan data to InvestmentPlan.

Plans arrive from a UI form either as explicit dated stages or as the
older "phases" layout (a list of {months, amount} blocks that run back to
back from a start date). Both are normalized into ordered, validated
InvestmentStage tuples.
"""

import math
from datetime import date, timedelta
from typing import Any, Optional

import structlog

from ..errors import InvalidPlanError, MalformedDataError
from ..utils.time import add_months
from .models import Frequency, InvestmentPlan, InvestmentStage
from .parsers import parse_date

logger = structlog.get_logger(__name__)


def _finite_amount(value: Any, field: str) -> float:
    """Convert an amount to float and reject negatives and non-finite values."""
    if isinstance(value, bool):
        raise InvalidPlanError(f"Invalid {field}: {value!r}", field=field, value=value)
    try:
        amount = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidPlanError(f"Invalid {field}: {value!r}", field=field, value=value) from e
    if math.isnan(amount) or math.isinf(amount):
        raise InvalidPlanError(f"Invalid {field}: {value!r}", field=field, value=value)
    if amount < 0:
        raise InvalidPlanError(f"{field} must not be negative", field=field, value=value)
    return amount


def validate_plan(plan: InvestmentPlan) -> None:
    """
    Check plan invariants.

    Raises:
        InvalidPlanError: If stages are empty, unordered or overlapping,
            a stage ends before it starts, or an amount is negative
    """
    if not plan.stages:
        raise InvalidPlanError("Investment plan has no stages", field="stages", value=[])

    _finite_amount(plan.initial_lump_sum, "initial_lump_sum")

    previous: Optional[InvestmentStage] = None
    for index, stage in enumerate(plan.stages):
        field = f"stages[{index}]"
        if not isinstance(stage.frequency, Frequency):
            raise InvalidPlanError(f"Unknown frequency: {stage.frequency!r}",
                                   field=f"{field}.frequency", value=stage.frequency)
        _finite_amount(stage.periodic_contribution, f"{field}.periodic_contribution")
        if stage.end_date < stage.start_date:
            raise InvalidPlanError(f"Stage {index} ends before it starts",
                                   field=f"{field}.end_date", value=stage.end_date)
        if previous is not None:
            if stage.start_date < previous.start_date:
                raise InvalidPlanError("Stages must be ordered by start date",
                                       field=f"{field}.start_date", value=stage.start_date)
            if stage.start_date <= previous.end_date:
                raise InvalidPlanError(f"Stage {index} overlaps stage {index - 1}",
                                       field=f"{field}.start_date", value=stage.start_date)
            if stage.start_date - previous.end_date > timedelta(days=1):
                logger.warning(
                    "Gap between investment stages",
                    stage_index=index,
                    previous_end=previous.end_date.isoformat(),
                    start=stage.start_date.isoformat()
                )
        previous = stage


class PlanNormalizer:
    """
    Investment plan normalization pipeline.

    Accepts snake_case or camelCase field names and converts dates,
    amounts and frequencies into an InvestmentPlan.
    """

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """
        Initialize plan normalizer with configuration.

        Args:
            config: Normalization configuration dict
        """
        self.config = config or {}
        self.default_frequency = Frequency(self.config.get("default_frequency", "monthly"))
        self.logger = logger

    def normalize_plan(self, plan_data: dict[str, Any]) -> InvestmentPlan:
        """
        Normalize a raw plan into a validated InvestmentPlan.

        Raises:
            InvalidPlanError: If the plan is missing data or violates invariants
        """
        if not isinstance(plan_data, dict):
            raise InvalidPlanError("Plan must be an object", field="plan", value=plan_data)

        lump_sum = _finite_amount(
            self._get(plan_data, "initial_lump_sum", "initialLumpSum", "initialCapital", default=0),
            "initial_lump_sum",
        )

        if plan_data.get("stages") is not None:
            stages = self._normalize_stages(plan_data["stages"])
        elif plan_data.get("phases") is not None or plan_data.get("investmentPhases") is not None:
            start = self._get(plan_data, "start_date", "startDate")
            if start is None:
                raise InvalidPlanError("Phased plans need a start date", field="start_date")
            stages = self.normalize_phases(
                plan_data.get("phases", plan_data.get("investmentPhases")),
                self._parse_plan_date(start, "start_date"),
            )
        else:
            raise InvalidPlanError("Investment plan has no stages", field="stages")

        plan = InvestmentPlan(stages=tuple(stages), initial_lump_sum=lump_sum)
        validate_plan(plan)

        self.logger.debug(
            "Normalized investment plan",
            stage_count=len(plan.stages),
            initial_lump_sum=plan.initial_lump_sum,
            start=plan.start_date.isoformat(),
            end=plan.end_date.isoformat()
        )
        return plan

    def normalize_phases(self, phases: list[dict[str, Any]], start_date: date) -> list[InvestmentStage]:
        """
        Convert back-to-back {months, amount} phases into monthly stages.

        Each phase starts the day after the previous one ends.
        """
        if not isinstance(phases, list):
            raise InvalidPlanError("Phases must be a list", field="phases", value=phases)

        stages = []
        cursor = start_date
        for index, phase in enumerate(phases):
            if not isinstance(phase, dict):
                raise InvalidPlanError(f"Phase {index} must be an object",
                                       field=f"phases[{index}]", value=phase)
            months = phase.get("months")
            if isinstance(months, bool) or not isinstance(months, int) or months <= 0:
                raise InvalidPlanError(f"Phase {index} months must be a positive integer",
                                       field=f"phases[{index}].months", value=months)
            amount = _finite_amount(phase.get("amount", 0), f"phases[{index}].amount")
            end = add_months(cursor, months) - timedelta(days=1)
            stages.append(InvestmentStage(
                start_date=cursor,
                end_date=end,
                periodic_contribution=amount,
                frequency=Frequency.MONTHLY,
            ))
            cursor = end + timedelta(days=1)
        return stages

    def _normalize_stages(self, raw_stages: Any) -> list[InvestmentStage]:
        if not isinstance(raw_stages, list):
            raise InvalidPlanError("Stages must be a list", field="stages", value=raw_stages)

        stages = []
        for index, raw in enumerate(raw_stages):
            field = f"stages[{index}]"
            if not isinstance(raw, dict):
                raise InvalidPlanError(f"Stage {index} must be an object", field=field, value=raw)

            start = self._get(raw, "start_date", "startDate")
            end = self._get(raw, "end_date", "endDate")
            if start is None or end is None:
                raise InvalidPlanError(f"Stage {index} needs start and end dates", field=field)

            frequency_raw = raw.get("frequency") or self.default_frequency.value
            try:
                frequency = Frequency(str(frequency_raw).lower())
            except ValueError as e:
                raise InvalidPlanError(f"Unknown frequency: {frequency_raw!r}",
                                       field=f"{field}.frequency", value=frequency_raw) from e

            contribution = self._get(raw, "periodic_contribution", "periodicContribution",
                                     "amount", default=0)
            stages.append(InvestmentStage(
                start_date=self._parse_plan_date(start, f"{field}.start_date"),
                end_date=self._parse_plan_date(end, f"{field}.end_date"),
                periodic_contribution=_finite_amount(contribution, f"{field}.periodic_contribution"),
                frequency=frequency,
            ))
        return stages

    @staticmethod
    def _parse_plan_date(value: Any, field: str) -> date:
        try:
            return parse_date(value)
        except MalformedDataError as e:
            raise InvalidPlanError(f"Invalid date for {field}: {value!r}",
                                   field=field, value=value) from e

    @staticmethod
    def _get(data: dict[str, Any], *names: str, default: Any = None) -> Any:
        for name in names:
            if data.get(name) is not None:
                return data[name]
        return default
