"""Tagged stage results and the combinator that threads them forward."""

from dataclasses import dataclass
from typing import Awaitable, Generic, TypeVar, Union

from prometheus_client import Counter

from city_insights.errors import CityInsightsError
from city_insights.logging_config import logger

T = TypeVar("T")

STAGE_FAILURES = Counter(
    "aggregation_stage_failures_total",
    "Aggregation stage failures",
    ["stage", "outcome"],
)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class SoftFail:
    stage: str
    error: CityInsightsError


@dataclass(frozen=True)
class HardFail:
    stage: str
    error: CityInsightsError


StageResult = Union[Ok[T], SoftFail, HardFail]


async def run_stage(
    stage: str, call: Awaitable[T], *, soft: bool = False
) -> StageResult:
    """Await one stage and tag its outcome.

    Args:
        stage: Stage name used in logs and metrics.
        call: Awaitable performing the stage.
        soft: Whether a failure of this stage is tolerated.

    Returns:
        Ok with the value, or SoftFail/HardFail carrying the raised error.
    """
    try:
        return Ok(await call)
    except CityInsightsError as exc:
        outcome = "soft" if soft else "hard"
        STAGE_FAILURES.labels(stage=stage, outcome=outcome).inc()
        logger.warning(
            "AGGREGATION_STAGE_FAILED", stage=stage, outcome=outcome, error=str(exc)
        )
        if soft:
            return SoftFail(stage, exc)
        return HardFail(stage, exc)


_NO_DEFAULT = object()


def resolve(result: StageResult, default=_NO_DEFAULT):
    """Unwrap a stage result.

    Ok yields its value and SoftFail yields ``default``. HardFail, or a
    SoftFail with no default, re-raises the stage error.
    """
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, SoftFail) and default is not _NO_DEFAULT:
        return default
    raise result.error
