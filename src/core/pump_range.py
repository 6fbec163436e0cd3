"""Parsing utilities for pump range strings (e.g. ``1,3-8,21``)."""

import logging
import re
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.config import constants


logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"[0-9]+")


class GrammarStage(StrEnum):
    """Validation stage that rejected a pump range string."""

    EMPTY = "empty"
    CHARACTER_SHAPE = "character_shape"
    RANGE_BOUNDS = "range_bounds"
    BOUND_ORDER = "bound_order"
    VALVE_DOMAIN = "valve_domain"


class GrammarError(BaseModel):
    """User-facing error for a rejected pump range string."""

    model_config = ConfigDict(frozen=True)

    stage: GrammarStage = Field(..., description="Stage that rejected the input")
    message: str = Field(..., description="Message to render next to the pumps field")


class RangeToken(BaseModel):
    """A single valve (``high is None``) or an inclusive ``low-high`` range."""

    model_config = ConfigDict(frozen=True)

    low: int
    high: int | None = None

    @model_validator(mode="after")
    def check_order(self) -> "RangeToken":
        """Ranges must have a strictly smaller first bound."""
        if self.high is not None and self.low >= self.high:
            msg = f"Range {self.low}-{self.high} must have a strictly smaller first bound"
            raise ValueError(msg)
        return self

    @property
    def is_range(self) -> bool:
        return self.high is not None

    def valves(self) -> range:
        """Return the valve indices covered by this token."""
        return range(self.low, (self.high if self.high is not None else self.low) + 1)

    def __str__(self) -> str:
        return f"{self.low}-{self.high}" if self.high is not None else str(self.low)


class PumpSpec(BaseModel):
    """Parsed pump assignment.

    ``tokens`` keeps the order the operator typed for redisplay; ``valves`` is the
    sorted union of every index the tokens cover.
    """

    model_config = ConfigDict(frozen=True)

    tokens: tuple[RangeToken, ...] = Field(..., min_length=1)
    valves: tuple[int, ...] = Field(..., min_length=1)

    @classmethod
    def from_tokens(cls, tokens: list[RangeToken]) -> "PumpSpec":
        covered = {valve for token in tokens for valve in token.valves()}
        return cls(tokens=tuple(tokens), valves=tuple(sorted(covered)))

    def format(self) -> str:
        """Render the tokens back into the comma-separated form."""
        return ",".join(str(token) for token in self.tokens)


class PumpSpecResult(BaseModel):
    """Result of parsing a pump range string."""

    spec: PumpSpec | None = Field(None, description="Parsed spec if the input was valid")
    error: GrammarError | None = Field(None, description="First failing stage if the input was invalid")

    @property
    def success(self) -> bool:
        return self.spec is not None


MESSAGES: dict[GrammarStage, str] = {
    GrammarStage.EMPTY: "Pumps are required",
    GrammarStage.CHARACTER_SHAPE: "Input contains non-numeric character or doesn't follow the format",
    GrammarStage.RANGE_BOUNDS: "Range missing bound",
    GrammarStage.BOUND_ORDER: "Larger bound is first",
    GrammarStage.VALVE_DOMAIN: (
        f"Valve number must be >= {constants.MIN_VALVE} and <= {constants.MAX_VALVE}"
    ),
}


class _RawToken(NamedTuple):
    """One comma-delimited chunk, split on ``-`` with surrounding whitespace removed."""

    text: str
    parts: list[str]

    @property
    def is_range(self) -> bool:
        return len(self.parts) > 1

    def numbers(self) -> list[int]:
        return [int(part) for part in self.parts if _NUMBER.fullmatch(part)]


def _tokenize(text: str) -> list[_RawToken]:
    return [_RawToken(text=chunk, parts=[part.strip() for part in chunk.split("-")]) for chunk in text.split(",")]


def _check_character_shape(tokens: list[_RawToken]) -> bool:
    # Empty parts inside a range are left for the bounds check ("3-", "-8").
    for token in tokens:
        if not token.text.strip():
            return False
        if not all(part == "" or _NUMBER.fullmatch(part) for part in token.parts):
            return False
    return True


def _check_range_bounds(tokens: list[_RawToken]) -> bool:
    return all(len(token.parts) == 2 and all(token.parts) for token in tokens if token.is_range)  # noqa: PLR2004


def _check_bound_order(tokens: list[_RawToken]) -> bool:
    for token in tokens:
        numbers = token.numbers()
        if token.is_range and len(numbers) == 2 and numbers[0] >= numbers[1]:  # noqa: PLR2004
            return False
    return True


def _check_valve_domain(tokens: list[_RawToken]) -> bool:
    return all(
        constants.MIN_VALVE <= number <= constants.MAX_VALVE for token in tokens for number in token.numbers()
    )


_STAGES: tuple[tuple[GrammarStage, Callable[[list[_RawToken]], bool]], ...] = (
    (GrammarStage.CHARACTER_SHAPE, _check_character_shape),
    (GrammarStage.RANGE_BOUNDS, _check_range_bounds),
    (GrammarStage.BOUND_ORDER, _check_bound_order),
    (GrammarStage.VALVE_DOMAIN, _check_valve_domain),
)


def _fail(stage: GrammarStage) -> PumpSpecResult:
    return PumpSpecResult(error=GrammarError(stage=stage, message=MESSAGES[stage]))


def parse_pump_spec(text: str) -> PumpSpecResult:
    """Parse a comma-separated list of valve numbers and inclusive ranges.

    Stages run in a fixed order and only the first failing one is reported.

    Args:
        text: Operator input (e.g., "1,3-8,21")

    Returns:
        PumpSpecResult holding either the parsed PumpSpec or a GrammarError
    """
    if not text:
        return _fail(GrammarStage.EMPTY)

    tokens = _tokenize(text)
    for stage, check in _STAGES:
        if not check(tokens):
            logger.debug("Rejected pump range %r at stage %s", text, stage)
            return _fail(stage)

    parsed = []
    for token in tokens:
        low, *rest = token.numbers()
        parsed.append(RangeToken(low=low, high=rest[0] if rest else None))
    return PumpSpecResult(spec=PumpSpec.from_tokens(parsed))


def format_valves(valves: Iterable[int]) -> str:
    """Compress valve numbers into the shortest range string.

    Args:
        valves: Valve indices in any order, duplicates allowed

    Returns:
        Range string (e.g., [1, 3, 4, 5, 21] -> "1,3-5,21"); empty for no valves
    """
    runs: list[list[int]] = []
    for valve in sorted(set(valves)):
        if runs and valve == runs[-1][-1] + 1:
            runs[-1].append(valve)
        else:
            runs.append([valve])
    return ",".join(str(run[0]) if len(run) == 1 else f"{run[0]}-{run[-1]}" for run in runs)
