"""Load-test metrics and pass/fail thresholds."""

from __future__ import annotations

import math
import operator
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeAlias

MetricValue: TypeAlias = int | float

_THRESHOLD_PATTERN = re.compile(
    r"^\s*(?P<stat>p\((?P<pct>\d+(?:\.\d+)?)\)|avg|min|max|med|count|rate)"
    r"\s*(?P<op><=|>=|==|!=|<|>)\s*(?P<bound>-?\d+(?:\.\d+)?)\s*$"
)
_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}


def percentile(samples: list[float], pct: float) -> float:
    """Linear-interpolated percentile; 0.0 for an empty series."""
    if not samples:
        return 0.0
    ordered = sorted(samples)
    rank = (len(ordered) - 1) * pct / 100
    lower = math.floor(rank)
    upper = math.ceil(rank)
    if lower == upper:
        return ordered[lower]
    return ordered[lower] + (ordered[upper] - ordered[lower]) * (rank - lower)


@dataclass(slots=True)
class Trend:
    """Latency samples in milliseconds."""

    name: str
    samples: list[float] = field(default_factory=list)

    def add(self, value: float) -> None:
        self.samples.append(value)

    def stat(self, name: str, pct: float | None = None) -> float:
        if name == "p" and pct is not None:
            return percentile(self.samples, pct)
        if name == "count":
            return float(len(self.samples))
        if not self.samples:
            return 0.0
        if name == "avg":
            return sum(self.samples) / len(self.samples)
        if name == "min":
            return min(self.samples)
        if name == "max":
            return max(self.samples)
        if name == "med":
            return percentile(self.samples, 50)
        msg = f"Unsupported trend statistic: {name}"
        raise ValueError(msg)

    def summary(self) -> dict[str, MetricValue]:
        return {
            "count": len(self.samples),
            "avg": self.stat("avg"),
            "min": self.stat("min"),
            "med": self.stat("med"),
            "p(90)": percentile(self.samples, 90),
            "p(95)": percentile(self.samples, 95),
            "max": self.stat("max"),
        }


@dataclass(slots=True)
class Counter:
    name: str
    count: int = 0

    def add(self, value: int = 1) -> None:
        self.count += value

    def stat(self, name: str, pct: float | None = None) -> float:
        if name != "count":
            msg = f"Unsupported counter statistic: {name}"
            raise ValueError(msg)
        return float(self.count)

    def summary(self) -> dict[str, MetricValue]:
        return {"count": self.count}


@dataclass(slots=True)
class Rate:
    """Fraction of observations that were true."""

    name: str
    hits: int = 0
    total: int = 0

    def add(self, hit: bool) -> None:
        self.total += 1
        if hit:
            self.hits += 1

    @property
    def rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def stat(self, name: str, pct: float | None = None) -> float:
        if name != "rate":
            msg = f"Unsupported rate statistic: {name}"
            raise ValueError(msg)
        return self.rate

    def summary(self) -> dict[str, MetricValue]:
        return {"rate": self.rate, "hits": self.hits, "total": self.total}


Metric: TypeAlias = Trend | Counter | Rate


@dataclass(slots=True, frozen=True)
class Threshold:
    """Pass/fail criterion such as ``p(95)<200`` bound to one metric."""

    metric: str
    expression: str
    stat: str
    op: str
    bound: float
    pct: float | None = None

    @classmethod
    def parse(cls, metric: str, expression: str) -> Threshold:
        match = _THRESHOLD_PATTERN.match(expression)
        if match is None:
            msg = f"Invalid threshold expression for {metric}: {expression!r}"
            raise ValueError(msg)
        pct = match.group("pct")
        return cls(
            metric=metric,
            expression=expression.strip(),
            stat="p" if pct is not None else match.group("stat"),
            op=match.group("op"),
            bound=float(match.group("bound")),
            pct=float(pct) if pct is not None else None,
        )

    def evaluate(self, metric: Metric) -> ThresholdResult:
        observed = metric.stat(self.stat, self.pct)
        return ThresholdResult(
            threshold=self,
            observed=observed,
            passed=_OPERATORS[self.op](observed, self.bound),
        )


@dataclass(slots=True, frozen=True)
class ThresholdResult:
    threshold: Threshold
    observed: float
    passed: bool


def parse_thresholds(definitions: dict[str, list[str]]) -> list[Threshold]:
    return [
        Threshold.parse(metric, expression)
        for metric, expressions in definitions.items()
        for expression in expressions
    ]


def evaluate_thresholds(
    thresholds: list[Threshold], metrics: dict[str, Metric]
) -> list[ThresholdResult]:
    results: list[ThresholdResult] = []
    for threshold in thresholds:
        metric = metrics.get(threshold.metric)
        if metric is None:
            msg = f"Threshold references unknown metric: {threshold.metric}"
            raise ValueError(msg)
        results.append(threshold.evaluate(metric))
    return results
