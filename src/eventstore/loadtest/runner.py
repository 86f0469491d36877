"""Virtual-user load generator for the events API."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from eventstore.loadtest.metrics import (
    Counter,
    Metric,
    MetricValue,
    Rate,
    Threshold,
    ThresholdResult,
    Trend,
    evaluate_thresholds,
    parse_thresholds,
)

logger = logging.getLogger(__name__)

SAMPLE_EVENT: dict[str, str] = {"name": "Sample Event", "date": "2024-10-09"}

# Pass/fail criteria for a load test at expected usage.
DEFAULT_THRESHOLDS: dict[str, list[str]] = {
    "http_req_duration": ["p(95)<200"],
    "http_req_failed": ["rate<0.01"],
    "get_errors_counter": ["count<1"],
    "post_errors_counter": ["count<1"],
    "delete_errors_counter": ["count<1"],
}


@dataclass(slots=True)
class LoadTestOptions:
    """Load-test schedule.

    A long ``sleep`` approximates expected usage; a short one (e.g. 0.1)
    turns the run into a burst that searches for the breaking point.
    """

    base_url: str = "http://localhost:3000"
    vus: int = 50
    duration_seconds: float = 60.0
    sleep_seconds: float = 1.0
    request_timeout_seconds: float = 30.0
    thresholds: dict[str, list[str]] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))


@dataclass(slots=True)
class LoadTestReport:
    """Collected metrics and threshold verdicts for one run."""

    metrics: dict[str, Metric]
    results: list[ThresholdResult]
    elapsed_seconds: float

    @property
    def passed(self) -> bool:
        return all(result.passed for result in self.results)

    def as_payload(self) -> dict[str, Any]:
        metrics: dict[str, dict[str, MetricValue]] = {
            name: metric.summary() for name, metric in self.metrics.items()
        }
        return {
            "passed": self.passed,
            "elapsed_seconds": self.elapsed_seconds,
            "metrics": metrics,
            "thresholds": [
                {
                    "metric": result.threshold.metric,
                    "expression": result.threshold.expression,
                    "observed": result.observed,
                    "passed": result.passed,
                }
                for result in self.results
            ],
        }


class LoadTestRunner:
    """Drive GET/POST/DELETE traffic with concurrent virtual users."""

    def __init__(
        self,
        options: LoadTestOptions,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._options = options
        self._transport = transport
        self._thresholds: list[Threshold] = parse_thresholds(options.thresholds)
        self.http_req_duration = Trend("http_req_duration")
        self.http_req_failed = Rate("http_req_failed")
        self.http_reqs = Counter("http_reqs")
        self.iterations = Counter("iterations")
        self.req_duration_time_get = Trend("req_duration_time_get")
        self.req_duration_time_post = Trend("req_duration_time_post")
        self.req_duration_time_delete = Trend("req_duration_time_delete")
        self.get_errors_counter = Counter("get_errors_counter")
        self.post_errors_counter = Counter("post_errors_counter")
        self.delete_errors_counter = Counter("delete_errors_counter")

    @property
    def metrics(self) -> dict[str, Metric]:
        return {
            metric.name: metric
            for metric in (
                self.http_req_duration,
                self.http_req_failed,
                self.http_reqs,
                self.iterations,
                self.req_duration_time_get,
                self.req_duration_time_post,
                self.req_duration_time_delete,
                self.get_errors_counter,
                self.post_errors_counter,
                self.delete_errors_counter,
            )
        }

    async def run(self) -> LoadTestReport:
        options = self._options
        if options.vus < 1:
            msg = "vus must be at least 1"
            raise ValueError(msg)
        logger.info(
            "Starting load test: %d VUs for %.1fs against %s",
            options.vus,
            options.duration_seconds,
            options.base_url,
        )
        started = time.perf_counter()
        deadline = started + options.duration_seconds
        async with httpx.AsyncClient(
            base_url=options.base_url,
            transport=self._transport,
            timeout=options.request_timeout_seconds,
            limits=httpx.Limits(max_connections=options.vus),
        ) as client:
            await asyncio.gather(
                *(self._virtual_user(client, deadline) for _ in range(options.vus))
            )
        elapsed = time.perf_counter() - started
        report = LoadTestReport(
            metrics=self.metrics,
            results=evaluate_thresholds(self._thresholds, self.metrics),
            elapsed_seconds=elapsed,
        )
        logger.info(
            "Load test finished: %d requests, %d iterations, passed=%s",
            self.http_reqs.count,
            self.iterations.count,
            report.passed,
        )
        return report

    async def _virtual_user(self, client: httpx.AsyncClient, deadline: float) -> None:
        while time.perf_counter() < deadline:
            await self.iteration(client)
            await asyncio.sleep(self._options.sleep_seconds)

    async def iteration(self, client: httpx.AsyncClient) -> None:
        """One pass of the Get Events, Create Event and Delete Event groups."""
        await self._request(
            client, "GET", "/events", self.req_duration_time_get, self.get_errors_counter
        )

        created = await self._request(
            client,
            "POST",
            "/events",
            self.req_duration_time_post,
            self.post_errors_counter,
            json=SAMPLE_EVENT,
        )
        event_id = _created_event_id(created)

        if event_id:
            await self._request(
                client,
                "DELETE",
                f"/events/{event_id}",
                self.req_duration_time_delete,
                self.delete_errors_counter,
            )
        self.iterations.add()

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        trend: Trend,
        errors: Counter,
        **kwargs: Any,
    ) -> httpx.Response | None:
        started = time.perf_counter()
        response: httpx.Response | None
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            response = None
        duration_ms = (time.perf_counter() - started) * 1000.0

        failed = response is None or not 200 <= response.status_code < 300
        self.http_reqs.add()
        self.http_req_duration.add(duration_ms)
        self.http_req_failed.add(failed)
        trend.add(duration_ms)
        if failed:
            errors.add()
        return response


def _created_event_id(response: httpx.Response | None) -> str | None:
    if response is None:
        return None
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    event_id = payload.get("id")
    return event_id if isinstance(event_id, str) else None
