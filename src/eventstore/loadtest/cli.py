"""Command line entrypoint for the load generator."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence

from eventstore.config import configure_logging
from eventstore.loadtest.runner import (
    DEFAULT_THRESHOLDS,
    LoadTestOptions,
    LoadTestReport,
    LoadTestRunner,
)


def _parse_threshold(value: str) -> tuple[str, str]:
    metric, sep, expression = value.partition("=")
    if not sep or not metric.strip() or not expression.strip():
        msg = f"expected METRIC=EXPRESSION, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return metric.strip(), expression.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eventstore-loadtest",
        description="Run a load or stress test against the events API.",
    )
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("--vus", type=int, default=50, help="Concurrent virtual users.")
    parser.add_argument("--duration", type=float, default=60.0, help="Run time in seconds.")
    parser.add_argument(
        "--sleep",
        type=float,
        default=1.0,
        help="Pause after each iteration; use a short pause (0.1) for a burst.",
    )
    parser.add_argument("--timeout", type=float, default=30.0, help="Per-request timeout.")
    parser.add_argument(
        "--threshold",
        action="append",
        type=_parse_threshold,
        default=[],
        metavar="METRIC=EXPRESSION",
        help="Replace the default thresholds, e.g. 'http_req_duration=p(95)<200'.",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON.")
    parser.add_argument("--log-level", default="info")
    return parser


def options_from_args(args: argparse.Namespace) -> LoadTestOptions:
    thresholds: dict[str, list[str]] = {}
    for metric, expression in args.threshold:
        thresholds.setdefault(metric, []).append(expression)
    return LoadTestOptions(
        base_url=args.base_url,
        vus=args.vus,
        duration_seconds=args.duration,
        sleep_seconds=args.sleep,
        request_timeout_seconds=args.timeout,
        thresholds=thresholds or dict(DEFAULT_THRESHOLDS),
    )


def render_report(report: LoadTestReport) -> str:
    lines: list[str] = []
    for name, metric in report.metrics.items():
        values = " ".join(
            f"{key}={value:.2f}" if isinstance(value, float) else f"{key}={value}"
            for key, value in metric.summary().items()
        )
        lines.append(f"{name:.<32} {values}")
    lines.append("")
    for result in report.results:
        mark = "PASS" if result.passed else "FAIL"
        threshold = result.threshold
        lines.append(
            f"[{mark}] {threshold.metric} {threshold.expression} (observed {result.observed:.3f})"
        )
    lines.append("")
    lines.append(f"elapsed: {report.elapsed_seconds:.1f}s")
    return "\n".join(lines) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        options = options_from_args(args)
        report = asyncio.run(LoadTestRunner(options).run())
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    if args.json:
        sys.stdout.write(json.dumps(report.as_payload(), indent=2) + "\n")
    else:
        sys.stdout.write(render_report(report))
    return 0 if report.passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
