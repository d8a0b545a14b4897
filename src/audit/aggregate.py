"""Reduce per-page check results into a site-wide report and score."""

from __future__ import annotations

from collections.abc import Sequence

from src.api.schemas import (
    AggregateReport,
    CheckDetail,
    CheckFailure,
    CheckStat,
    ReportSummary,
)
from src.audit.checks import PageResult

# A check counts as passing site-wide when it passed on at least this share of pages.
PASSING_PERCENT = 75


def _round_half_up(numerator: int, denominator: int) -> int:
    """round(numerator / denominator) with halves rounded up, in exact integer arithmetic."""
    return (2 * numerator + denominator) // (2 * denominator)


def percent(passed: int, total: int) -> int:
    if total <= 0:
        return 0
    return _round_half_up(100 * passed, total)


def aggregate(page_results: Sequence[PageResult]) -> AggregateReport:
    """Accumulate pass/fail counts per check across pages, in first-seen check order."""
    passed: dict[str, int] = {}
    totals: dict[str, int] = {}
    failures: dict[str, list[CheckFailure]] = {}

    for page in page_results:
        for check in page.checks:
            if check.name not in totals:
                passed[check.name] = totals[check.name] = 0
                failures[check.name] = []
            totals[check.name] += 1
            if check.passed:
                passed[check.name] += 1
            else:
                failures[check.name].append(CheckFailure(url=page.url, details=check.details))

    # CheckDetail is frozen: build each one from its final tallies.
    details = {
        name: CheckDetail(
            passed_count=passed[name],
            total_count=totals[name],
            failures=tuple(failures[name]),
        )
        for name in totals
    }
    passed_total = sum(passed.values())
    checks_total = sum(totals.values())

    summary = ReportSummary(
        average_score=percent(passed_total, checks_total),
        check_stats={
            name: CheckStat(passed=d.passed_count, total=d.total_count)
            for name, d in details.items()
        },
    )
    return AggregateReport(
        summary=summary,
        detailed_report=details,
        pages_crawled=len(page_results),
    )


def interpret_score(score: int) -> str:
    """One-line verdict shown next to the score."""
    if score >= 90:
        return "Your site is a prime candidate for AI features! You have a powerful advantage over competitors."
    if score >= 80:
        return "Your site has a strong foundation. Let's discuss how to leverage this advantage."
    if score <= 73:
        return (
            "Your site is missing key signals and is likely being ignored by generative AI. "
            "This represents a significant lost opportunity."
        )
    return ""
