"""Result aggregation tests."""

import pytest
from pydantic import ValidationError

from src.audit.aggregate import aggregate, interpret_score, percent
from src.audit.checks import CheckName, CheckResult, PageResult


def _page(url: str, failing: set[str] = frozenset()) -> PageResult:
    return PageResult(
        url=url,
        checks=tuple(
            CheckResult(
                name=name.value,
                passed=name.value not in failing,
                details="OK" if name.value not in failing else f"{name.value} failed.",
            )
            for name in CheckName
        ),
    )


def test_empty_input_scores_zero():
    report = aggregate([])
    assert report.pages_crawled == 0
    assert report.summary.average_score == 0
    assert report.summary.check_stats == {}
    assert report.detailed_report == {}


def test_title_passing_on_one_of_two_pages():
    pages = [
        _page("https://example.com/"),
        _page("https://example.com/about", failing={"Title Tag"}),
    ]
    report = aggregate(pages)

    stats = report.summary.check_stats["Title Tag"]
    assert (stats.passed, stats.total) == (1, 2)
    assert report.summary.average_score == round(100 * 37 / 38)
    failures = report.detailed_report["Title Tag"].failures
    assert [(f.url, f.details) for f in failures] == [("https://example.com/about", "Title Tag failed.")]


def test_count_invariants_hold_for_every_check():
    pages = [
        _page("https://example.com/", failing={"Readability", "H1 Heading"}),
        _page("https://example.com/a", failing={"Readability"}),
        _page("https://example.com/b"),
    ]
    report = aggregate(pages)
    assert len(report.detailed_report) == 19
    for name, detail in report.detailed_report.items():
        assert detail.total_count == report.pages_crawled == 3
        assert detail.passed_count + len(detail.failures) == detail.total_count
        stats = report.summary.check_stats[name]
        assert (stats.passed, stats.total) == (detail.passed_count, detail.total_count)


def test_names_keep_canonical_order():
    report = aggregate([_page("https://example.com/")])
    assert list(report.summary.check_stats) == [name.value for name in CheckName]
    assert list(report.detailed_report) == [name.value for name in CheckName]


def test_order_of_pages_does_not_change_counts_or_score():
    a = _page("https://example.com/", failing={"Title Tag"})
    b = _page("https://example.com/x", failing={"Outbound Links", "Readability"})
    forward, backward = aggregate([a, b]), aggregate([b, a])
    assert forward.summary == backward.summary


def test_all_failing_scores_zero():
    every = {name.value for name in CheckName}
    report = aggregate([_page("https://example.com/", failing=every)])
    assert report.summary.average_score == 0
    assert report.pages_crawled == 1


def test_aggregate_is_deterministic():
    pages = [_page("https://example.com/", failing={"Title Tag"}), _page("https://example.com/b")]
    assert aggregate(pages) == aggregate(pages)


def test_percent_rounds_half_up():
    assert percent(1, 8) == 13  # 12.5
    assert percent(3, 8) == 38  # 37.5
    assert percent(1, 3) == 33
    assert percent(0, 0) == 0
    assert percent(5, 5) == 100


def test_interpret_score_bands():
    assert "prime candidate" in interpret_score(95)
    assert "strong foundation" in interpret_score(80)
    assert interpret_score(76) == ""
    assert "missing key signals" in interpret_score(73)
    assert "missing key signals" in interpret_score(0)


def test_report_is_immutable():
    report = aggregate([_page("https://example.com/", failing={"H1 Heading"})])
    detail = report.detailed_report["H1 Heading"]

    with pytest.raises(ValidationError):
        report.pages_crawled = 5
    with pytest.raises(ValidationError):
        detail.passed_count = 1
    with pytest.raises(ValidationError):
        report.summary.average_score = 100
    with pytest.raises(AttributeError):
        detail.failures.append(detail.failures[0])
    assert detail.failures[0].url == "https://example.com/"
