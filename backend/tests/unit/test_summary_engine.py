"""
Unit tests for the audit scoring & summary engine.

Covers:
- Result ingestion and validation
- Per-category deductions, clamping and counts
- Weighted overall score normalization
- Summary issue counters
"""
import uuid
from dataclasses import asdict

import pytest

from app.core.exceptions import InvalidCheckResultError
from app.services.summary_engine import (
    CategoryRef,
    CategoryTally,
    CheckRef,
    RawCheckResult,
    ResultStatus,
    aggregate_categories,
    compute_summary,
    count_issues,
    ingest_results,
    normalize_overall_score,
    resolve_category_or_skip,
    round_half_up,
    severity_deduction_or_default,
)

AUDIT_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")

SEO = CategoryRef(id="cat-seo", name="SEO", slug="seo")
PERFORMANCE = CategoryRef(id="cat-perf", name="Performance", slug="performance")
MOBILE = CategoryRef(id="cat-mobile", name="Mobile", slug="mobile")
CATEGORIES = [SEO, PERFORMANCE, MOBILE]

CHECKS = [
    CheckRef(id="seo-1", category_id=SEO.id, name="Title tag"),
    CheckRef(id="seo-2", category_id=SEO.id, name="Meta description"),
    CheckRef(id="seo-3", category_id=SEO.id, name="Canonical"),
    CheckRef(id="seo-4", category_id=SEO.id, name="H1"),
    CheckRef(id="perf-1", category_id=PERFORMANCE.id, name="LCP"),
    CheckRef(id="perf-2", category_id=PERFORMANCE.id, name="CLS"),
    CheckRef(id="mobile-1", category_id=MOBILE.id, name="Viewport"),
    CheckRef(id="orphan-1", category_id="cat-deleted", name="Orphaned check"),
]


def scenario_a_results() -> list[RawCheckResult]:
    """SEO: 2 passed, 1 warning/medium, 1 error/high."""
    return [
        RawCheckResult(check_id="seo-1", status="passed", severity="low"),
        RawCheckResult(check_id="seo-2", status="passed"),
        RawCheckResult(check_id="seo-3", status="warning", severity="medium"),
        RawCheckResult(check_id="seo-4", status="error", severity="high"),
    ]


def compute(results, weights=None, total_pages=0):
    return compute_summary(
        audit_id=AUDIT_ID,
        raw_results=results,
        checks=CHECKS,
        categories=CATEGORIES,
        weights=weights if weights is not None else {"seo": 0.25, "performance": 0.25},
        total_pages=total_pages,
    )


def tally_for(computation, slug: str) -> CategoryTally:
    return next(t for t in computation.category_scores if t.slug == slug)


class TestResultIngestion:
    """Test validation and category resolution of raw results."""

    def test_joins_results_to_categories(self):
        ingested = ingest_results(AUDIT_ID, scenario_a_results(), CHECKS, CATEGORIES)

        assert len(ingested.outcomes) == 4
        assert all(o.category is SEO for o in ingested.outcomes)
        assert ingested.outcomes[2].status == ResultStatus.WARNING

    def test_unknown_status_is_rejected(self):
        results = [
            RawCheckResult(check_id="seo-1", status="passed"),
            RawCheckResult(check_id="seo-2", status="failed", severity="high"),
        ]

        with pytest.raises(InvalidCheckResultError) as exc_info:
            ingest_results(AUDIT_ID, results, CHECKS, CATEGORIES)

        assert exc_info.value.index == 1
        assert exc_info.value.stage == "ingestion"
        assert exc_info.value.audit_id == AUDIT_ID
        assert "failed" in exc_info.value.message

    def test_status_is_not_coerced(self):
        results = [RawCheckResult(check_id="seo-1", status="PASSED")]

        with pytest.raises(InvalidCheckResultError):
            ingest_results(AUDIT_ID, results, CHECKS, CATEGORIES)

    def test_unknown_check_is_rejected(self):
        results = [RawCheckResult(check_id="does-not-exist", status="passed")]

        with pytest.raises(InvalidCheckResultError) as exc_info:
            ingest_results(AUDIT_ID, results, CHECKS, CATEGORIES)

        assert "does-not-exist" in exc_info.value.message

    def test_unknown_category_resolves_to_none(self):
        orphan = CHECKS[-1]
        assert resolve_category_or_skip(orphan, {c.id: c for c in CATEGORIES}) is None

        ingested = ingest_results(
            AUDIT_ID,
            [RawCheckResult(check_id="orphan-1", status="error", severity="high")],
            CHECKS,
            CATEGORIES,
        )
        assert ingested.outcomes[0].category is None

    def test_accepts_duck_typed_rows(self):
        """Any object with check_id/status/severity attributes can be ingested."""

        class Row:
            def __init__(self, check_id, status, severity):
                self.check_id = check_id
                self.status = status
                self.severity = severity

        ingested = ingest_results(AUDIT_ID, [Row("perf-1", "warning", "low")], CHECKS, CATEGORIES)

        assert ingested.outcomes[0].category is PERFORMANCE


class TestSeverityDeductions:
    """Test the deduction tiers and their fallbacks."""

    @pytest.mark.parametrize("severity,expected", [("high", 5), ("medium", 3), ("low", 1)])
    def test_warning_tiers(self, severity, expected):
        assert severity_deduction_or_default(ResultStatus.WARNING, severity) == expected

    @pytest.mark.parametrize("severity,expected", [("high", 10), ("medium", 7), ("low", 3)])
    def test_error_tiers(self, severity, expected):
        assert severity_deduction_or_default(ResultStatus.ERROR, severity) == expected

    @pytest.mark.parametrize("severity", ["critical", "", None, "HIGH"])
    def test_unknown_severity_uses_low_tier(self, severity):
        assert severity_deduction_or_default(ResultStatus.WARNING, severity) == 1
        assert severity_deduction_or_default(ResultStatus.ERROR, severity) == 3

    def test_passed_never_deducts(self):
        assert severity_deduction_or_default(ResultStatus.PASSED, "high") == 0


class TestCategoryAggregation:
    """Test per-category scores and counts."""

    def test_scenario_a(self):
        """2 passed, 1 warning/medium, 1 error/high -> 100 - 3 - 10."""
        computation = compute(scenario_a_results())
        seo = tally_for(computation, "seo")

        assert seo.score == 87
        assert seo.issue_count == 4
        assert seo.passed_count == 2
        assert seo.warning_count == 1
        assert seo.error_count == 1

    def test_categories_without_results_are_omitted(self):
        computation = compute(scenario_a_results())

        assert [t.slug for t in computation.category_scores] == ["seo"]

    def test_all_passed_keeps_full_score(self):
        results = [RawCheckResult(check_id="perf-1", status="passed", severity="high")]
        computation = compute(results)

        assert tally_for(computation, "performance").score == 100

    def test_score_is_clamped_at_zero(self):
        results = [
            RawCheckResult(check_id="seo-1", status="error", severity="high")
            for _ in range(25)
        ]
        computation = compute(results)

        assert tally_for(computation, "seo").score == 0
        assert tally_for(computation, "seo").error_count == 25

    def test_scores_stay_within_bounds(self):
        statuses = ["passed", "warning", "error"]
        severities = ["low", "medium", "high", "unknown", None]
        results = [
            RawCheckResult(
                check_id=CHECKS[i % 7].id,
                status=statuses[i % 3],
                severity=severities[i % 5],
            )
            for i in range(200)
        ]
        computation = compute(results)

        for tally in computation.category_scores:
            assert 0 <= tally.score <= 100

    def test_additional_high_error_never_increases_score(self):
        results = scenario_a_results()
        before = tally_for(compute(results), "seo").score

        results.append(RawCheckResult(check_id="seo-1", status="error", severity="high"))
        after = tally_for(compute(results), "seo").score

        assert after <= before
        assert after == 77

    def test_unknown_category_results_are_skipped(self):
        results = scenario_a_results() + [
            RawCheckResult(check_id="orphan-1", status="error", severity="high"),
        ]
        computation = compute(results)

        assert [t.slug for t in computation.category_scores] == ["seo"]
        assert tally_for(computation, "seo").score == 87

    def test_duplicate_results_are_all_counted(self):
        results = [
            RawCheckResult(check_id="perf-1", status="warning", severity="high"),
            RawCheckResult(check_id="perf-1", status="warning", severity="high"),
        ]
        performance = tally_for(compute(results), "performance")

        assert performance.issue_count == 2
        assert performance.warning_count == 2
        assert performance.score == 90

    def test_output_follows_catalog_order(self):
        results = [
            RawCheckResult(check_id="mobile-1", status="passed"),
            RawCheckResult(check_id="perf-1", status="passed"),
            RawCheckResult(check_id="seo-1", status="passed"),
        ]
        ingested = ingest_results(AUDIT_ID, results, CHECKS, CATEGORIES)

        assert [t.slug for t in aggregate_categories(ingested)] == ["seo", "performance", "mobile"]


class TestOverallScore:
    """Test weighted normalization of category scores."""

    def test_scenario_b(self):
        """seo 87 and performance 100, equally weighted -> round(93.5) = 94."""
        results = scenario_a_results() + [
            RawCheckResult(check_id="perf-1", status="passed"),
        ]
        computation = compute(results)

        assert computation.overall_score == 94

    def test_scenario_c_no_results(self):
        computation = compute([])

        assert computation.category_scores == []
        assert computation.overall_score == 0

    def test_scenario_d_unweighted_category_is_excluded(self):
        results = scenario_a_results() + [
            RawCheckResult(check_id="mobile-1", status="error", severity="high"),
        ]
        computation = compute(results)

        assert tally_for(computation, "mobile").score == 90
        assert computation.overall_score == 87

    def test_unweighted_category_never_affects_overall(self):
        base = compute(scenario_a_results())
        crushed_mobile = compute(scenario_a_results() + [
            RawCheckResult(check_id="mobile-1", status="error", severity="high")
            for _ in range(20)
        ])

        assert tally_for(crushed_mobile, "mobile").score == 0
        assert crushed_mobile.overall_score == base.overall_score

    def test_no_intersection_with_weight_table_is_zero(self):
        results = [RawCheckResult(check_id="mobile-1", status="passed")]
        computation = compute(results)

        assert computation.overall_score == 0

    def test_zero_weight_counts_as_absent(self):
        tallies = [
            CategoryTally(category_id="a", slug="seo", name="SEO", score=50),
            CategoryTally(category_id="b", slug="performance", name="Performance", score=100),
        ]

        assert normalize_overall_score(tallies, {"seo": 0.0, "performance": 0.3}) == 100

    def test_renormalizes_over_present_categories(self):
        tallies = [
            CategoryTally(category_id="a", slug="seo", name="SEO", score=80),
            CategoryTally(category_id="b", slug="security", name="Security", score=60),
        ]
        weights = {"seo": 0.25, "performance": 0.25, "security": 0.2, "accessibility": 0.2}

        # (80 * 0.25 + 60 * 0.2) / 0.45 = 71.11
        assert normalize_overall_score(tallies, weights) == 71

    def test_overall_is_an_integer_in_range(self):
        results = [
            RawCheckResult(check_id=check.id, status="warning", severity="medium")
            for check in CHECKS[:7]
        ]
        overall = compute(results).overall_score

        assert isinstance(overall, int)
        assert 0 <= overall <= 100

    def test_exact_half_with_fractional_weights(self):
        """(0 * 0.2 + 43 * 0.2) / 0.4 is exactly 21.5, which rounds up."""
        tallies = [
            CategoryTally(category_id="a", slug="accessibility", name="Accessibility", score=0),
            CategoryTally(category_id="b", slug="security", name="Security", score=43),
        ]
        weights = {"seo": 0.25, "performance": 0.25, "accessibility": 0.2, "security": 0.2, "best_practices": 0.1}

        assert normalize_overall_score(tallies, weights) == 22

    @pytest.mark.parametrize("first,second,expected", [
        (0, 43, 22),
        (80, 91, 86),
        (1, 2, 2),
        (99, 100, 100),
    ])
    def test_equal_weights_round_half_up(self, first, second, expected):
        tallies = [
            CategoryTally(category_id="a", slug="accessibility", name="Accessibility", score=first),
            CategoryTally(category_id="b", slug="best_practices", name="Best Practices", score=second),
        ]

        assert normalize_overall_score(tallies, {"accessibility": 0.1, "best_practices": 0.1}) == expected

    @pytest.mark.parametrize("value,expected", [
        (93.5, 94),
        (92.5, 93),
        (0.5, 1),
        (99.4999, 99),
        (0.0, 0),
        (100.0, 100),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestIssueCounts:
    """Test the summary-level issue counters."""

    def test_counts_only_non_passed_results(self):
        ingested = ingest_results(AUDIT_ID, scenario_a_results(), CHECKS, CATEGORIES)
        counts = count_issues(ingested)

        assert counts.total_issues == 2
        assert counts.high_severity_issues == 1
        assert counts.medium_severity_issues == 1
        assert counts.low_severity_issues == 0

    def test_unknown_severity_counts_toward_total_only(self):
        results = [
            RawCheckResult(check_id="perf-1", status="warning", severity="critical"),
            RawCheckResult(check_id="perf-2", status="error", severity="low"),
        ]
        counts = count_issues(ingest_results(AUDIT_ID, results, CHECKS, CATEGORIES))

        assert counts.total_issues == 2
        assert counts.low_severity_issues == 1
        assert counts.high_severity_issues == 0
        assert counts.medium_severity_issues == 0

    def test_summary_fields(self):
        computation = compute(scenario_a_results(), total_pages=12)

        assert computation.summary_fields() == {
            "overall_score": 87,
            "total_pages": 12,
            "total_issues": 2,
            "high_severity_issues": 1,
            "medium_severity_issues": 1,
            "low_severity_issues": 0,
        }


class TestDeterminism:
    """Test that computing twice on the same input yields the same output."""

    def test_compute_is_idempotent(self):
        results = scenario_a_results() + [
            RawCheckResult(check_id="perf-1", status="warning", severity="low"),
            RawCheckResult(check_id="mobile-1", status="error", severity="medium"),
        ]

        first = compute(results)
        second = compute(results)

        assert first == second
        assert [asdict(t) for t in first.category_scores] == [asdict(t) for t in second.category_scores]
