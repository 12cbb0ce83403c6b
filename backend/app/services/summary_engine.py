"""
Audit Scoring & Summary Engine

Turns the flat list of check results of one audit into:
1. Per-category health scores with pass/warning/error counts
2. Issue counts by severity
3. A single weighted overall score (0-100) for trend comparison

Everything here is pure: no database access, no settings lookups. Callers
pass in the results, the check catalog and the category weight table, and
persist the returned SummaryComputation themselves.

Catalog arguments are duck-typed: categories need ``id``, ``name`` and
``slug``; checks need ``id`` and ``category_id``; raw results need
``check_id``, ``status`` and ``severity``. ORM rows and the dataclasses
below both qualify.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from app.core.exceptions import InvalidCheckResultError

logger = logging.getLogger(__name__)


class ResultStatus(str, Enum):
    PASSED = "passed"
    WARNING = "warning"
    ERROR = "error"


class ResultSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


INITIAL_CATEGORY_SCORE = 100

WARNING_DEDUCTIONS = {
    ResultSeverity.HIGH: 5,
    ResultSeverity.MEDIUM: 3,
    ResultSeverity.LOW: 1,
}

ERROR_DEDUCTIONS = {
    ResultSeverity.HIGH: 10,
    ResultSeverity.MEDIUM: 7,
    ResultSeverity.LOW: 3,
}

DEDUCTION_TABLES = {
    ResultStatus.WARNING: WARNING_DEDUCTIONS,
    ResultStatus.ERROR: ERROR_DEDUCTIONS,
}


@dataclass(frozen=True)
class CategoryRef:
    id: Any
    name: str
    slug: str


@dataclass(frozen=True)
class CheckRef:
    id: Any
    category_id: Any
    name: str = ""
    weight: int = 1


@dataclass(frozen=True)
class RawCheckResult:
    check_id: Any
    status: str
    severity: str | None = None


@dataclass(frozen=True)
class IngestedOutcome:
    """A validated result joined to its check's category (None when unresolvable)."""

    check_id: Any
    category: Any
    status: ResultStatus
    severity: str | None


@dataclass
class IngestedResults:
    audit_id: Any
    categories: list[Any]
    outcomes: list[IngestedOutcome] = field(default_factory=list)


@dataclass
class CategoryTally:
    category_id: Any
    slug: str
    name: str
    score: int = INITIAL_CATEGORY_SCORE
    issue_count: int = 0
    passed_count: int = 0
    warning_count: int = 0
    error_count: int = 0

    def apply(self, outcome: IngestedOutcome) -> None:
        # issue_count tracks every result, passes included
        self.issue_count += 1

        if outcome.status == ResultStatus.PASSED:
            self.passed_count += 1
            return

        if outcome.status == ResultStatus.WARNING:
            self.warning_count += 1
        else:
            self.error_count += 1

        deduction = severity_deduction_or_default(outcome.status, outcome.severity)
        self.score = max(0, self.score - deduction)

@dataclass
class IssueCounts:
    total_issues: int = 0
    high_severity_issues: int = 0
    medium_severity_issues: int = 0
    low_severity_issues: int = 0


@dataclass
class SummaryComputation:
    audit_id: Any
    overall_score: int
    total_pages: int
    issues: IssueCounts
    category_scores: list[CategoryTally]

    def summary_fields(self) -> dict:
        """Column values of the summary row, excluding the completion timestamp."""
        return {
            "overall_score": self.overall_score,
            "total_pages": self.total_pages,
            "total_issues": self.issues.total_issues,
            "high_severity_issues": self.issues.high_severity_issues,
            "medium_severity_issues": self.issues.medium_severity_issues,
            "low_severity_issues": self.issues.low_severity_issues,
        }


# =========================================================================
# Result Ingestion
# =========================================================================

def resolve_category_or_skip(check: Any, categories_by_id: Mapping[Any, Any]) -> Any | None:
    """Return the category of a check, or None when it cannot be scored."""
    category = categories_by_id.get(check.category_id)
    if category is None:
        logger.debug(
            "Check %s references unknown category %s; its results will not be scored",
            check.id,
            check.category_id,
        )
    return category


def ingest_results(
    audit_id: Any,
    raw_results: Iterable[Any],
    checks: Iterable[Any],
    categories: Iterable[Any],
) -> IngestedResults:
    """Validate raw results and join each one to its check's category.

    Unknown statuses and unknown check ids are rejected. Duplicate results for
    the same check are all kept and all counted.
    """
    category_list = list(categories)
    categories_by_id = {category.id: category for category in category_list}
    checks_by_id = {check.id: check for check in checks}

    ingested = IngestedResults(audit_id=audit_id, categories=category_list)

    for index, raw in enumerate(raw_results):
        try:
            status = ResultStatus(raw.status)
        except ValueError:
            raise InvalidCheckResultError(
                audit_id, index, f"unknown status {raw.status!r}"
            ) from None

        check = checks_by_id.get(raw.check_id)
        if check is None:
            raise InvalidCheckResultError(
                audit_id, index, f"unknown check {raw.check_id}"
            )

        ingested.outcomes.append(IngestedOutcome(
            check_id=raw.check_id,
            category=resolve_category_or_skip(check, categories_by_id),
            status=status,
            severity=raw.severity,
        ))

    return ingested


# =========================================================================
# Category Aggregation
# =========================================================================

def severity_deduction_or_default(status: ResultStatus, severity: str | None) -> int:
    """Points deducted for a non-passing result.

    Unrecognized severities fall back to the low tier of the status's table.
    """
    table = DEDUCTION_TABLES.get(status)
    if table is None:
        return 0

    try:
        return table[ResultSeverity(severity)]
    except ValueError:
        logger.debug("Unknown severity %r on %s result; using low deduction", severity, status.value)
        return table[ResultSeverity.LOW]


def aggregate_categories(ingested: IngestedResults) -> list[CategoryTally]:
    """Score every category that has at least one result, in catalog order."""
    tallies = {
        category.id: CategoryTally(
            category_id=category.id,
            slug=category.slug,
            name=category.name,
        )
        for category in ingested.categories
    }

    for outcome in ingested.outcomes:
        if outcome.category is None:
            continue
        tallies[outcome.category.id].apply(outcome)

    return [tally for tally in tallies.values() if tally.issue_count > 0]


def count_issues(ingested: IngestedResults) -> IssueCounts:
    counts = IssueCounts()
    for outcome in ingested.outcomes:
        if outcome.status == ResultStatus.PASSED:
            continue
        counts.total_issues += 1
        if outcome.severity == ResultSeverity.HIGH:
            counts.high_severity_issues += 1
        elif outcome.severity == ResultSeverity.MEDIUM:
            counts.medium_severity_issues += 1
        elif outcome.severity == ResultSeverity.LOW:
            counts.low_severity_issues += 1
    return counts


# =========================================================================
# Overall Score Normalization
# =========================================================================

def round_half_up(value: Decimal | float) -> int:
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def normalize_overall_score(
    category_scores: Sequence[CategoryTally],
    weights: Mapping[str, float],
) -> int:
    """Weighted mean of the scored categories that appear in the weight table.

    Categories missing from the table (or weighted 0) are left out of both
    numerator and denominator. No weighted category at all yields 0.
    Sums are exact Decimals; a mean of exactly x.5 rounds up.
    """
    accumulated_score = Decimal(0)
    accumulated_weight = Decimal(0)

    for tally in category_scores:
        weight = weights.get(tally.slug)
        if not weight:
            continue
        weight = Decimal(str(weight))
        accumulated_score += tally.score * weight
        accumulated_weight += weight

    if accumulated_weight <= 0:
        return 0

    overall = round_half_up(accumulated_score / accumulated_weight)
    return min(100, max(0, overall))


def compute_summary(
    audit_id: Any,
    raw_results: Iterable[Any],
    checks: Iterable[Any],
    categories: Iterable[Any],
    weights: Mapping[str, float],
    total_pages: int = 0,
) -> SummaryComputation:
    """Ingest, aggregate and normalize one audit's results."""
    ingested = ingest_results(audit_id, raw_results, checks, categories)
    category_scores = aggregate_categories(ingested)

    return SummaryComputation(
        audit_id=audit_id,
        overall_score=normalize_overall_score(category_scores, weights),
        total_pages=total_pages,
        issues=count_issues(ingested),
        category_scores=category_scores,
    )
