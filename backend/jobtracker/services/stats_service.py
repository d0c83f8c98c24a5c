"""
Dashboard statistics folded from an application snapshot.

Everything here is pure: the functions read the applications (with tags and
status history attached) they are given and never touch the database.
Malformed historical data (bad dates, missing bounds) is skipped rather
than raised, so analytics never block on old rows.
"""

import logging
import math
from collections import Counter
from datetime import date

from jobtracker.schemas.stats import (
    SalaryBucket,
    SalaryPair,
    SourceStats,
    StageDuration,
    Stats,
    StatusCount,
    TagCount,
    WeekCount,
)
from jobtracker.services.status_catalog import INITIAL_STATUS, TERMINAL_STATUSES
from jobtracker.utils.dates import parse_date, parse_timestamp

logger = logging.getLogger(__name__)

_NOT_APPLIED = {INITIAL_STATUS}
_NO_RESPONSE = {"saved", "applied"}
_NO_INTERVIEW = {"saved", "applied", "rejected", "withdrawn"}
_OFFERED = {"offer", "accepted"}

TOP_TAG_LIMIT = 10
SALARY_BUCKET_WIDTH = 20_000


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def filter_by_date_range(applications, date_from: date | None = None, date_to: date | None = None) -> list:
    """Keep applications whose ``date_added`` falls within the inclusive range."""
    if date_from is None and date_to is None:
        return list(applications)
    kept = []
    for app in applications:
        added = parse_date(app.date_added)
        if added is None:
            continue
        if date_from is not None and added < date_from:
            continue
        if date_to is not None and added > date_to:
            continue
        kept.append(app)
    return kept


def _has_salary(app) -> bool:
    return not app.salary_not_specified and (app.salary_min is not None or app.salary_max is not None)


def _by_status(applications) -> list[StatusCount]:
    counts = Counter(app.status or INITIAL_STATUS for app in applications)
    return [StatusCount(status=s, count=n) for s, n in counts.items()]


def _response_rate(applications) -> int:
    applied = sum(1 for app in applications if app.status not in _NOT_APPLIED)
    responded = sum(1 for app in applications if app.status not in _NO_RESPONSE)
    if applied == 0:
        return 0
    return int(round_half_up(responded / applied * 100))


def _avg_salary(applications) -> int | None:
    midpoints = [((app.salary_min or 0) + (app.salary_max or 0)) / 2 for app in applications if _has_salary(app)]
    if not midpoints:
        return None
    return int(round_half_up(sum(midpoints) / len(midpoints)))


def _timeline(applications) -> list[WeekCount]:
    weeks: Counter[str] = Counter()
    for app in applications:
        added = parse_date(app.date_added)
        if added is None:
            logger.debug("Skipping unparseable date_added %r on %s", app.date_added, app.id)
            continue
        year, week, _ = added.isocalendar()
        weeks[f"{year}-W{week:02d}"] += 1
    return [WeekCount(week=w, count=n) for w, n in sorted(weeks.items())]


def _salary_distribution(applications) -> list[SalaryPair]:
    return [
        SalaryPair(salary_min=app.salary_min or 0, salary_max=app.salary_max or 0)
        for app in applications
        if _has_salary(app)
    ]


def stage_durations(history) -> list[tuple[str, int]]:
    """(stage, whole days spent) for each adjacent pair of history entries."""
    timed = []
    for entry in history or []:
        changed_at = parse_timestamp(entry.changed_at)
        if changed_at is not None:
            timed.append((changed_at, entry.to_status))
    timed.sort(key=lambda pair: pair[0])

    durations = []
    for (start, stage), (end, _) in zip(timed, timed[1:]):
        days = math.floor((end - start).total_seconds() / 86400)
        if days >= 0:
            durations.append((stage, days))
    return durations


def _avg_days_per_stage(applications) -> list[StageDuration]:
    per_stage: dict[str, list[int]] = {}
    for app in applications:
        for stage, days in stage_durations(app.status_history):
            per_stage.setdefault(stage, []).append(days)
    return [
        StageDuration(stage=stage, avg_days=round_half_up(sum(days) / len(days), 1))
        for stage, days in per_stage.items()
    ]


def _top_tags(applications) -> list[TagCount]:
    counts: Counter[str] = Counter()
    for app in applications:
        for tag in app.tags or []:
            counts[tag.name] += 1
    return [TagCount(name=name, count=n) for name, n in counts.most_common(TOP_TAG_LIMIT)]


def _source_stats(applications) -> list[SourceStats]:
    sources: dict[str, SourceStats] = {}
    for app in applications:
        if not app.source:
            continue
        entry = sources.setdefault(app.source, SourceStats(source=app.source, total=0, interviews=0, offers=0))
        entry.total += 1
        if app.status not in _NO_INTERVIEW:
            entry.interviews += 1
        if app.status in _OFFERED:
            entry.offers += 1
    return list(sources.values())


def compute_stats(applications, date_from: date | None = None, date_to: date | None = None) -> Stats:
    applications = filter_by_date_range(applications, date_from, date_to)
    distribution = _salary_distribution(applications)
    return Stats(
        total=len(applications),
        by_status=_by_status(applications),
        response_rate=_response_rate(applications),
        avg_salary=_avg_salary(applications),
        active_count=sum(1 for app in applications if app.status not in TERMINAL_STATUSES),
        timeline=_timeline(applications),
        salary_distribution=distribution,
        salary_buckets=salary_buckets(distribution),
        avg_days_per_stage=_avg_days_per_stage(applications),
        top_tags=_top_tags(applications),
        source_stats=_source_stats(applications),
    )


def salary_buckets(pairs: list[SalaryPair], width: int = SALARY_BUCKET_WIDTH) -> list[SalaryBucket]:
    """Histogram of salary midpoints in fixed-width ranges, ascending."""
    buckets: Counter[int] = Counter()
    for pair in pairs:
        midpoint = (pair.salary_min + pair.salary_max) / 2
        buckets[int(midpoint // width) * width] += 1
    return [
        SalaryBucket(range=f"{start // 1000}k-{(start + width) // 1000}k", count=n)
        for start, n in sorted(buckets.items())
    ]
