from datetime import date

from jobtracker.models.application import Application
from jobtracker.models.status_history import StatusHistoryEntry
from jobtracker.models.tag import Tag
from jobtracker.schemas.stats import SalaryPair
from jobtracker.services.stats_service import (
    compute_stats,
    filter_by_date_range,
    salary_buckets,
    stage_durations,
)

_counter = iter(range(10_000))


def _app(status="saved", date_added="2024-01-03T10:00:00Z", tags=(), history=(), **fields):
    fields.setdefault("salary_not_specified", False)
    app = Application(
        id=f"app-{next(_counter)}",
        company_name="Acme",
        job_title="Engineer",
        status=status,
        date_added=date_added,
        **fields,
    )
    app.tags = [Tag(id=f"tag-{name}-{next(_counter)}", name=name) for name in tags]
    app.status_history = [
        StatusHistoryEntry(from_status=f, to_status=t, changed_at=at, notes=None) for f, t, at in history
    ]
    return app


class TestCounts:
    def test_empty_snapshot(self):
        stats = compute_stats([])
        assert stats.total == 0
        assert stats.by_status == []
        assert stats.response_rate == 0
        assert stats.avg_salary is None
        assert stats.active_count == 0
        assert stats.avg_days_per_stage == []

    def test_by_status_only_reports_present_statuses(self):
        stats = compute_stats([_app("saved"), _app("applied"), _app("saved")])
        assert {s.status: s.count for s in stats.by_status} == {"saved": 2, "applied": 1}

    def test_response_rate_zero_when_nothing_applied(self):
        stats = compute_stats([_app("saved"), _app("saved")])
        assert stats.response_rate == 0

    def test_response_rate(self):
        apps = [_app("applied"), _app("applied"), _app("phone_screen"), _app("rejected"), _app("saved")]
        # 2 responded out of 4 applied
        assert compute_stats(apps).response_rate == 50

    def test_response_rate_rounds_half_up(self):
        apps = [_app("applied"), _app("offer"), _app("applied"), _app("applied"),
                _app("applied"), _app("applied"), _app("applied"), _app("applied")]
        # 1 / 8 = 12.5%
        assert compute_stats(apps).response_rate == 13

    def test_active_count(self):
        apps = [_app(s) for s in ("saved", "offer", "accepted", "rejected", "withdrawn", "final_round")]
        assert compute_stats(apps).active_count == 3


class TestSalary:
    def test_average_of_midpoints(self):
        apps = [
            _app(salary_min=50_000, salary_max=70_000),
            _app(salary_min=80_000, salary_max=None),
            _app(salary_min=90_000, salary_max=110_000, salary_not_specified=True),
            _app(),
        ]
        stats = compute_stats(apps)
        # (60000 + 40000) / 2
        assert stats.avg_salary == 50_000
        assert [(p.salary_min, p.salary_max) for p in stats.salary_distribution] == [
            (50_000, 70_000),
            (80_000, 0),
        ]

    def test_no_salaries(self):
        assert compute_stats([_app(), _app(salary_not_specified=True, salary_min=1)]).avg_salary is None

    def test_buckets(self):
        pairs = [SalaryPair(salary_min=50_000, salary_max=70_000), SalaryPair(salary_min=10_000, salary_max=20_000)]
        assert [(b.range, b.count) for b in salary_buckets(pairs)] == [("0k-20k", 1), ("60k-80k", 1)]

    def test_buckets_reported_in_stats(self):
        apps = [
            _app(salary_min=50_000, salary_max=70_000),
            _app(salary_min=55_000, salary_max=65_000),
            _app(salary_min=100_000, salary_max=None),
        ]
        buckets = [(b.range, b.count) for b in compute_stats(apps).salary_buckets]
        assert buckets == [("40k-60k", 1), ("60k-80k", 2)]


class TestTimeline:
    def test_grouped_by_iso_week(self):
        apps = [
            _app(date_added="2024-01-01T08:00:00Z"),
            _app(date_added="2024-01-07T23:00:00Z"),
            _app(date_added="2024-01-08T08:00:00Z"),
            _app(date_added="2023-12-31T08:00:00Z"),
        ]
        timeline = [(w.week, w.count) for w in compute_stats(apps).timeline]
        assert timeline == [("2023-W52", 1), ("2024-W01", 2), ("2024-W02", 1)]

    def test_skips_malformed_dates(self):
        apps = [_app(date_added="not a date"), _app(date_added="2024-01-01")]
        stats = compute_stats(apps)
        assert [(w.week, w.count) for w in stats.timeline] == [("2024-W01", 1)]
        assert stats.total == 2


class TestStageDurations:
    def test_example_pipeline(self):
        app = _app(status="phone_screen", history=[
            (None, "saved", "2024-01-01T09:00:00Z"),
            ("saved", "applied", "2024-01-03T09:00:00Z"),
            ("applied", "phone_screen", "2024-01-06T09:00:00Z"),
        ])
        stages = {s.stage: s.avg_days for s in compute_stats([app]).avg_days_per_stage}
        assert stages == {"saved": 2.0, "applied": 3.0}

    def test_averaged_across_applications(self):
        a = _app(history=[(None, "saved", "2024-01-01T00:00:00Z"), ("saved", "applied", "2024-01-02T00:00:00Z")])
        b = _app(history=[(None, "saved", "2024-01-01T00:00:00Z"), ("saved", "applied", "2024-01-03T00:00:00Z")])
        c = _app(history=[(None, "saved", "2024-01-01T00:00:00Z"), ("saved", "applied", "2024-01-03T00:00:00Z")])
        stages = {s.stage: s.avg_days for s in compute_stats([a, b, c]).avg_days_per_stage}
        assert stages == {"saved": 1.7}

    def test_partial_days_are_floored(self):
        durations = stage_durations([
            StatusHistoryEntry(to_status="saved", changed_at="2024-01-01T00:00:00Z"),
            StatusHistoryEntry(to_status="applied", changed_at="2024-01-02T23:59:00Z"),
        ])
        assert durations == [("saved", 1)]

    def test_unordered_history_is_sorted(self):
        durations = stage_durations([
            StatusHistoryEntry(to_status="applied", changed_at="2024-01-05T00:00:00Z"),
            StatusHistoryEntry(to_status="saved", changed_at="2024-01-01T00:00:00Z"),
        ])
        assert durations == [("saved", 4)]

    def test_malformed_timestamps_skipped(self):
        durations = stage_durations([
            StatusHistoryEntry(to_status="saved", changed_at="2024-01-01T00:00:00Z"),
            StatusHistoryEntry(to_status="applied", changed_at="garbage"),
            StatusHistoryEntry(to_status="phone_screen", changed_at="2024-01-04T00:00:00Z"),
        ])
        assert durations == [("saved", 3)]

    def test_single_entry_contributes_nothing(self):
        app = _app(history=[(None, "saved", "2024-01-01T00:00:00Z")])
        assert compute_stats([app]).avg_days_per_stage == []


class TestTagsAndSources:
    def test_top_tags_ties_keep_first_seen_order(self):
        apps = [_app(tags=["remote", "python"]), _app(tags=["python", "go"]), _app(tags=["go"])]
        tags = [(t.name, t.count) for t in compute_stats(apps).top_tags]
        assert tags == [("python", 2), ("go", 2), ("remote", 1)]

    def test_top_tags_limited_to_ten(self):
        apps = [_app(tags=[f"t{i}" for i in range(12)])]
        assert len(compute_stats(apps).top_tags) == 10

    def test_source_stats(self):
        apps = [
            _app("applied", source="linkedin"),
            _app("phone_screen", source="linkedin"),
            _app("offer", source="linkedin"),
            _app("rejected", source="referral"),
            _app("accepted", source="referral"),
            _app("offer"),
        ]
        stats = {s.source: (s.total, s.interviews, s.offers) for s in compute_stats(apps).source_stats}
        assert stats == {"linkedin": (3, 2, 1), "referral": (2, 1, 1)}


class TestDateRange:
    def test_inclusive_bounds(self):
        apps = [
            _app(date_added="2024-01-01T00:00:00Z"),
            _app(date_added="2024-01-15T12:00:00Z"),
            _app(date_added="2024-01-31T23:59:59Z"),
            _app(date_added="2024-02-01T00:00:00Z"),
        ]
        kept = filter_by_date_range(apps, date(2024, 1, 15), date(2024, 1, 31))
        assert [a.date_added for a in kept] == ["2024-01-15T12:00:00Z", "2024-01-31T23:59:59Z"]

    def test_range_applies_before_aggregation(self):
        apps = [_app("applied", date_added="2024-01-05"), _app("offer", date_added="2024-03-05")]
        stats = compute_stats(apps, date_from=date(2024, 1, 1), date_to=date(2024, 1, 31))
        assert stats.total == 1
        assert stats.response_rate == 0


class TestStatsEndpoint:
    def test_stats_over_api(self, client):
        for status in ("applied", "phone_screen"):
            client.post("/api/v1/applications", json={
                "company_name": "Acme", "job_title": "Engineer", "status": status, "tags": ["python"],
            })
        r = client.get("/api/v1/stats")
        assert r.status_code == 200
        data = r.json()
        assert data["total"] == 2
        assert data["response_rate"] == 50
        assert data["top_tags"] == [{"name": "python", "count": 2}]

    def test_reversed_range_rejected(self, client):
        assert client.get("/api/v1/stats?from=2024-02-01&to=2024-01-01").status_code == 400

    def test_malformed_bound_rejected(self, client):
        assert client.get("/api/v1/stats?from=yesterday").status_code == 422
