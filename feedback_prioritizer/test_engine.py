"""Tests for scoring, quadrant partitioning and aggregation."""
import json
from datetime import date, datetime, timedelta, timezone
from itertools import count

import pytest

from schemas import FeedbackItem, PriorityThresholds
from scoring import score, sort_by_priority
from quadrants import partition, quadrant_for
from aggregator import category_distribution, sentiment_distribution, summarize, trend
from export import CSV_HEADER, items_to_csv


BATCH_TIME = datetime(2024, 1, 10, 9, 30, tzinfo=timezone.utc)


def raw(title="Item", category="Bug", urgency=5, impact=5, sentiment="neutral", summary="..."):
    return {
        "title": title,
        "category": category,
        "urgency": urgency,
        "impact": impact,
        "sentiment": sentiment,
        "summary": summary,
    }


_ids = count(1)


def make_item(urgency=5, impact=5, category="Bug", sentiment="neutral", created_at=BATCH_TIME, title=None):
    item_id = f"item-{next(_ids)}"
    return FeedbackItem(
        id=item_id,
        title=title or item_id,
        category=category,
        urgency=urgency,
        impact=impact,
        sentiment=sentiment,
        summary="",
        created_at=created_at,
    )


def sequential_ids():
    counter = count(1)
    return lambda: f"id-{next(counter)}"


# ============================================================================
# SCORING & INTAKE
# ============================================================================

class TestScoring:
    """Tests for turning classifier records into ranked items."""

    def test_priority_score_is_sum_for_every_level(self):
        """Every urgency/impact pair scores u + i within [2, 20]."""
        records = [raw(urgency=u, impact=i) for u in range(1, 11) for i in range(1, 11)]

        result = score(records, now=BATCH_TIME)

        assert result.dropped == 0
        assert len(result.items) == 100
        for item in result.items:
            assert item.priority_score == item.urgency + item.impact
            assert 2 <= item.priority_score <= 20

    def test_sorted_descending_by_priority(self):
        result = score([raw(urgency=2, impact=2), raw(urgency=9, impact=9), raw(urgency=5, impact=6)])

        assert [item.priority_score for item in result.items] == [18, 11, 4]

    def test_ties_preserve_input_order(self):
        """Equal scores keep relative input order."""
        records = [raw(title="A", urgency=5, impact=5), raw(title="B", urgency=4, impact=6),
                   raw(title="C", urgency=9, impact=9), raw(title="D", urgency=6, impact=4)]

        result = score(records, id_factory=sequential_ids())

        assert [item.title for item in result.items] == ["C", "A", "B", "D"]
        assert [item.id for item in result.items] == ["id-3", "id-1", "id-2", "id-4"]

    def test_ids_are_unique_uuids_by_default(self):
        result = score([raw() for _ in range(20)])

        ids = [item.id for item in result.items]
        assert len(set(ids)) == 20
        assert all(len(item_id) == 36 for item_id in ids)

    def test_batch_shares_created_at(self):
        result = score([raw(), raw()], now=BATCH_TIME)

        assert {item.created_at for item in result.items} == {BATCH_TIME}

    def test_created_at_defaults_to_now(self):
        before = datetime.now(timezone.utc)
        result = score([raw()])
        after = datetime.now(timezone.utc)

        assert before <= result.items[0].created_at <= after

    def test_empty_batch_is_not_an_error(self):
        result = score([])

        assert result.items == []
        assert result.dropped == 0

    @pytest.mark.parametrize("urgency,expected", [(0, 1), (-4, 1), (11, 10), (250, 10), (7.6, 8), (0.4, 1)])
    def test_out_of_range_values_are_clamped(self, urgency, expected):
        result = score([raw(urgency=urgency, impact=5)])

        assert result.dropped == 0
        assert result.items[0].urgency == expected
        assert result.items[0].priority_score == expected + 5

    def test_out_of_range_values_rejected_when_clamping_disabled(self):
        result = score([raw(urgency=11), raw(impact=0), raw(urgency=10, impact=1)], clamp=False)

        assert result.dropped == 2
        assert len(result.items) == 1
        assert result.items[0].priority_score == 11

    def test_integers_too_large_for_float_are_clamped(self):
        result = score([raw(urgency=10**400, impact=-10**400)])

        assert result.dropped == 0
        assert result.items[0].urgency == 10
        assert result.items[0].impact == 1

    def test_oversized_json_integer_does_not_fail_batch(self):
        payload = (
            '[{"title": "Huge", "category": "Bug", "urgency": 1' + "0" * 400 + ', "impact": 5,'
            ' "sentiment": "negative", "summary": "s"}, '
            + json.dumps(raw(title="Normal"))
            + "]"
        )

        result = score(json.loads(payload), id_factory=sequential_ids())

        assert result.dropped == 0
        assert [item.title for item in result.items] == ["Huge", "Normal"]
        assert result.items[0].urgency == 10

    def test_oversized_integer_rejected_when_clamping_disabled(self):
        result = score([raw(urgency=10**400), raw()], clamp=False)

        assert result.dropped == 1
        assert len(result.items) == 1

    def test_fractional_values_round_to_nearest_integer(self):
        result = score([raw(urgency=6.5, impact=3.2)])

        assert result.items[0].urgency == 7
        assert result.items[0].impact == 3

    @pytest.mark.parametrize("missing", ["title", "category", "urgency", "impact", "sentiment", "summary"])
    def test_missing_field_drops_only_that_item(self, missing):
        bad = raw(title="bad")
        del bad[missing]

        result = score([raw(title="good-1"), bad, raw(title="good-2")])

        assert result.dropped == 1
        assert [item.title for item in result.items] == ["good-1", "good-2"]

    @pytest.mark.parametrize("record", [
        raw(urgency="high"),
        raw(impact=True),
        raw(urgency=float("nan")),
        raw(sentiment="mixed"),
        raw(title="   "),
        raw(category=42),
        "not a record",
    ])
    def test_malformed_records_are_dropped(self, record):
        result = score([record, raw(title="ok")])

        assert result.dropped == 1
        assert [item.title for item in result.items] == ["ok"]

    def test_sentiment_is_normalized(self):
        result = score([raw(sentiment=" Negative ")])

        assert result.items[0].sentiment == "negative"

    def test_category_kept_verbatim(self):
        result = score([raw(category=" ui/ux ")])

        assert result.items[0].category == " ui/ux "

    def test_priority_score_cannot_be_injected(self):
        item = FeedbackItem(
            id="x", title="t", category="c", urgency=2, impact=3,
            sentiment="neutral", summary="", created_at=BATCH_TIME, priority_score=20,
        )

        assert item.priority_score == 5
        assert item.model_dump()["priority_score"] == 5

    def test_sort_by_priority_is_stable(self):
        first = make_item(urgency=5, impact=5)
        second = make_item(urgency=3, impact=7)
        top = make_item(urgency=9, impact=2)

        assert sort_by_priority([first, second, top]) == [top, first, second]


# ============================================================================
# QUADRANT PARTITIONER
# ============================================================================

class TestQuadrants:
    """Tests for the urgency/impact matrix."""

    @pytest.mark.parametrize("urgency,impact,expected", [
        (6, 6, "critical"),
        (5, 6, "important"),
        (6, 5, "urgent"),
        (5, 5, "low"),
        (10, 10, "critical"),
        (1, 1, "low"),
        (10, 1, "urgent"),
        (1, 10, "important"),
    ])
    def test_boundaries(self, urgency, impact, expected):
        assert quadrant_for(make_item(urgency=urgency, impact=impact)) == expected

    def test_partition_is_total_and_disjoint(self):
        items = [make_item(urgency=u, impact=i) for u in range(1, 11) for i in range(1, 11)]

        quadrants = partition(items)
        buckets = [quadrants.critical, quadrants.urgent, quadrants.important, quadrants.low]

        assert sum(len(bucket) for bucket in buckets) == len(items)
        ids = [item.id for bucket in buckets for item in bucket]
        assert len(ids) == len(set(ids))
        assert quadrants.counts() == {"critical": 25, "urgent": 25, "important": 25, "low": 25}

    def test_partition_preserves_input_order(self):
        a = make_item(urgency=7, impact=9)
        b = make_item(urgency=9, impact=9)
        c = make_item(urgency=6, impact=6)

        assert partition([a, b, c]).critical == [a, b, c]

    def test_empty_input_gives_empty_buckets(self):
        quadrants = partition([])

        assert quadrants.counts() == {"critical": 0, "urgent": 0, "important": 0, "low": 0}

    def test_custom_thresholds(self):
        thresholds = PriorityThresholds(high_urgency=8, high_impact=3)

        assert quadrant_for(make_item(urgency=7, impact=3), thresholds) == "important"
        assert quadrant_for(make_item(urgency=8, impact=2), thresholds) == "urgent"


# ============================================================================
# AGGREGATOR
# ============================================================================

class TestDistributions:
    """Tests for category and sentiment counts."""

    def test_category_counts_are_case_sensitive_and_ordered(self):
        items = [make_item(category="Bug"), make_item(category="UI/UX"),
                 make_item(category="bug"), make_item(category="Bug")]

        distribution = category_distribution(items)

        assert distribution == {"Bug": 2, "UI/UX": 1, "bug": 1}
        assert list(distribution) == ["Bug", "UI/UX", "bug"]
        assert sum(distribution.values()) == len(items)

    def test_category_counts_empty(self):
        assert category_distribution([]) == {}

    def test_sentiment_zero_fill(self):
        items = [make_item(sentiment="negative"), make_item(sentiment="negative")]

        distribution = sentiment_distribution(items)

        assert distribution == {"positive": 0, "neutral": 0, "negative": 2}
        assert list(distribution) == ["positive", "neutral", "negative"]
        assert sum(distribution.values()) == len(items)

    def test_sentiment_zero_fill_empty(self):
        assert sentiment_distribution([]) == {"positive": 0, "neutral": 0, "negative": 0}

    def test_sentiment_sparse(self):
        items = [make_item(sentiment="negative"), make_item(sentiment="positive"),
                 make_item(sentiment="negative")]

        distribution = sentiment_distribution(items, zero_fill=False)

        assert distribution == {"negative": 2, "positive": 1}
        assert list(distribution) == ["negative", "positive"]
        assert sum(distribution.values()) == len(items)


class TestTrend:
    """Tests for the trailing daily trend."""

    TODAY = date(2024, 1, 15)

    def at(self, day, hour=12):
        return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)

    @pytest.mark.parametrize("size", [0, 1, 5, 60])
    def test_always_seven_points_oldest_first(self, size):
        items = [make_item(created_at=self.at(self.TODAY - timedelta(days=n % 12))) for n in range(size)]

        points = trend(items, today=self.TODAY)

        assert len(points) == 7
        assert [point.day for point in points] == [self.TODAY - timedelta(days=n) for n in range(6, -1, -1)]

    def test_empty_days_have_zero_average(self):
        points = trend([], today=self.TODAY)

        assert all(point.count == 0 and point.avg_priority == 0 for point in points)

    def test_average_and_count_per_day(self):
        day = self.TODAY - timedelta(days=2)
        items = [
            make_item(urgency=9, impact=8, created_at=self.at(day, 1)),
            make_item(urgency=3, impact=2, created_at=self.at(day, 23)),
            make_item(urgency=4, impact=4, created_at=self.at(self.TODAY)),
        ]

        points = {point.day: point for point in trend(items, today=self.TODAY)}

        assert points[day].count == 2
        assert points[day].avg_priority == 11.0
        assert points[self.TODAY].count == 1
        assert points[self.TODAY].avg_priority == 8.0

    def test_average_rounds_half_up_to_one_decimal(self):
        scores = [(6, 6), (6, 6), (6, 7), (6, 6)]  # mean 12.25
        items = [make_item(urgency=u, impact=i, created_at=self.at(self.TODAY)) for u, i in scores]

        assert trend(items, today=self.TODAY)[-1].avg_priority == 12.3

    def test_average_of_thirds(self):
        items = [make_item(urgency=u, impact=1, created_at=self.at(self.TODAY)) for u in (1, 1, 2)]

        assert trend(items, today=self.TODAY)[-1].avg_priority == 2.3

    def test_items_outside_window_are_ignored(self):
        items = [
            make_item(created_at=self.at(self.TODAY - timedelta(days=7))),
            make_item(created_at=self.at(self.TODAY + timedelta(days=1))),
        ]

        assert sum(point.count for point in trend(items, today=self.TODAY)) == 0

    def test_bucketing_uses_timestamp_own_calendar_date(self):
        """A late-evening timestamp in UTC-5 stays on its own local date."""
        eastern = timezone(timedelta(hours=-5))
        items = [make_item(created_at=datetime(2024, 1, 14, 23, 30, tzinfo=eastern))]

        points = {point.day: point for point in trend(items, today=self.TODAY)}

        assert points[date(2024, 1, 14)].count == 1
        assert points[self.TODAY].count == 0

    def test_labels(self):
        points = trend([], today=date(2024, 1, 10))

        assert points[0].label == "Jan 4"
        assert points[-1].label == "Jan 10"

    def test_custom_window_length(self):
        assert len(trend([], today=self.TODAY, days=30)) == 30

    def test_defaults_to_current_utc_date(self):
        assert trend([])[-1].day == datetime.now(timezone.utc).date()

    def test_freshly_scored_items_land_on_last_day(self):
        points = trend(score([raw(urgency=8, impact=7)]).items)

        assert points[-1].count == 1
        assert points[-1].avg_priority == 15.0
        assert sum(point.count for point in points) == 1

    @pytest.mark.parametrize("days", [0, -3])
    def test_window_must_cover_at_least_one_day(self, days):
        with pytest.raises(ValueError):
            trend([], today=self.TODAY, days=days)


class TestSummaryAndExport:
    """End-to-end engine scenario and CSV export."""

    def test_end_to_end_scenario(self):
        records = [
            raw(title="item1", urgency=9, impact=8, category="Bug", sentiment="negative"),
            raw(title="item2", urgency=3, impact=2, category="UI/UX", sentiment="positive"),
        ]
        created = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)

        result = score(records, now=created)
        items = result.items

        assert [item.priority_score for item in items] == [17, 5]
        assert [item.title for item in items] == ["item1", "item2"]

        quadrants = partition(items)
        assert [item.title for item in quadrants.critical] == ["item1"]
        assert [item.title for item in quadrants.low] == ["item2"]
        assert quadrants.urgent == [] and quadrants.important == []

        summary = summarize(items, today=date(2024, 1, 10))
        assert summary.total_items == 2
        assert summary.categories == {"Bug": 1, "UI/UX": 1}
        assert summary.sentiments == {"positive": 1, "neutral": 0, "negative": 1}
        assert summary.quadrant_counts == {"critical": 1, "urgent": 0, "important": 0, "low": 1}
        assert summary.trend[-1].count == 2
        assert summary.trend[-1].avg_priority == 11.0

    def test_csv_export(self):
        items = [
            make_item(urgency=9, impact=8, category="Bug", sentiment="negative", title='Crash, "again"'),
            make_item(urgency=3, impact=2, category="UI/UX", sentiment="positive", title="Nice colors"),
        ]

        lines = items_to_csv(items).splitlines()

        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[1] == '"Crash, ""again""",Bug,9,8,17,negative,'
        assert lines[2] == "Nice colors,UI/UX,3,2,5,positive,"

    def test_csv_export_empty(self):
        assert items_to_csv([]) == ",".join(CSV_HEADER) + "\n"
