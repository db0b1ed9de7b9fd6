from datetime import datetime, timezone

from arb_scan.models import CrossVenueArbitrageOpportunity, MatchedEvent
from arb_scan.report import build_cross_venue_report, build_error_report, build_single_venue_report

NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_cross_venue_report_counts() -> None:
    opp = CrossVenueArbitrageOpportunity(
        event_name="Event",
        venue_a_yes_price=0.40,
        venue_b_yes_price=0.55,
        spread=15.0,
        profit_after_fees=3.415,
        venue_a_url="a",
        venue_b_url="b",
        venue_a_id="pm",
        venue_b_id="k",
    )
    matched = [MatchedEvent(id="pm-k", event_name="Event", venue_a=None, venue_b=None)]

    report = build_cross_venue_report([opp], 7, 9, matched, now=NOW)

    assert report["timestamp"] == "2025-01-02T03:04:05+00:00"
    assert report["polymarketCount"] == 7
    assert report["kalshiCount"] == 9
    assert report["matchedCount"] == 1
    assert report["opportunities"][0]["eventName"] == "Event"


def test_single_venue_report_counts() -> None:
    report = build_single_venue_report([], 12, now=NOW)

    assert report == {
        "opportunities": [],
        "timestamp": "2025-01-02T03:04:05+00:00",
        "marketCount": 12,
        "opportunityCount": 0,
    }


def test_error_report_shape() -> None:
    assert build_error_report("boom") == {"error": "boom", "opportunities": []}
