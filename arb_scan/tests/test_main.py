from __future__ import annotations

import json

import pytest

from arb_scan import main as cli
from arb_scan.models import MarketSnapshot, Venue


def _snap(market_id: str, yes: float, venue: Venue) -> MarketSnapshot:
    return MarketSnapshot(
        id=market_id,
        question="Shared question",
        yes_price=yes,
        no_price=1 - yes,
        url="",
        venue=venue,
    )


class _FakeAdapter:
    def __init__(self, snapshots=None, error: Exception | None = None) -> None:
        self.snapshots = snapshots or []
        self.error = error
        self.closed = False

    async def fetch_market_snapshots(self):
        if self.error is not None:
            raise self.error
        return self.snapshots

    async def fetch_order_book(self, token_id: str):
        return None

    async def aclose(self) -> None:
        self.closed = True


def test_stakes_command_prints_allocation(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.chdir(tmp_path)

    code = cli.main(["stakes", "--bankroll", "1000", "--venue-a-price", "0.40", "--venue-b-price", "0.55"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["polymarketStake"] == pytest.approx(521.74, abs=0.01)
    assert payload["kalshiStake"] == pytest.approx(478.26, abs=0.01)
    assert payload["opportunity"]["profitAfterFees"] == pytest.approx(3.415)


def test_stakes_command_without_edge_exits_nonzero(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.chdir(tmp_path)

    code = cli.main(["stakes", "--venue-a-price", "0.50", "--venue-b-price", "0.50"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload["opportunities"] == []
    assert "error" in payload


def test_cross_command_reports_matches(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ARB_EVENT_PAIRS_PATH", str(tmp_path / "none.csv"))
    polymarket = _FakeAdapter([_snap("pm-1", 0.40, Venue.POLYMARKET)])
    kalshi = _FakeAdapter([_snap("k-1", 0.55, Venue.KALSHI)])
    monkeypatch.setattr(cli, "PolymarketAdapter", lambda settings: polymarket)
    monkeypatch.setattr(cli, "KalshiAdapter", lambda settings: kalshi)

    code = cli.main(["cross"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["polymarketCount"] == 1
    assert payload["kalshiCount"] == 1
    assert payload["matchedCount"] == 1
    assert payload["opportunities"][0]["polymarketId"] == "pm-1"
    assert polymarket.closed and kalshi.closed


def test_cross_command_failure_prints_error_payload(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    polymarket = _FakeAdapter(error=RuntimeError("gamma unavailable"))
    kalshi = _FakeAdapter([])
    monkeypatch.setattr(cli, "PolymarketAdapter", lambda settings: polymarket)
    monkeypatch.setattr(cli, "KalshiAdapter", lambda settings: kalshi)

    code = cli.main(["cross"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload == {"error": "gamma unavailable", "opportunities": []}
    assert polymarket.closed and kalshi.closed


def test_single_command_reports_market_count(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    polymarket = _FakeAdapter([_snap("pm-1", 0.40, Venue.POLYMARKET)])
    monkeypatch.setattr(cli, "PolymarketAdapter", lambda settings: polymarket)

    code = cli.main(["single", "--limit", "3"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert payload["marketCount"] == 1
    assert payload["opportunityCount"] == 0
