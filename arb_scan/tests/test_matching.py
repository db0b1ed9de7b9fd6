from arb_scan.event_pairs import EventPair
from arb_scan.matching import match_markets, normalize_question, questions_match
from arb_scan.models import MarketSnapshot, Venue


def _snap(market_id: str, question: str, venue: Venue, yes: float = 0.5) -> MarketSnapshot:
    return MarketSnapshot(
        id=market_id,
        question=question,
        yes_price=yes,
        no_price=1 - yes,
        url=f"https://example.test/{market_id}",
        venue=venue,
    )


def test_table_pair_emitted_when_only_one_side_resolves() -> None:
    venue_a = [_snap("pm-fed", "Fed cuts?", Venue.POLYMARKET)]
    pairs = [EventPair("Fed decision", "pm-fed", "K-FED")]

    matched = match_markets(venue_a, [], pairs)

    assert len(matched) == 1
    event = matched[0]
    assert event.id == "pm-fed-K-FED"
    assert event.event_name == "Fed decision"
    assert event.venue_a is venue_a[0]
    assert event.venue_b is None
    assert event.is_complete is False


def test_table_pair_dropped_when_neither_side_resolves() -> None:
    pairs = [EventPair("Ghost", "pm-x", "K-X")]
    assert match_markets([_snap("pm-y", "a", Venue.POLYMARKET)], [], pairs) == []


def test_table_pair_missing_id_renders_as_empty_string() -> None:
    venue_b = [_snap("K-1", "Kalshi only", Venue.KALSHI)]
    matched = match_markets([], venue_b, [EventPair("Only B", None, "K-1")])

    assert matched[0].id == "-K-1"


def test_fuzzy_match_on_shared_prefix() -> None:
    venue_a = [_snap("a1", "Will the Lakers win the 2026 NBA title?", Venue.POLYMARKET)]
    venue_b = [_snap("b1", "  will the lakers win the 2026 NBA Title? (official)", Venue.KALSHI)]

    matched = match_markets(venue_a, venue_b)

    assert len(matched) == 1
    assert matched[0].id == "a1-b1"
    assert matched[0].event_name == "Will the Lakers win the 2026 NBA title?"
    assert matched[0].is_complete


def test_exact_matches_come_before_fuzzy_and_are_not_rematched() -> None:
    venue_a = [
        _snap("a-fuzzy", "Who wins the Super Bowl in 2026?", Venue.POLYMARKET),
        _snap("a-table", "Bitcoin above 100k?", Venue.POLYMARKET),
    ]
    venue_b = [
        _snap("b-table", "Bitcoin above 100k?", Venue.KALSHI),
        _snap("b-fuzzy", "Who wins the Super Bowl in 2026?", Venue.KALSHI),
    ]
    pairs = [EventPair("Bitcoin", "a-table", "b-table")]

    matched = match_markets(venue_a, venue_b, pairs)

    assert [event.id for event in matched] == ["a-table-b-table", "a-fuzzy-b-fuzzy"]


def test_first_fuzzy_candidate_wins() -> None:
    venue_a = [_snap("a1", "Will it rain in London tomorrow?", Venue.POLYMARKET)]
    venue_b = [
        _snap("b1", "Will it rain in London tomorrow?", Venue.KALSHI),
        _snap("b2", "will it rain in london tomorrow?", Venue.KALSHI),
    ]

    matched = match_markets(venue_a, venue_b)

    assert len(matched) == 1
    assert matched[0].venue_b.id == "b1"


def test_unrelated_questions_do_not_match() -> None:
    venue_a = [_snap("a1", "Will the Fed cut rates in March?", Venue.POLYMARKET)]
    venue_b = [_snap("b1", "Who will win the Super Bowl?", Venue.KALSHI)]

    assert match_markets(venue_a, venue_b) == []


def test_empty_questions_never_fuzzy_match() -> None:
    venue_a = [_snap("a1", "   ", Venue.POLYMARKET)]
    venue_b = [_snap("b1", "Anything at all", Venue.KALSHI)]

    assert match_markets(venue_a, venue_b) == []


def test_questions_match_rules() -> None:
    assert questions_match("same", "same")
    assert questions_match("short", "a much longer short question")
    assert questions_match("abcdefghijklmnopqrstuvwxyz", "xx abcdefghijklmnopqrst yy")
    assert not questions_match("abcdefghijklmnopqrstuvwxyz", "abcdefghijklmnopqrsX")
    assert normalize_question("  Mixed Case ") == "mixed case"
