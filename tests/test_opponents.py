"""Tests for arenaplay.opponents module."""

import pytest
from unittest.mock import MagicMock

from arenaplay.errors import ResolutionError
from arenaplay.opponents import (
    ExplicitAgent,
    FilterChoice,
    LeaderboardEntry,
    LeaderboardQuery,
    LeagueBoss,
    Opponent,
    OpponentResolver,
    SelfCode,
    TopOfLeague,
    filter_query,
    parse_specifier,
)
from arenaplay.session import SessionContext


CONTEXT = SessionContext(session_handle="abc123", public_handle="pub-handle",
                         agent_id=555, division_id=9, room_index=2)


def make_entries(count, boss_id=None):
    entries = [LeaderboardEntry(agent_id=1000 + i, pseudo=f"player{i}", rank=i) for i in range(count)]
    if boss_id is not None:
        entries[0] = LeaderboardEntry(agent_id=boss_id, pseudo="Boss", rank=0)
    return entries


def make_resolver(entries):
    client = MagicMock()
    client.get_filtered_leaderboard.return_value = entries
    return OpponentResolver(client, CONTEXT), client


class TestParseSpecifier:
    """Tests for parse_specifier function."""

    def test_self(self):
        assert parse_specifier(-1) == SelfCode()
        assert parse_specifier("-1") == SelfCode()

    def test_league_boss(self):
        assert parse_specifier(-2) == LeagueBoss()
        assert parse_specifier("-2") == LeagueBoss()

    def test_explicit_id(self):
        assert parse_specifier(4242) == ExplicitAgent(4242)
        assert parse_specifier(" 4242 ") == ExplicitAgent(4242)

    def test_top10(self):
        assert parse_specifier("top10") == TopOfLeague(10)
        assert parse_specifier("TOP10") == TopOfLeague(10)

    def test_invalid_values(self):
        for value in ["bob", 0, -3, 1.5, True, None]:
            with pytest.raises(ResolutionError):
                parse_specifier(value)


class TestLeaderboardEntry:
    """Tests for LeaderboardEntry.from_dict."""

    def test_fields(self):
        entry = LeaderboardEntry.from_dict(
            {"agentId": 7, "pseudo": "bob", "rank": 3, "score": 12.5, "programmingLanguage": "Rust"})
        assert entry.agent_id == 7
        assert entry.pseudo == "bob"
        assert entry.rank == 3
        assert entry.score == 12.5
        assert entry.programming_language == "Rust"

    def test_rank_defaults_to_position(self):
        entry = LeaderboardEntry.from_dict({"agentId": 7, "pseudo": "bob"}, 4)
        assert entry.rank == 4

    def test_missing_pseudo_is_empty(self):
        assert LeaderboardEntry.from_dict({"agentId": 7, "pseudo": None}).pseudo == ""


class TestLeaderboardQuery:
    """Tests for LeaderboardQuery validation."""

    def test_defaults(self):
        assert LeaderboardQuery().to_payload() == {"active": None, "column": "CODINGAMER", "filter": "ALL"}

    def test_unknown_column(self):
        with pytest.raises(ValueError):
            LeaderboardQuery(column="ELO")

    def test_unknown_filter(self):
        with pytest.raises(ValueError):
            LeaderboardQuery(column="CODINGAMER", filter="NEARBY")

    def test_keyword_accepts_any_text(self):
        assert LeaderboardQuery(column="KEYWORD", filter="some name").filter == "some name"


class TestOpponentResolver:
    """Tests for OpponentResolver specifier resolution."""

    def test_league_boss_is_rank_zero(self):
        resolver, _ = make_resolver(make_entries(5, boss_id=777))
        assert resolver.resolve([LeagueBoss()]) == [Opponent(777, "Boss")]

    def test_league_boss_found_anywhere_in_list(self):
        entries = [LeaderboardEntry(1, "a", 2), LeaderboardEntry(777, "Boss", 0), LeaderboardEntry(3, "c", 1)]
        resolver, _ = make_resolver(entries)
        assert resolver.resolve_one(LeagueBoss()).agent_id == 777

    def test_league_boss_falls_back_to_first_entry(self):
        entries = [LeaderboardEntry(5, "a", 1), LeaderboardEntry(6, "b", 2)]
        resolver, _ = make_resolver(entries)
        assert resolver.resolve_one(LeagueBoss()).agent_id == 5

    def test_league_boss_on_empty_leaderboard(self):
        resolver, _ = make_resolver([])
        with pytest.raises(ResolutionError):
            resolver.resolve([LeagueBoss()])

    def test_top10_of_fifteen(self):
        entries = make_entries(15)
        resolver, _ = make_resolver(entries)

        opponents = resolver.resolve([TopOfLeague()])

        assert opponents == [e.to_opponent() for e in entries[:10]]

    def test_top10_of_short_leaderboard(self):
        resolver, _ = make_resolver(make_entries(4))
        assert len(resolver.resolve([TopOfLeague()])) == 4

    def test_explicit_id_found(self):
        resolver, _ = make_resolver(make_entries(5))
        assert resolver.resolve_one(ExplicitAgent(1003)) == Opponent(1003, "player3")

    def test_explicit_id_missing_gets_placeholder(self):
        """An unknown id must not abort a batch."""
        resolver, _ = make_resolver(make_entries(5))
        assert resolver.resolve_one(ExplicitAgent(99999)) == Opponent(99999, "")

    def test_self_uses_public_handle(self):
        resolver, client = make_resolver([])
        assert resolver.resolve_one(SelfCode()) == Opponent(-1, "pub-handle")
        client.get_filtered_leaderboard.assert_not_called()

    def test_mixed_list_keeps_order_and_fetches_once(self):
        resolver, client = make_resolver(make_entries(5, boss_id=777))

        opponents = resolver.resolve([ExplicitAgent(1002), LeagueBoss(), ExplicitAgent(4), SelfCode()])

        assert [o.agent_id for o in opponents] == [1002, 777, 4, -1]
        client.get_filtered_leaderboard.assert_called_once()
        assert client.get_filtered_leaderboard.call_args.args == (CONTEXT, LeaderboardQuery())

    def test_resolve_one_rejects_multiple(self):
        resolver, _ = make_resolver(make_entries(15))
        with pytest.raises(ResolutionError):
            resolver.resolve_one(TopOfLeague())


class TestFilterChoices:
    """Tests for interactive filter resolution."""

    def test_query_mapping(self):
        assert filter_query(FilterChoice.AROUND) == LeaderboardQuery(True, "CODINGAMER", "AROUND")
        assert filter_query(FilterChoice.FOLLOWING) == LeaderboardQuery(True, "CODINGAMER", "FOLLOWING")
        assert filter_query(FilterChoice.TOP10) == LeaderboardQuery(True, "CODINGAMER", "ALL")
        assert filter_query(FilterChoice.KEYWORD, "bob") == LeaderboardQuery(True, "KEYWORD", "bob")

    def test_keyword_required(self):
        with pytest.raises(ResolutionError):
            filter_query(FilterChoice.KEYWORD, "   ")
        with pytest.raises(ResolutionError):
            filter_query(FilterChoice.KEYWORD)

    def test_keyword_match(self):
        resolver, client = make_resolver([LeaderboardEntry(8, "bobby", 12)])

        opponents = resolver.resolve_filter(FilterChoice.KEYWORD, "bob")

        assert opponents == [Opponent(8, "bobby")]
        client.get_filtered_leaderboard.assert_called_once_with(
            CONTEXT, LeaderboardQuery(True, "KEYWORD", "bob"))

    def test_keyword_without_match_asks_again(self):
        resolver, _ = make_resolver([])
        with pytest.raises(ResolutionError, match="Try something else"):
            resolver.resolve_filter(FilterChoice.KEYWORD, "nobody")

    def test_top10_filter_is_sliced(self):
        resolver, _ = make_resolver(make_entries(25))
        assert len(resolver.resolve_filter(FilterChoice.TOP10)) == 10

    def test_following_empty(self):
        resolver, _ = make_resolver([])
        with pytest.raises(ResolutionError):
            resolver.resolve_filter(FilterChoice.FOLLOWING)
