"""
Opponent selection: turns specifiers like "the league boss" or "top 10" into
concrete agents using the current league room's leaderboard.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from arenaplay.constants import (
    BOSS_AGENT_ID,
    LEADERBOARD_COLUMNS,
    LEADERBOARD_FILTERS,
    SELF_AGENT_ID,
    TOP_N,
)
from arenaplay.errors import ResolutionError


@dataclass(frozen=True)
class Opponent:
    """A concrete agent to play against. agent_id -1 is the submitted code itself."""
    agent_id: int
    pseudo: str


@dataclass(frozen=True)
class LeaderboardEntry:
    """Read-only projection of one leaderboard user."""
    agent_id: int
    pseudo: str
    rank: int
    score: Optional[float] = None
    programming_language: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict, position: int = 0) -> "LeaderboardEntry":
        """Rank falls back to the entry's position when the service omits it."""
        return cls(
            agent_id=data.get("agentId"),
            pseudo=data.get("pseudo") or "",
            rank=data.get("rank", position),
            score=data.get("score"),
            programming_language=data.get("programmingLanguage"),
            raw=data,
        )

    def to_opponent(self) -> Opponent:
        return Opponent(agent_id=self.agent_id, pseudo=self.pseudo)


@dataclass(frozen=True)
class LeaderboardQuery:
    """Filter/column selection for a leaderboard fetch."""
    active: Optional[bool] = None
    column: str = "CODINGAMER"
    filter: str = "ALL"

    def __post_init__(self):
        if self.column not in LEADERBOARD_COLUMNS:
            raise ValueError(f"Unknown leaderboard column: {self.column}")
        # KEYWORD takes a free-text search term as its filter
        if self.column != "KEYWORD" and self.filter not in LEADERBOARD_FILTERS:
            raise ValueError(f"Unknown leaderboard filter: {self.filter}")

    def to_payload(self) -> dict:
        return {"active": self.active, "column": self.column, "filter": self.filter}


# ----------------------------------------------------------------------
# Specifiers
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class SelfCode:
    """The submitted code plays itself."""
    pass


@dataclass(frozen=True)
class LeagueBoss:
    """The boss of the current league."""
    pass


@dataclass(frozen=True)
class ExplicitAgent:
    agent_id: int


@dataclass(frozen=True)
class TopOfLeague:
    """The first `count` agents of the current league room."""
    count: int = TOP_N


Specifier = Union[SelfCode, LeagueBoss, ExplicitAgent, TopOfLeague]


def parse_specifier(value) -> Specifier:
    """
    Parse a config/flag value into a specifier.

    Accepts -1 (self), -2 (league boss), a positive agent id, or "top10".
    Numeric strings are accepted as well.
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "top10":
            return TopOfLeague()
        try:
            value = int(text)
        except ValueError:
            raise ResolutionError(f"Invalid opponent specifier: {value!r}") from None

    if isinstance(value, bool) or not isinstance(value, int):
        raise ResolutionError(f"Invalid opponent specifier: {value!r}")
    if value == SELF_AGENT_ID:
        return SelfCode()
    if value == BOSS_AGENT_ID:
        return LeagueBoss()
    if value > 0:
        return ExplicitAgent(value)
    raise ResolutionError(f"Invalid agent id: {value}")


class FilterChoice(Enum):
    """Ways to look for opponents interactively, with their prompt text."""
    AROUND = "have a similar rank as mine"
    FOLLOWING = "I follow"
    TOP10 = "are in the Top 10 of my league"
    KEYWORD = "have a specific name"


def filter_query(choice: FilterChoice, keyword: str = None) -> LeaderboardQuery:
    """Map an interactive filter choice to the leaderboard query it stands for."""
    if choice is FilterChoice.AROUND:
        return LeaderboardQuery(active=True, column="CODINGAMER", filter="AROUND")
    if choice is FilterChoice.FOLLOWING:
        return LeaderboardQuery(active=True, column="CODINGAMER", filter="FOLLOWING")
    if choice is FilterChoice.TOP10:
        return LeaderboardQuery(active=True, column="CODINGAMER", filter="ALL")
    if not keyword or not keyword.strip():
        raise ResolutionError("A name to search for is required.")
    return LeaderboardQuery(active=True, column="KEYWORD", filter=keyword.strip())


class OpponentResolver:
    """
    Resolves specifiers into concrete opponents for one session.

    The unfiltered leaderboard is fetched at most once per resolver and shared
    by every specifier that needs it.
    """

    def __init__(self, client, context):
        self.client = client
        self.context = context
        self._leaderboard: Optional[list[LeaderboardEntry]] = None

    def leaderboard(self) -> list[LeaderboardEntry]:
        if self._leaderboard is None:
            self._leaderboard = self.client.get_filtered_leaderboard(self.context, LeaderboardQuery())
        return self._leaderboard

    def resolve(self, specifiers: list[Specifier]) -> list[Opponent]:
        """Resolve specifiers in order. TopOfLeague expands into several opponents."""
        opponents = []
        for specifier in specifiers:
            opponents.extend(self._resolve(specifier))
        return opponents

    def resolve_one(self, specifier: Specifier) -> Opponent:
        opponents = self._resolve(specifier)
        if len(opponents) != 1:
            raise ResolutionError(f"{specifier} does not name a single opponent")
        return opponents[0]

    def _resolve(self, specifier: Specifier) -> list[Opponent]:
        if isinstance(specifier, SelfCode):
            return [Opponent(SELF_AGENT_ID, self.context.public_handle)]
        if isinstance(specifier, LeagueBoss):
            return [self.league_boss()]
        if isinstance(specifier, TopOfLeague):
            return self.top(specifier.count)
        if isinstance(specifier, ExplicitAgent):
            return [self.by_agent_id(specifier.agent_id)]
        raise ResolutionError(f"Unsupported opponent specifier: {specifier!r}")

    def league_boss(self) -> Opponent:
        users = self.leaderboard()
        if not users:
            raise ResolutionError("Could not find the league boss: the leaderboard is empty.")
        for entry in users:
            if entry.rank == 0:
                return entry.to_opponent()
        return users[0].to_opponent()

    def top(self, count: int = TOP_N) -> list[Opponent]:
        users = self.leaderboard()
        if not users:
            raise ResolutionError("Could not fetch users: the leaderboard is empty.")
        return [entry.to_opponent() for entry in users[:count]]

    def by_agent_id(self, agent_id: int) -> Opponent:
        """Look an agent up by id. Unknown ids get a placeholder instead of failing the batch."""
        for entry in self.leaderboard():
            if entry.agent_id == agent_id:
                return entry.to_opponent()
        return Opponent(agent_id, "")

    def resolve_filter(self, choice: FilterChoice, keyword: str = None) -> list[Opponent]:
        """
        Candidate opponents for an interactive filter choice.

        Raises ResolutionError when nothing matches so the caller can ask again.
        """
        users = self.client.get_filtered_leaderboard(self.context, filter_query(choice, keyword))
        if choice is FilterChoice.TOP10:
            users = users[:TOP_N]
        if not users:
            if choice is FilterChoice.KEYWORD:
                raise ResolutionError("Can't find an opponent with that name. Try something else.")
            raise ResolutionError(f"No opponents found that {choice.value}.")
        return [entry.to_opponent() for entry in users]
