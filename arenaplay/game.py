"""
Match request/result records and win statistics.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from arenaplay.errors import RemoteServiceError


@dataclass(frozen=True)
class MatchRequest:
    """One match to run on the remote service."""
    code: str
    programming_language_id: str
    agent1_id: int
    agent2_id: int
    game_options: Optional[str] = None  # None lets the service randomize conditions

    def to_payload(self) -> dict:
        return {
            "code": self.code,
            "programmingLanguageId": self.programming_language_id,
            "multi": {
                "agentsIds": [self.agent1_id, self.agent2_id],
                "gameOptions": self.game_options,
            },
        }


@dataclass
class Frame:
    """A single frame of a played game. Opaque apart from who it belongs to."""
    game_information: str
    view: str
    keyframe: bool
    agent_id: int  # -1 = referee, 0 = agent1, 1 = agent2
    summary: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Frame":
        return cls(
            game_information=data.get("gameInformation", ""),
            view=data.get("view", ""),
            keyframe=bool(data.get("keyframe", False)),
            agent_id=data.get("agentId", -1),
            summary=data.get("summary"),
            stdout=data.get("stdout"),
            stderr=data.get("stderr"),
        )


@dataclass
class MatchResult:
    """Result of a single match, as returned by the play endpoint."""
    frames: list[Frame]
    game_id: int
    referee_input: str
    scores: tuple[int, int]
    ranks: tuple[int, int]
    raw: dict[str, Any] = field(default_factory=dict, repr=False)  # Body as received, for writing to disk

    @classmethod
    def from_response(cls, body: Any) -> "MatchResult":
        """Build a MatchResult from a play response body, rejecting malformed bodies."""
        if not isinstance(body, dict):
            raise RemoteServiceError(f"Malformed match result: expected an object, got {type(body).__name__}")

        missing = [key for key in ("gameId", "refereeInput", "scores", "ranks") if key not in body]
        if missing:
            raise RemoteServiceError(f"Malformed match result: missing {', '.join(missing)}")

        scores = body["scores"]
        ranks = body["ranks"]
        if not isinstance(scores, list) or len(scores) != 2:
            raise RemoteServiceError(f"Malformed match result: expected 2 scores, got {scores!r}")
        if not isinstance(ranks, list) or len(ranks) != 2:
            raise RemoteServiceError(f"Malformed match result: expected 2 ranks, got {ranks!r}")
        frames = body.get("frames") or []
        if not isinstance(frames, list) or not all(isinstance(frame, dict) for frame in frames):
            raise RemoteServiceError("Malformed match result: frames must be a list of objects")

        return cls(
            frames=[Frame.from_dict(frame) for frame in frames],
            game_id=body["gameId"],
            referee_input=body["refereeInput"],
            scores=(scores[0], scores[1]),
            ranks=(ranks[0], ranks[1]),
            raw=body,
        )

    def has_won(self, agent_index: int) -> bool:
        """Rank 0 means the agent finished first. Anything else is a loss or unfinished game."""
        return self.ranks[agent_index] == 0


def margin_of_error(games_played: int) -> float:
    """
    Coarse confidence proxy for a win rate: 1 / sqrt(n).
    Not a statistical confidence interval.
    """
    if games_played < 1:
        raise ValueError(f"margin of error needs at least one game, got {games_played}")
    return 1 / math.sqrt(games_played)


@dataclass
class RunningStatistics:
    """Win counts accumulated over a series of matches."""
    games_played: int = 0
    wins: list[int] = field(default_factory=lambda: [0, 0])

    def record(self, result: MatchResult, agents: tuple[int, ...] = (0, 1)):
        """Count one finished match, crediting wins only for the tracked agents."""
        self.games_played += 1
        for agent_index in agents:
            if result.has_won(agent_index):
                self.wins[agent_index] += 1

    def win_rate(self, agent_index: int) -> float:
        if self.games_played == 0:
            return 0.0
        return self.wins[agent_index] / self.games_played

    @property
    def margin_of_error(self) -> Optional[float]:
        if self.games_played == 0:
            return None
        return margin_of_error(self.games_played)
