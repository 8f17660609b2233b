"""
Match series: repeated games against one opponent, or one game each against
a list of opponents, with backoff when the server rate limits us.
"""

import time
from typing import Callable, Iterator, Optional

from arenaplay.constants import BACKOFF_BASE_DELAY, BOSS_AGENT_ID
from arenaplay.errors import RateLimited, RemoteServiceError
from arenaplay.game import MatchRequest, MatchResult, RunningStatistics
from arenaplay.opponents import Opponent
from arenaplay.session import SessionContext


# on_result(stats, result, opponent, index, total) - index is 1-based
ResultCallback = Callable[[RunningStatistics, MatchResult, Opponent, int, int], None]
# on_rate_limited(delay_seconds, attempt, message)
RateLimitCallback = Callable[[float, int, str], None]


class MatchOrchestrator:
    """
    Plays matches one at a time for a single session.

    Games are never run concurrently: parallel requests are what triggers the
    server's rate limiting in the first place.
    """

    def __init__(self, client, context: SessionContext, code: str, programming_language_id: str,
                 agent1: Opponent,
                 game_options: Optional[str] = None,
                 base_delay: float = BACKOFF_BASE_DELAY,
                 max_retries: Optional[int] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 on_result: Optional[ResultCallback] = None,
                 on_rate_limited: Optional[RateLimitCallback] = None):
        """
        Args:
            agent1: the player side, usually Opponent(-1, ...) for the submitted code
            game_options: pins match conditions (replay mode); None randomizes them
            base_delay: first backoff wait in seconds, doubled on each consecutive rate limit
            max_retries: rate limit retries per match before giving up (None = never give up)
            sleep: blocking wait used for backoff
        """
        _check_resolved(agent1)
        self.client = client
        self.context = context
        self.code = code
        self.programming_language_id = programming_language_id
        self.agent1 = agent1
        self.game_options = game_options
        self.base_delay = base_delay
        self.max_retries = max_retries
        self.sleep = sleep
        self.on_result = on_result
        self.on_rate_limited = on_rate_limited

    def play_series(self, opponent: Opponent, count: int) -> Iterator[MatchResult]:
        """
        Play `count` matches against the same opponent, yielding each result.

        Statistics for both agents are passed to on_result after every match.
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        _check_resolved(opponent)

        return self._play_series(opponent, count)

    def _play_series(self, opponent: Opponent, count: int) -> Iterator[MatchResult]:
        stats = RunningStatistics()
        request = self._request(opponent)
        for i in range(count):
            result = self._play_with_backoff(request)
            stats.record(result, agents=(0, 1))
            if self.on_result:
                self.on_result(stats, result, opponent, i + 1, count)
            yield result

    def play_round_robin(self, opponents: list[Opponent]) -> Iterator[MatchResult]:
        """
        Play one match against each opponent, in list order.

        Only agent1's wins are tracked.
        """
        for opponent in opponents:
            _check_resolved(opponent)

        return self._play_round_robin(list(opponents))

    def _play_round_robin(self, opponents: list[Opponent]) -> Iterator[MatchResult]:
        stats = RunningStatistics()
        for i, opponent in enumerate(opponents):
            result = self._play_with_backoff(self._request(opponent))
            stats.record(result, agents=(0,))
            if self.on_result:
                self.on_result(stats, result, opponent, i + 1, len(opponents))
            yield result

    def _request(self, opponent: Opponent) -> MatchRequest:
        return MatchRequest(
            code=self.code,
            programming_language_id=self.programming_language_id,
            agent1_id=self.agent1.agent_id,
            agent2_id=opponent.agent_id,
            game_options=self.game_options,
        )

    def _play_with_backoff(self, request: MatchRequest) -> MatchResult:
        """
        Play one match, waiting and retrying the same request while rate limited.

        The delay starts at base_delay and doubles per consecutive rate limit.
        It starts over for every match, so it is back at base_delay after a success.
        """
        delay = self.base_delay
        attempt = 0
        while True:
            try:
                return self.client.play_match(self.context, request)
            except RateLimited as e:
                attempt += 1
                if self.max_retries is not None and attempt > self.max_retries:
                    raise RemoteServiceError(
                        f"Still rate limited after {self.max_retries} retries. {e.message}"
                    ) from e
                if self.on_rate_limited:
                    self.on_rate_limited(delay, attempt, e.message)
                self.sleep(delay)
                delay *= 2


def _check_resolved(opponent: Opponent):
    if opponent.agent_id == BOSS_AGENT_ID:
        raise ValueError("League boss (-2) must be resolved to an agent id before playing")
