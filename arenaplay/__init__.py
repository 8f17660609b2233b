"""
Arena match runner package.

Plays your bot against league opponents on the remote arena and tracks win
rates, backing off when the server rate limits.

Usage:
    python -m arenaplay --help
    python -m arenaplay 10 --agent1 -1 --agent2 -2
    python -m arenaplay --top10
"""

from arenaplay.constants import (
    BACKOFF_BASE_DELAY,
    BOSS_AGENT_ID,
    RATE_LIMIT_ERROR_ID,
    SELF_AGENT_ID,
    TOP_N,
)

__all__ = [
    # Constants
    'BACKOFF_BASE_DELAY',
    'BOSS_AGENT_ID',
    'RATE_LIMIT_ERROR_ID',
    'SELF_AGENT_ID',
    'TOP_N',
    # Core (import from their modules when needed)
    # - build_session_context, ArenaClient, MatchOrchestrator, OpponentResolver
]
