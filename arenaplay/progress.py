"""
Console progress for match series.

Prints one line per finished game with running wins and margin of error:
  Game   3/10: WIN  | Agent1: 2 wins (67%) | Agent2: 1 wins (33%) | Margin of Error: 58%
"""

from arenaplay.game import MatchResult, RunningStatistics
from arenaplay.opponents import Opponent


def format_percentage(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.0%}"


class ConsoleProgress:
    """Prints match results as they arrive. Pass its methods as orchestrator callbacks."""

    def __init__(self, round_robin: bool = False):
        self.round_robin = round_robin
        self.stats: RunningStatistics | None = None  # Latest statistics, for the summary

    def on_result(self, stats: RunningStatistics, result: MatchResult, opponent: Opponent,
                  index: int, total: int):
        self.stats = stats
        outcome = "WIN " if result.has_won(0) else "LOSS"
        margin = format_percentage(stats.margin_of_error)
        if self.round_robin:
            name = opponent.pseudo or " - "
            print(f"Match {index:3d}/{total} vs {name} ({opponent.agent_id}): {outcome} | "
                  f"Wins: {stats.wins[0]} ({format_percentage(stats.win_rate(0))}) | "
                  f"Margin of Error: {margin}", flush=True)
        else:
            print(f"Game {index:3d}/{total}: {outcome} | "
                  f"Agent1: {stats.wins[0]} wins ({format_percentage(stats.win_rate(0))}) | "
                  f"Agent2: {stats.wins[1]} wins ({format_percentage(stats.win_rate(1))}) | "
                  f"Margin of Error: {margin}", flush=True)

    def on_rate_limited(self, delay: float, attempt: int, message: str):
        print(f"  Rate limited by server ({message}), retrying in {delay:g}s... (attempt {attempt})", flush=True)

    def summary(self, stats: RunningStatistics):
        print(f"\n{'='*70}")
        print("FINAL RESULTS")
        print(f"{'='*70}")
        print(f"Games: {stats.games_played}")
        print(f"Agent1: {stats.wins[0]} wins ({format_percentage(stats.win_rate(0))})")
        if not self.round_robin:
            print(f"Agent2: {stats.wins[1]} wins ({format_percentage(stats.win_rate(1))})")
        print(f"Margin of Error: {format_percentage(stats.margin_of_error)}")
        print(f"{'='*70}\n")
