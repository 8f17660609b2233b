"""
Command-line interface for the arena match runner.
"""

import argparse
import sys
from pathlib import Path

from arenaplay.api import ArenaClient
from arenaplay.competitions import MatchOrchestrator
from arenaplay.config import ConfigError, as_id_list, load_config, read_code
from arenaplay.constants import BACKOFF_BASE_DELAY, DEFAULT_CONFIG_PATH, DEFAULT_OUTPUT_DIR
from arenaplay.errors import ArenaError, ResolutionError
from arenaplay.opponents import FilterChoice, OpponentResolver, TopOfLeague, parse_specifier
from arenaplay.output import date_stamp, load_cached_game_options, write_cached_game_options, write_game_data
from arenaplay.progress import ConsoleProgress
from arenaplay.session import build_session_context


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arenaplay",
        description="Play matches between your bot and arena opponents on the remote server",
        epilog="Agent ids: -1 means your own code, -2 means the boss of your league"
    )
    parser.add_argument("count", nargs="?", type=int, default=1,
                        help="Number of games to play on the server, must be at least 1 (default: 1)")
    parser.add_argument("--agent1", type=str, default=None,
                        help="Id of agent 1")
    parser.add_argument("--agent2", type=str, default=None,
                        help="Id of agent 2")
    parser.add_argument("--code", "-c", type=str, default=None,
                        help="Path to the file containing the code to submit")
    parser.add_argument("--config", type=str, default=DEFAULT_CONFIG_PATH,
                        help=f"Path to config file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--language", "-l", type=str, default=None,
                        help="Programming language of your bot source code (e.g. Python3)")
    parser.add_argument("--puzzle", "-p", type=str, default=None,
                        help="Name of the puzzle or contest used by the arena API")
    parser.add_argument("--output", "-o", action="store_true",
                        help="Write game data to the output directory")
    parser.add_argument("--outdir", type=str, default=None,
                        help=f"Directory for game data, created if missing (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--replay", "-r", action="store_true",
                        help="Use the same game conditions as the last game played")
    parser.add_argument("--max-retries", type=int, default=None, metavar="N",
                        help="Give up after N rate limit retries per game (default: retry forever)")
    parser.add_argument("--backoff", type=float, default=None, metavar="SECONDS",
                        help=f"First wait after a rate limit, doubled each time (default: {BACKOFF_BASE_DELAY})")

    opponents = parser.add_mutually_exclusive_group()
    opponents.add_argument("--top10", action="store_true",
                           help="Play agent 1 against the top 10 bots in the league")
    opponents.add_argument("--interactive", "-i", action="store_true",
                           help="Choose the opponent(s) of agent 1 from an interactive menu")
    return parser


def fail(message: str):
    print(f"Error: {message}")
    sys.exit(1)


def validate_inputs(args, config: dict):
    """Exit with an error message for the first missing or invalid setting."""
    if args.count < 1:
        fail(f"The count argument must be a number bigger than 0 and it was {args.count}")
    if not config.get('cookie'):
        fail("No cookie was specified. Set ARENA_COOKIE or add 'cookie' to the config file")
    if not config.get('user_id'):
        fail("No user id was specified. Please add 'user_id' to the config file")
    if not args.language and not config.get('programming_language_id'):
        fail("No programming language was specified. Add 'programming_language_id' to the config file or use --language.")
    if not args.agent1 and config.get('agent1') is None:
        fail("No id for agent 1 was specified. Add 'agent1' to the config file or use --agent1.")
    if not (args.agent2 or args.top10 or args.interactive) and not as_id_list(config.get('agent2')):
        fail("No id(s) for agent 2 were specified. Add 'agent2' to the config file or use --agent2.")
    if not args.puzzle and not config.get('puzzle_name'):
        fail("No puzzle name was specified. Add 'puzzle_name' to the config file or use --puzzle.")
    if not args.code and not config.get('code_path'):
        fail("No code path was specified. Add 'code_path' to the config file or use --code.")


def describe(opponent) -> str:
    return f"{opponent.pseudo or ' - '} ({opponent.agent_id})"


def prompt_choice(prompt: str, options: list[str]) -> int:
    """Ask for one option by number. Returns its index."""
    for i, option in enumerate(options, 1):
        print(f"  {i}. {option}")
    while True:
        answer = input(f"{prompt}: ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return int(answer) - 1
        print(f"Please enter a number between 1 and {len(options)}.")


def prompt_opponents(resolver: OpponentResolver) -> list:
    """Interactive opponent search: pick a filter, then one or more of its matches."""
    choices = list(FilterChoice)
    print("Look for opponents that")
    choice = choices[prompt_choice("Filter", [c.value for c in choices])]

    if choice is FilterChoice.KEYWORD:
        while True:
            try:
                candidates = resolver.resolve_filter(choice, input("Search for name: "))
                break
            except ResolutionError as e:
                print(e)
    else:
        candidates = resolver.resolve_filter(choice)

    print("Select the opponent(s)")
    for i, opponent in enumerate(candidates, 1):
        print(f"  {i}. {describe(opponent)}")
    while True:
        answer = input("Numbers, comma separated: ")
        picks = [part.strip() for part in answer.split(",") if part.strip()]
        if picks and all(p.isdigit() and 1 <= int(p) <= len(candidates) for p in picks):
            return [candidates[int(p) - 1] for p in picks]
        print("You have to select at least one opponent.")


def run(args, config: dict):
    outdir = Path(args.outdir or config.get('output_dir') or DEFAULT_OUTPUT_DIR).resolve()
    puzzle_name = args.puzzle or config['puzzle_name']
    code_path = args.code or config['code_path']
    programming_language_id = args.language or config['programming_language_id']
    agent1_id = args.agent1 if args.agent1 is not None else config['agent1']
    agent2_ids = [args.agent2] if args.agent2 else as_id_list(config.get('agent2'))
    max_retries = args.max_retries if args.max_retries is not None else config.get('max_retries')
    backoff = args.backoff if args.backoff is not None else config.get('backoff_base', BACKOFF_BASE_DELAY)

    print("Fetching session from the arena...")
    client = ArenaClient(config['cookie'])
    context = build_session_context(client, int(config['user_id']), puzzle_name)

    game_options = None
    if args.replay:
        try:
            game_options = load_cached_game_options(outdir)
        except OSError as e:
            fail(f"There was a problem reading cached game options from {outdir}. {e}")

    try:
        code = read_code(code_path)
    except OSError as e:
        fail(f"There was a problem trying to read your code from {code_path}. {e}")

    resolver = OpponentResolver(client, context)
    agent1 = resolver.resolve_one(parse_specifier(agent1_id))
    if args.interactive:
        opponents = prompt_opponents(resolver)
    elif args.top10:
        opponents = resolver.resolve([TopOfLeague()])
    else:
        opponents = resolver.resolve([parse_specifier(agent_id) for agent_id in agent2_ids])

    round_robin = len(opponents) > 1
    progress = ConsoleProgress(round_robin=round_robin)
    orchestrator = MatchOrchestrator(
        client, context, code, programming_language_id, agent1,
        game_options=game_options,
        base_delay=backoff,
        max_retries=max_retries,
        on_result=progress.on_result,
        on_rate_limited=progress.on_rate_limited,
    )

    print(f"\n{'='*70}")
    print(f"Puzzle: {puzzle_name} (player {context.public_handle})")
    print(f"Agent1: {describe(agent1)}")
    print(f"Opponents: {', '.join(describe(o) for o in opponents)}")
    if game_options:
        print("Replaying cached game conditions")
    print(f"{'='*70}")

    if round_robin:
        if args.count > 1:
            print(f"Warning: count is {args.count} but multi opponent runs play once per opponent.")
        results = orchestrator.play_round_robin(opponents)
    else:
        results = orchestrator.play_series(opponents[0], args.count)

    stamp = date_stamp()
    for i, result in enumerate(results, 1):
        if args.output:
            write_game_data(outdir, stamp, i, result)
        write_cached_game_options(outdir, result)

    if progress.stats:
        progress.summary(progress.stats)
    if args.output:
        print(f"Game data written to {outdir}")


def main(argv: list[str] = None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.agent2 and (args.top10 or args.interactive):
        parser.error("--agent2 cannot be combined with --top10 or --interactive")

    try:
        config = load_config(Path(args.config))
    except ConfigError as e:
        fail(str(e))

    validate_inputs(args, config)

    try:
        run(args, config)
    except ArenaError as e:
        fail(str(e))
    except KeyboardInterrupt:
        print("\n\nStopped.")
        sys.exit(130)
