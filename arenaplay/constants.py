"""
Constants for the arena match runner.
"""

# Remote service
BASE_URL = "https://www.codingame.com/services"
REQUEST_TIMEOUT = 60  # seconds, a single play call simulates a whole game

SESSION_HANDLE_PATH = "/Puzzle/generateSessionFromPuzzlePrettyId"
IDENTITY_PATH = "/Leaderboards/getUserArenaDivisionRoomRankingByTestSessionHandle"
ROOM_LOOKUP_PATH = "/TestSession/startTestSession"
LEADERBOARD_PATH = "/Leaderboards/getFilteredArenaDivisionRoomLeaderboard"
PLAY_PATH = "/TestSession/play"

# Error id the play endpoint returns when too many games were requested
RATE_LIMIT_ERROR_ID = 407

# Rate limit backoff - doubles on every consecutive rate limit, resets on success
BACKOFF_BASE_DELAY = 10  # seconds

# Sentinel agent ids understood by the remote service / config file
SELF_AGENT_ID = -1
BOSS_AGENT_ID = -2

TOP_N = 10

# Leaderboard query columns and filters
LEADERBOARD_COLUMNS = ("CODINGAMER", "LANGUAGE", "SCORE", "COUNTRY", "KEYWORD")
LEADERBOARD_FILTERS = ("ALL", "SAME", "FINISHED", "INPROGRESS", "AROUND", "FOLLOWING", "ONLINE")

# Files written next to the game data
CACHED_GAME_OPTIONS_FILE = "cached-game-options.txt"
DEFAULT_OUTPUT_DIR = "./arena-out"
DEFAULT_CONFIG_PATH = "./arenaplay.toml"
