"""
HTTP client for the arena web API.

Every call is a JSON POST of a positional array to a fixed services path,
authenticated by the session cookie. Failures are translated here into the
arenaplay error types so callers never see requests exceptions.
"""

import os

import requests

from arenaplay.constants import (
    BASE_URL,
    REQUEST_TIMEOUT,
    SESSION_HANDLE_PATH,
    IDENTITY_PATH,
    ROOM_LOOKUP_PATH,
    LEADERBOARD_PATH,
    PLAY_PATH,
    RATE_LIMIT_ERROR_ID,
)
from arenaplay.errors import RemoteServiceError, RateLimited
from arenaplay.game import MatchRequest, MatchResult
from arenaplay.opponents import LeaderboardEntry, LeaderboardQuery
from arenaplay.session import SessionContext


def cookie_header(cookie: str) -> str:
    """The service expects the remember-me token as a named cookie."""
    if cookie.startswith("rememberMe="):
        return cookie
    return f"rememberMe={cookie}"


class ArenaClient:
    """HTTP client for the arena services API."""

    def __init__(self, cookie: str, base_url: str = None, session: requests.Session = None,
                 timeout: float = REQUEST_TIMEOUT):
        self.base_url = (base_url or os.environ.get("ARENA_BASE_URL") or BASE_URL).rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers['cookie'] = cookie_header(cookie)
        self.session.headers['Content-Type'] = 'application/json'

    def _post(self, path: str, payload: list):
        """
        POST a positional payload and return the decoded JSON body.

        Raises RemoteServiceError for network errors, non-2xx responses and
        bodies that are not JSON. The service's error id and message are kept
        on the exception when the error body carries them.
        """
        try:
            resp = self.session.post(f'{self.base_url}{path}', json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteServiceError(str(e)) from e

        if not resp.ok:
            error_id, message = _parse_error_body(resp)
            raise RemoteServiceError(
                message or f"HTTP {resp.status_code} from {path}",
                error_id=error_id,
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise RemoteServiceError(f"Invalid JSON from {path}: {e}", status_code=resp.status_code) from e

    # ------------------------------------------------------------------
    # Session bootstrap
    # ------------------------------------------------------------------

    def generate_session_handle(self, user_id: int, puzzle_name: str) -> dict:
        return self._post(SESSION_HANDLE_PATH, [user_id, puzzle_name, False])

    def get_user_ranking(self, session_handle: str) -> dict:
        return self._post(IDENTITY_PATH, [session_handle, "global"])

    def start_test_session(self, session_handle: str) -> dict:
        return self._post(ROOM_LOOKUP_PATH, [session_handle])

    # ------------------------------------------------------------------
    # Leaderboard and matches
    # ------------------------------------------------------------------

    def get_filtered_leaderboard(self, context: SessionContext, query: LeaderboardQuery = None) -> list[LeaderboardEntry]:
        """
        Fetch a filtered view of the current league room's leaderboard.

        Read-only and idempotent. Entries come back in leaderboard order.
        """
        query = query or LeaderboardQuery()
        body = self._post(LEADERBOARD_PATH, [
            {'divisionId': context.division_id, 'roomIndex': context.room_index},
            context.public_handle,
            None,
            query.to_payload(),
        ])
        users = (body.get('users') or []) if isinstance(body, dict) else None
        if not isinstance(users, list) or not all(_is_user(user) for user in users):
            raise RemoteServiceError("Could not fetch users from the leaderboard: malformed response")
        return [LeaderboardEntry.from_dict(user, index) for index, user in enumerate(users)]

    def play_match(self, context: SessionContext, request: MatchRequest) -> MatchResult:
        """
        Run one match on the server.

        Raises RateLimited when the service reports too many requests, and
        RemoteServiceError for every other failure.
        """
        try:
            body = self._post(PLAY_PATH, [context.session_handle, request.to_payload()])
        except RemoteServiceError as e:
            if e.error_id == RATE_LIMIT_ERROR_ID:
                raise RateLimited(e.message) from e
            raise RemoteServiceError(
                f"There was a problem running your match. {e.message}",
                error_id=e.error_id,
                status_code=e.status_code,
            ) from e

        # An error body delivered with a 2xx status is classified the same way
        if isinstance(body, dict) and body.get('id') == RATE_LIMIT_ERROR_ID:
            raise RateLimited(body.get('message') or "Too many requests")

        return MatchResult.from_response(body)


def _is_user(user) -> bool:
    # Every entry must name a playable agent
    agent_id = user.get('agentId') if isinstance(user, dict) else None
    return isinstance(agent_id, int) and not isinstance(agent_id, bool)


def _parse_error_body(resp) -> tuple[int | None, str | None]:
    """Extract (error id, message) from an error response, if it has a JSON body."""
    try:
        body = resp.json()
    except ValueError:
        return None, (resp.text or None)
    if not isinstance(body, dict):
        return None, None
    return body.get('id'), body.get('message')
