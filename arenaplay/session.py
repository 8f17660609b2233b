"""
Session bootstrap: the three calls that identify who is playing which puzzle
in which league room.
"""

from contextlib import contextmanager
from dataclasses import dataclass

from arenaplay.errors import ArenaError, SessionBuildError, SessionStep


@dataclass(frozen=True)
class SessionContext:
    """Identity of one run on the arena. Built once, never changed."""
    session_handle: str
    public_handle: str
    agent_id: int
    division_id: int
    room_index: int


def build_session_context(client, user_id: int, puzzle_name: str) -> SessionContext:
    """
    Bootstrap a SessionContext for a user and puzzle.

    The calls run strictly in order since each needs the session handle from
    the first. No retries: a rate limit here is reported like any other
    failure.

    Raises:
        SessionBuildError: tagged with the step that failed
    """
    with _step(SessionStep.SESSION_HANDLE, f"for puzzle {puzzle_name}"):
        session_handle = client.generate_session_handle(user_id, puzzle_name)["handle"]

    with _step(SessionStep.IDENTITY):
        ranking = client.get_user_ranking(session_handle)
        public_handle = ranking["codingamer"]["publicHandle"]
        agent_id = ranking["agentId"]

    with _step(SessionStep.ROOM_LOOKUP):
        arena_codingamer = client.start_test_session(session_handle)["currentQuestion"]["arena"]["arenaCodinGamer"]
        division_id = arena_codingamer["divisionId"]
        room_index = arena_codingamer["roomIndex"]

    return SessionContext(
        session_handle=session_handle,
        public_handle=public_handle,
        agent_id=agent_id,
        division_id=division_id,
        room_index=room_index,
    )


@contextmanager
def _step(step: SessionStep, detail: str = ""):
    """Turn any failure inside a bootstrap step into a SessionBuildError for that step."""
    suffix = f" ({detail})" if detail else ""
    try:
        yield
    except ArenaError as e:
        message = getattr(e, "message", None) or str(e)
        raise SessionBuildError(step, f"{message}{suffix}") from e
    except (KeyError, TypeError) as e:
        # Missing or null field in an otherwise successful response
        raise SessionBuildError(step, f"Unexpected response, missing {e}{suffix}") from e
