"""Agent session continuity for a single workflow run."""


class SessionTracker:
    """Tracks whether an AI agent step has already run.

    The first AI agent step starts a fresh session; every later one continues it.
    """

    def __init__(self):
        self._first_agent_step = True

    @property
    def is_first(self) -> bool:
        return self._first_agent_step

    def next_continuation(self) -> bool:
        """Return the continue-previous-session flag for the next agent step."""
        continue_previous = not self._first_agent_step
        self._first_agent_step = False
        return continue_previous
