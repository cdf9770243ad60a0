"""Per-invocation state for the interaction loop.

A :class:`Session` holds everything one ``shellexa run`` needs to remember
between turns: the original request, the prompt sent most recently, the
candidate currently offered to the user and the last failed execution.
Sessions live in memory only and are discarded when the process exits.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LoopState(str, Enum):
    """States of the suggestion/confirmation/retry machine."""

    SUGGEST = "suggest"
    CONFIRM = "confirm"
    EXECUTE = "execute"
    RETHINK = "rethink"
    ABORTED = "aborted"
    DONE = "done"

    @property
    def terminal(self) -> bool:
        return self in (LoopState.ABORTED, LoopState.DONE)


class TurnKind(str, Enum):
    """Why a new suggestion is being requested."""

    INITIAL = "initial"
    FAILURE = "failure"
    RETHINK = "rethink"


@dataclass
class Session:
    """In-memory state of one invocation."""

    request: str
    prompt: str = ""
    candidate: Optional[str] = None
    discarded_candidate: Optional[str] = None
    last_command: Optional[str] = None
    last_error: Optional[str] = None
    attempts: int = 0
    turns: int = 0

    def record_failure(self, command: str, output: str) -> None:
        """Remember a failed execution so the next prompt can mention it."""
        self.last_command = command
        self.last_error = output
        self.candidate = None

    def discard_candidate(self) -> None:
        self.discarded_candidate = self.candidate
        self.candidate = None

    @property
    def has_pending_failure(self) -> bool:
        return self.last_command is not None and self.last_error is not None
