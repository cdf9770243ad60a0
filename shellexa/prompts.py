"""Prompt construction for command suggestions.

Every request sent to the model provider is composed here.  A full
prompt restates the user's request together with a short description of
the machine (operating system family, CPU architecture and, when known,
the hostname and working directory) so the model can pick commands that
actually exist on the host.  After a failed execution the prompt also
carries the failed command and its captured output; after a rethink it
asks for an alternative to the discarded suggestion.

Providers that keep a conversation history across calls only need the
new instruction for follow-up turns, so :meth:`PromptBuilder.build` can
produce an incremental prompt as well.  Both forms end with the same
instruction to answer with nothing but the command, since
:func:`shellexa.parser.parse_command` relies on a minimal response.
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from typing import List, Optional

from .session import Session, TurnKind

ONLY_COMMAND_INSTRUCTION = (
    "Provide only the command nothing else, not even any explanations or notes "
    "or suggestions, it is essential as this command would be directly executed."
)


@dataclass(frozen=True)
class SystemContext:
    """Static description of the host the command will run on."""

    os_family: str
    architecture: str
    hostname: Optional[str] = None
    working_directory: Optional[str] = None

    @classmethod
    def detect(cls, working_directory: Optional[str] = None) -> "SystemContext":
        """Inspect the current interpreter's host once at start-up."""
        return cls(
            os_family=platform.system().lower() or os.name,
            architecture=platform.machine().lower() or "unknown",
            hostname=platform.node() or None,
            working_directory=working_directory or os.getcwd(),
        )

    def describe(self) -> str:
        parts = [f"System: {self.os_family}", f"Arch: {self.architecture}"]
        if self.hostname:
            parts.append(f"Host: {self.hostname}")
        if self.working_directory:
            parts.append(f"Working directory: {self.working_directory}")
        return ", ".join(parts)


class PromptBuilder:
    """Compose the text sent to the model for each turn."""

    def __init__(self, context: SystemContext) -> None:
        self.context = context

    def build(self, session: Session, kind: TurnKind, *, incremental: bool = False) -> str:
        """Return the prompt for the next suggestion.

        :param session: State of the current invocation.
        :param kind: Why a suggestion is requested.
        :param incremental: When true and this is not the first turn, only
          the new instruction is emitted because the provider already holds
          the earlier conversation.
        """
        if incremental and kind is not TurnKind.INITIAL:
            return self._incremental(session, kind)
        return self._full(session, kind)

    def _full(self, session: Session, kind: TurnKind) -> str:
        lines: List[str] = [
            f"Generate a shell command to achieve this: '{session.request}'.",
            f"System context: {self.context.describe()}.",
        ]
        if kind is TurnKind.FAILURE or (kind is TurnKind.RETHINK and session.has_pending_failure):
            lines.append(_failure_text(session))
        if kind is TurnKind.RETHINK:
            lines.append(_rethink_text(session))
        lines.append(ONLY_COMMAND_INSTRUCTION)
        return "\n".join(lines)

    def _incremental(self, session: Session, kind: TurnKind) -> str:
        lines: List[str] = []
        if kind is TurnKind.FAILURE:
            lines.append(_failure_text(session))
            lines.append("Provide a corrected command for the same request.")
        else:
            lines.append(_rethink_text(session))
        lines.append(ONLY_COMMAND_INSTRUCTION)
        return "\n".join(lines)


def _failure_text(session: Session) -> str:
    error = (session.last_error or "").strip() or "(no output)"
    return f"Previous attempt failed to execute: {session.last_command}. Error: {error}"


def _rethink_text(session: Session) -> str:
    if session.discarded_candidate:
        return (
            f"The user rejected the suggestion '{session.discarded_candidate}'. "
            "Provide an alternative command."
        )
    return "Provide an alternative command."
