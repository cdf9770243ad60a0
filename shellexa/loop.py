"""Suggestion, confirmation and retry loop.

:class:`InteractionLoop` drives one invocation from the user's request to
a terminal state::

    SUGGEST -> CONFIRM -> EXECUTE -> DONE
                       -> ABORTED
                       -> RETHINK -> SUGGEST
              EXECUTE (failed)    -> SUGGEST

Entering ``SUGGEST`` asks the provider for a command.  A response without
a parsable command is retried with the same prompt, at most
:data:`MAX_ACQUISITION_ATTEMPTS` provider calls in total, before the whole
invocation fails with :class:`AcquisitionError`.  Transport errors fail
immediately.

A failed execution is not a user decision: its output is folded into the
next prompt and a new suggestion is requested automatically.  There is no
cap on how often this happens; the user can always abort at ``CONFIRM``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import click

from . import ShellexaError
from .executor import ShellExecutor
from .parser import parse_command
from .prompts import PromptBuilder
from .providers import CommandProvider, ProviderError
from .session import LoopState, Session, TurnKind

LOGGER = logging.getLogger(__name__)

MAX_ACQUISITION_ATTEMPTS = 3

CHOICE_EXECUTE = "e"
CHOICE_ABORT = "a"
CHOICE_RETHINK = "r"
OPTIONS_TEXT = "Options: [e] execute, [a] abort, [r] rethink"
INVALID_CHOICE_TEXT = "Invalid option. Please choose [e] execute, [a] abort, or [r] rethink."

ReadChoice = Callable[[], str]
Echo = Callable[[str], None]


class AcquisitionError(ShellexaError):
    """Raised when no usable command could be obtained from the provider."""


@dataclass
class LoopResult:
    state: LoopState
    session: Session

    @property
    def executed(self) -> bool:
        return self.state is LoopState.DONE


def acquire_command(
    provider: CommandProvider,
    prompt: str,
    *,
    max_attempts: int = MAX_ACQUISITION_ATTEMPTS,
    session: Optional[Session] = None,
) -> str:
    """Ask ``provider`` for a command until one can be parsed.

    :param provider: Backend to query.
    :param prompt: Prompt sent unchanged on every attempt.
    :param max_attempts: Total number of provider calls allowed.
    :param session: When given, ``session.attempts`` tracks the calls made.
    :returns: The parsed candidate command.
    :raises AcquisitionError: If the provider fails or no attempt yields a
      command.
    """
    for attempt in range(1, max_attempts + 1):
        if session is not None:
            session.attempts = attempt
        try:
            response = provider.generate(prompt)
        except ProviderError as exc:
            raise AcquisitionError(f"Error fetching command from API: {exc}") from exc

        command = parse_command(response)
        if command:
            return command
        provider.discard_last_exchange()
        LOGGER.info(
            "acquisition_retry",
            extra={"attempt": attempt, "max_attempts": max_attempts, "response": response[:200]},
        )
    raise AcquisitionError(f"Failed to retrieve a valid command after {max_attempts} attempts")


def _read_choice_from_stdin() -> str:
    return click.prompt("", default="", show_default=False, prompt_suffix="")


class InteractionLoop:
    """Runs the suggest/confirm/execute cycle for one request."""

    def __init__(
        self,
        *,
        provider: CommandProvider,
        builder: PromptBuilder,
        executor: Optional[ShellExecutor] = None,
        read_choice: Optional[ReadChoice] = None,
        echo: Optional[Echo] = None,
        max_attempts: int = MAX_ACQUISITION_ATTEMPTS,
    ) -> None:
        self.provider = provider
        self.builder = builder
        self.executor = executor or ShellExecutor()
        self.read_choice = read_choice or _read_choice_from_stdin
        self.echo = echo or click.echo
        self.max_attempts = max_attempts

    def run(self, request: str) -> LoopResult:
        """Drive ``request`` to a terminal state.

        :raises AcquisitionError: When the provider cannot supply a command.
        """
        session = Session(request=request)
        state = LoopState.SUGGEST
        kind = TurnKind.INITIAL

        while not state.terminal:
            LOGGER.debug("loop_state", extra={"state": state.value, "turn": session.turns})
            if state is LoopState.SUGGEST:
                self._suggest(session, kind)
                state = LoopState.CONFIRM
            elif state is LoopState.CONFIRM:
                state = self._confirm(session)
            elif state is LoopState.EXECUTE:
                if self._execute(session):
                    state = LoopState.DONE
                else:
                    kind = TurnKind.FAILURE
                    state = LoopState.SUGGEST
            elif state is LoopState.RETHINK:
                self.echo("Re-thinking the command...")
                session.discard_candidate()
                kind = TurnKind.RETHINK
                state = LoopState.SUGGEST

        if state is LoopState.ABORTED:
            self.echo("Operation aborted.")
        return LoopResult(state=state, session=session)

    def _suggest(self, session: Session, kind: TurnKind) -> None:
        session.turns += 1
        session.prompt = self.builder.build(
            session, kind, incremental=self.provider.keeps_history
        )
        session.candidate = acquire_command(
            self.provider, session.prompt, max_attempts=self.max_attempts, session=session
        )

    def _confirm(self, session: Session) -> LoopState:
        self.echo(f"Suggested command: {session.candidate}")
        self.echo(OPTIONS_TEXT)
        self.echo("")
        choice = self.read_choice().rstrip("\r\n")
        if choice == CHOICE_EXECUTE:
            return LoopState.EXECUTE
        if choice == CHOICE_ABORT:
            return LoopState.ABORTED
        if choice == CHOICE_RETHINK:
            return LoopState.RETHINK
        self.echo(INVALID_CHOICE_TEXT)
        return LoopState.CONFIRM

    def _execute(self, session: Session) -> bool:
        command = session.candidate or ""
        outcome = self.executor.run(command)
        if outcome.success:
            if outcome.output:
                self.echo(outcome.output.rstrip("\n"))
            return True

        status = outcome.returncode if outcome.returncode is not None else "not started"
        self.echo(f"Execution error: exit status {status}")
        if outcome.output:
            self.echo(outcome.output.rstrip("\n"))
        self.echo("Failed to execute command, asking for a corrected one...")
        session.record_failure(command, outcome.output)
        return False
