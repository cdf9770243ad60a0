from __future__ import annotations

from typing import Iterable, List, Optional

import pytest

from shellexa.executor import ExecutionOutcome
from shellexa.prompts import PromptBuilder, SystemContext
from shellexa.providers import CommandProvider, ProviderError


class FakeProvider(CommandProvider):
    name = "fake"

    def __init__(self, responses: Iterable[object], keeps_history: bool = False) -> None:
        self.responses = list(responses)
        self.prompts: List[str] = []
        self.keeps_history = keeps_history
        self.closed = False

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("provider called more often than expected")
        # The last response repeats so "always unparsable" needs one entry.
        response = self.responses[0] if len(self.responses) == 1 else self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True

    @property
    def calls(self) -> int:
        return len(self.prompts)


class FakeExecutor:
    def __init__(self, outcomes: Optional[List[ExecutionOutcome]] = None) -> None:
        self.outcomes = list(outcomes or [])
        self.commands: List[str] = []

    def run(self, command: str) -> ExecutionOutcome:
        self.commands.append(command)
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            outcome.command = command
            return outcome
        return ExecutionOutcome(command=command, output="ok\n", success=True, returncode=0)


class ScriptedInput:
    def __init__(self, choices: Iterable[str]) -> None:
        self.choices = list(choices)
        self.reads = 0

    def __call__(self) -> str:
        self.reads += 1
        if not self.choices:
            raise AssertionError("no more scripted choices")
        return self.choices.pop(0)


@pytest.fixture
def system_context() -> SystemContext:
    return SystemContext(
        os_family="linux",
        architecture="x86_64",
        hostname="devbox",
        working_directory="/home/dev/project",
    )


@pytest.fixture
def builder(system_context: SystemContext) -> PromptBuilder:
    return PromptBuilder(system_context)


@pytest.fixture
def provider_error() -> ProviderError:
    return ProviderError("HTTP 503 from http://localhost:11434/api/chat")
