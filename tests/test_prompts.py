from __future__ import annotations

from shellexa.prompts import ONLY_COMMAND_INSTRUCTION, PromptBuilder, SystemContext
from shellexa.session import Session, TurnKind


def test_initial_prompt_includes_request_context_and_instruction(builder: PromptBuilder) -> None:
    prompt = builder.build(Session(request="list files"), TurnKind.INITIAL)

    assert "Generate a shell command to achieve this: 'list files'." in prompt
    assert "System: linux, Arch: x86_64, Host: devbox, Working directory: /home/dev/project" in prompt
    assert prompt.endswith(ONLY_COMMAND_INSTRUCTION)
    assert "failed" not in prompt.lower()


def test_failure_prompt_includes_failed_command_and_error(builder: PromptBuilder) -> None:
    session = Session(request="list files")
    session.record_failure("ls -la", "ls: cannot open directory '.': permission denied\n")

    prompt = builder.build(session, TurnKind.FAILURE)

    assert "list files" in prompt
    assert "ls -la" in prompt
    assert "permission denied" in prompt
    assert prompt.endswith(ONLY_COMMAND_INSTRUCTION)


def test_failure_prompt_marks_empty_output(builder: PromptBuilder) -> None:
    session = Session(request="make it fail")
    session.record_failure("false", "")

    prompt = builder.build(session, TurnKind.FAILURE)

    assert "Error: (no output)" in prompt


def test_rethink_prompt_asks_for_alternative_without_failure_text(builder: PromptBuilder) -> None:
    session = Session(request="show disk usage", candidate="du -sh *")
    session.discard_candidate()

    prompt = builder.build(session, TurnKind.RETHINK)

    assert "Provide an alternative command." in prompt
    assert "du -sh *" in prompt
    assert "failed to execute" not in prompt.lower()
    assert "Error:" not in prompt


def test_rethink_prompt_keeps_pending_failure(builder: PromptBuilder) -> None:
    session = Session(request="list files")
    session.record_failure("ls -la", "permission denied")
    session.candidate = "sudo ls -la"
    session.discard_candidate()

    prompt = builder.build(session, TurnKind.RETHINK)

    assert "permission denied" in prompt
    assert "sudo ls -la" in prompt
    assert "Provide an alternative command." in prompt


def test_incremental_prompt_omits_request_and_context(builder: PromptBuilder) -> None:
    session = Session(request="list files")
    session.record_failure("ls -la", "permission denied")

    prompt = builder.build(session, TurnKind.FAILURE, incremental=True)

    assert "Generate a shell command" not in prompt
    assert "System:" not in prompt
    assert "ls -la" in prompt
    assert "permission denied" in prompt
    assert prompt.endswith(ONLY_COMMAND_INSTRUCTION)


def test_incremental_flag_ignored_for_first_turn(builder: PromptBuilder) -> None:
    prompt = builder.build(Session(request="list files"), TurnKind.INITIAL, incremental=True)

    assert "Generate a shell command to achieve this: 'list files'." in prompt


def test_system_context_detect_uses_platform(monkeypatch) -> None:
    monkeypatch.setattr("shellexa.prompts.platform.system", lambda: "Darwin")
    monkeypatch.setattr("shellexa.prompts.platform.machine", lambda: "ARM64")
    monkeypatch.setattr("shellexa.prompts.platform.node", lambda: "")

    context = SystemContext.detect(working_directory="/tmp")

    assert context.os_family == "darwin"
    assert context.architecture == "arm64"
    assert context.hostname is None
    assert context.describe() == "System: darwin, Arch: arm64, Working directory: /tmp"
