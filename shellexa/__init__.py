"""Top-level package for shellexa.

This package contains the implementation of a command line tool named
``shellexa`` which turns a natural language request into a single shell
command proposed by a language model.  The user confirms, aborts or asks
for an alternative before anything is executed; when an executed command
fails the error is fed back to the model for a corrected suggestion.

The interaction state machine lives in the ``loop`` module.  Helper
modules handle response parsing, prompt construction, model provider
abstraction, command execution and configuration storage.  When the
package is installed via pip you can invoke the CLI from your shell using
the ``shellexa`` entry point, or run ``python -m shellexa.cli``.
"""

__version__ = "0.1.0"


class ShellexaError(Exception):
    """Base class for all errors raised by shellexa."""


__all__ = [
    "ShellexaError",
    "cli",
    "config",
    "executor",
    "loop",
    "parser",
    "prompts",
    "providers",
    "server",
    "session",
]
