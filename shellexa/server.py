"""JSON API exposing command suggestions.

``shellexa serve`` runs this FastAPI application so editors and other
tools can ask for a command without going through the terminal loop.
The API only performs acquisition (prompt, provider call, parsing with
the usual retry ceiling); it never executes anything.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import ConfigError, ConfigStore
from .loop import AcquisitionError, acquire_command
from .prompts import PromptBuilder, SystemContext
from .providers import CommandProvider, get_provider
from .session import Session, TurnKind

LOGGER = logging.getLogger(__name__)

ProviderFactory = Callable[..., CommandProvider]


def create_app(
    store: ConfigStore,
    *,
    provider_factory: ProviderFactory = get_provider,
    context: Optional[SystemContext] = None,
) -> FastAPI:
    """Build the API application.

    Configuration is loaded on every request so that running
    ``shellexa configure`` takes effect without restarting the server.
    """
    builder = PromptBuilder(context or SystemContext.detect())
    app = FastAPI(title="shellexa", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/generate_command")
    def generate_command(request: dict) -> dict:
        prompt_text = request.get("input") or request.get("prompt")
        if not prompt_text or not isinstance(prompt_text, str) or not prompt_text.strip():
            raise HTTPException(status_code=400, detail="'input' field must be a non-empty string")
        try:
            config = store.load()
        except ConfigError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc

        provider = provider_factory(config.provider, config.model, config.api_url, config.api_key)
        session = Session(request=prompt_text.strip())
        prompt = builder.build(session, TurnKind.INITIAL)
        try:
            command = acquire_command(provider, prompt, session=session)
        except AcquisitionError as exc:
            LOGGER.warning("api_acquisition_failed", extra={"error": str(exc)})
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        finally:
            provider.close()
        return {"command": command, "attempts": session.attempts}

    return app
