"""Jinoca configuration management."""

import logging
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger("jinoca.config")


class JinocaSettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Server (status page)
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(
        default=3000,
        description="Status page port",
        validation_alias=AliasChoices("JINOCA_PORT", "PORT"),
    )
    debug: bool = Field(default=False, description="Debug logging")
    log_file: str = Field(default="~/jinoca.log", description="Log file path")

    # Completion API (OpenRouter)
    openrouter_api_key: Optional[str] = Field(
        default=None,
        description="OpenRouter API key",
        validation_alias=AliasChoices("JINOCA_OPENROUTER_API_KEY", "OPENROUTER_API_KEY"),
    )
    completion_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="Chat completion endpoint",
    )
    model: str = Field(
        default="cognitivecomputations/dolphin-mistral-24b-venice-edition:free",
        description="Chat model identifier",
    )
    http_referer: str = Field(default="http://localhost:3000", description="HTTP-Referer header")
    app_title: str = Field(default="Jinoca Bot", description="X-Title header")

    # Image API
    image_api_url: str = Field(
        default="https://imgen.duck.mom/prompt/",
        description="Image generation base URL (prompt is appended)",
    )

    # Behaviour
    history_limit: int = Field(default=10, ge=0, description="Prior messages sent as context (0 = off)")
    request_timeout: float = Field(default=30.0, gt=0, description="Outbound API timeout (seconds)")
    reconnect_delay: float = Field(default=5.0, ge=0, description="Delay before reconnecting (seconds)")

    # WhatsApp bridge
    bridge_command: str = Field(default="node", description="Interpreter used to run the bridge script")
    bridge_dir: str = Field(default="~/.jinoca/bridge", description="Where the bridge script lives")
    chrome_path: Optional[str] = Field(
        default=None,
        description="Chromium executable for whatsapp-web.js",
        validation_alias=AliasChoices("JINOCA_CHROME_PATH", "PUPPETEER_EXECUTABLE_PATH"),
    )

    model_config = {
        "env_prefix": "JINOCA_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }


def load_settings() -> JinocaSettings:
    """Load settings from environment."""
    return JinocaSettings()


def check_settings(settings: JinocaSettings):
    """Log warnings about settings that degrade replies.

    Called once logging is configured, so the warnings reach the log file.
    """
    if not settings.openrouter_api_key:
        logger.warning(
            "No OpenRouter API key configured (OPENROUTER_API_KEY). "
            "Every text reply will fall back to the busy message."
        )
    if settings.history_limit == 0:
        logger.info("Conversation history disabled (history_limit=0).")
