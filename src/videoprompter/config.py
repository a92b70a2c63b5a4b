from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from anthropic import Anthropic
from pydantic import BaseModel

from videoprompter.generation.llm import DEFAULT_TIMEOUT_SEC, ClaudeLLM, EchoLLM, LLMClient

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("claude", "echo")


@dataclass(frozen=True)
class ConfigurationError:
    setting: str
    message: str

    def __str__(self) -> str:
        return f"{self.setting}: {self.message}"


@dataclass(frozen=True)
class StartupCheck:
    errors: List[ConfigurationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        return "; ".join(str(error) for error in self.errors)


class ConfigurationInvalidError(RuntimeError):
    """Raised when a service is built from a configuration that failed its startup check."""

    def __init__(self, check: StartupCheck) -> None:
        super().__init__(f"Invalid configuration: {check.summary()}")
        self.check = check


class ServiceConfig(BaseModel):
    llm_provider: str = "claude"
    anthropic_api_key_env: str = "ANTHROPIC_API_KEY"
    concept_model: str = "claude-3-5-haiku-20241022"
    concept_max_tokens: int = 8192
    prompt_model: str = "claude-sonnet-4-5-20250929"
    allowed_prompt_models: Tuple[str, ...] = (
        "claude-sonnet-4-5-20250929",
        "claude-3-5-haiku-20241022",
    )
    prompt_max_tokens: int = 16000
    image_model: str = "claude-3-5-haiku-20241022"
    image_max_tokens: int = 4096
    temperature: float = 1.0
    generation_timeout: float = DEFAULT_TIMEOUT_SEC
    # 0 keeps the single-shot behaviour; timeouts surface as failures.
    max_retries: int = 0
    retry_backoff: float = 1.0
    repair_malformed_json: bool = False

    @classmethod
    def from_file(cls, path: Path) -> "ServiceConfig":
        text = path.read_text(encoding="utf-8")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            import yaml  # type: ignore[import-not-found]

            payload = yaml.safe_load(text)
        return cls.model_validate(payload or {})

    @property
    def api_key(self) -> Optional[str]:
        return os.getenv(self.anthropic_api_key_env) or None

    def check(self) -> StartupCheck:
        """Validate settings before any request is served."""
        errors: List[ConfigurationError] = []
        provider = self.llm_provider.lower()
        if provider not in SUPPORTED_PROVIDERS:
            errors.append(
                ConfigurationError(
                    "llm_provider",
                    f"Unknown provider '{self.llm_provider}'. Expected one of {', '.join(SUPPORTED_PROVIDERS)}",
                )
            )
        if provider == "claude" and not self.api_key:
            errors.append(
                ConfigurationError(
                    self.anthropic_api_key_env,
                    f"Missing Anthropic API key. Set {self.anthropic_api_key_env} in your environment.",
                )
            )
        if self.generation_timeout <= 0:
            errors.append(ConfigurationError("generation_timeout", "must be positive"))
        if self.max_retries < 0:
            errors.append(ConfigurationError("max_retries", "must not be negative"))
        if self.allowed_prompt_models and self.prompt_model not in self.allowed_prompt_models:
            errors.append(
                ConfigurationError("prompt_model", "default prompt model must be one of allowed_prompt_models")
            )
        for name in ("concept_max_tokens", "prompt_max_tokens", "image_max_tokens"):
            if getattr(self, name) <= 0:
                errors.append(ConfigurationError(name, "must be positive"))
        return StartupCheck(errors=errors)

    def build_llm(self) -> LLMClient:
        check = self.check()
        if not check.ok:
            raise ConfigurationInvalidError(check)

        if self.llm_provider.lower() == "echo":
            logger.warning("Using EchoLLM; generation responses are canned placeholders")
            return EchoLLM()

        # ClaudeLLM owns the retry policy; the SDK must not retry underneath it.
        client = Anthropic(api_key=self.api_key, max_retries=0)
        return ClaudeLLM(
            client=client,
            model=self.concept_model,
            max_tokens=self.concept_max_tokens,
            temperature=self.temperature,
            timeout=self.generation_timeout,
            max_retries=self.max_retries,
            retry_backoff=self.retry_backoff,
            image_model=self.image_model,
            image_max_tokens=self.image_max_tokens,
        )
