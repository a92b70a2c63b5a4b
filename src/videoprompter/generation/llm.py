from __future__ import annotations

import abc
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Iterable

from anthropic import Anthropic, APIConnectionError, APIError, APITimeoutError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_MEDIA_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
DEFAULT_TIMEOUT_SEC = 60.0


class GenerationError(RuntimeError):
    """Raised when the text generation capability fails."""


class GenerationTimeoutError(GenerationError):
    """Raised when a generation call exceeds its wall-clock bound."""


class UnsupportedMediaTypeError(ValueError):
    """Raised for image media types the vision endpoint cannot accept."""


def ensure_supported_media_type(media_type: str) -> None:
    if media_type not in ALLOWED_IMAGE_MEDIA_TYPES:
        raise UnsupportedMediaTypeError(
            f"Unsupported media type: {media_type}. Allowed types: {', '.join(ALLOWED_IMAGE_MEDIA_TYPES)}"
        )


class LLMClient(abc.ABC):
    """Abstract generation capability injected into the engines."""

    @abc.abstractmethod
    def generate_text(
        self,
        system_prompt: str,
        user_message: str,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def analyze_image(
        self,
        image_base64: str,
        media_type: str,
        prompt: str,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        raise NotImplementedError


class EchoLLM(LLMClient):
    """Offline stub that returns canned concept markdown or prompt JSON."""

    def generate_text(
        self,
        system_prompt: str,
        user_message: str,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        if "JSON" in user_message:
            return json.dumps(_PLACEHOLDER_PROMPT, indent=2)
        return _PLACEHOLDER_CONCEPTS

    def analyze_image(
        self,
        image_base64: str,
        media_type: str,
        prompt: str,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        ensure_supported_media_type(media_type)
        return "**Product/Subject:** Stub subject\n**Visual Style:** Stub style"


class ClaudeLLM(LLMClient):
    """Anthropic Messages API wrapper with a hard per-call time bound."""

    def __init__(
        self,
        client: Anthropic,
        model: str,
        max_tokens: int = 8192,
        temperature: float = 1.0,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        max_retries: int = 0,
        retry_backoff: float = 1.0,
        image_model: str | None = None,
        image_max_tokens: int = 4096,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_backoff = retry_backoff
        self.image_model = image_model or model
        self.image_max_tokens = image_max_tokens

    def generate_text(
        self,
        system_prompt: str,
        user_message: str,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        params: dict[str, Any] = {
            "model": model or self.model,
            "system": system_prompt,
            "max_tokens": kwargs.pop("max_tokens", None) or self.max_tokens,
            "temperature": kwargs.pop("temperature", self.temperature),
            "messages": [{"role": "user", "content": user_message}],
        }
        params.update(kwargs)
        return self._complete(params)

    def analyze_image(
        self,
        image_base64: str,
        media_type: str,
        prompt: str,
        model: str | None = None,
        **kwargs: Any,
    ) -> str:
        ensure_supported_media_type(media_type)
        params: dict[str, Any] = {
            "model": model or self.image_model,
            "max_tokens": kwargs.pop("max_tokens", None) or self.image_max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": media_type,
                                "data": image_base64,
                            },
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
        }
        params.update(kwargs)
        return self._complete(params)

    def _complete(self, params: dict[str, Any]) -> str:
        attempt = 0
        while True:
            try:
                logger.debug(
                    "Sending request to Claude model %s (attempt %d/%d)",
                    params["model"],
                    attempt + 1,
                    self.max_retries + 1,
                )
                response = self._create_with_deadline(params)
                break
            except (GenerationTimeoutError, APIConnectionError) as exc:
                if attempt >= self.max_retries:
                    if isinstance(exc, GenerationError):
                        raise
                    if isinstance(exc, APITimeoutError):
                        raise GenerationTimeoutError(f"Claude API timeout: {exc}") from exc
                    raise GenerationError(f"Claude API connection failed: {exc}") from exc
                delay = self.retry_backoff * (2**attempt)
                logger.warning("Claude call failed (%s). Retrying in %.1fs...", exc, delay)
                time.sleep(delay)
                attempt += 1
            except APIError as exc:
                logger.error("Claude API error: %s", exc)
                raise GenerationError(f"Claude API error: {exc}") from exc

        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning(
                "Claude response truncated by max_tokens; consider increasing limit (current=%s)",
                params.get("max_tokens"),
            )
        text = _collect_text(response.content)
        if not text:
            raise GenerationError("Unexpected response type from Claude")
        logger.debug("Claude responded with %d characters", len(text))
        return text

    def _create_with_deadline(self, params: dict[str, Any]) -> Any:
        # The call and the timer race; a call that loses keeps running in its
        # worker thread and its result is discarded.
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self.client.messages.create, **params)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            raise GenerationTimeoutError(
                f"Claude API timeout after {self.timeout:g} seconds"
            ) from None
        finally:
            executor.shutdown(wait=False)


def _collect_text(blocks: Iterable[Any]) -> str:
    parts: list[str] = []
    for block in blocks:
        if getattr(block, "type", None) == "text":
            parts.append(getattr(block, "text", ""))
    return "".join(parts)


_PLACEHOLDER_CONCEPTS = """# THREE STORYBOARD CONCEPTS

## Concept 1: Stub Concept
**Mood/Tone:** Stub mood.

**6-Scene Storyboard:**

1. **Stub Scene:** Stub description.
"""

_PLACEHOLDER_PROMPT: dict[str, Any] = {
    "project_title": "Stub project",
    "resolution": "16:9",
    "duration_total_seconds": 4,
    "visual_style": "Stub style",
    "product_reference_image_link": None,
    "product_consistency_rule": None,
    "shared_elements": {"product": None, "lighting": "Stub lighting", "color_palette": "Stub palette"},
    "shots": [
        {
            "shot_number": 1,
            "duration_seconds": 4.0,
            "scene_description": "Stub scene",
            "action": "Stub action",
            "camera_angle": "Wide",
            "movement": "Static",
            "lenses": "35mm",
            "lighting": "Stub lighting",
            "audio": None,
            "dialogue_block": None,
        }
    ],
}
