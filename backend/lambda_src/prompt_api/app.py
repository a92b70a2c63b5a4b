from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from prompt_api.http import (
    HttpRequestParser,
    UnsupportedContentTypeError,
    bad_request,
    cors_preflight_response,
    method_not_allowed,
    not_found,
    ok,
    server_error,
    unsupported_media_type,
)
from prompt_api.models import (
    ReferenceRequest,
    ValidationError,
    concept_request_from_payload,
    prompt_request_from_payload,
)
from prompt_api.settings import ApiSettings
from videoprompter.config import ConfigurationInvalidError, ServiceConfig
from videoprompter.constraints.validator import RequestRejectedError
from videoprompter.generation.llm import GenerationError, UnsupportedMediaTypeError
from videoprompter.orchestrator import PromptStudio
from videoprompter.video_prompt.utils import MalformedPromptError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

Route = Callable[[Dict[str, Any]], Dict[str, Any]]


class PromptApiApplication:
    """Routes API Gateway events to the concept, prompt and reference stages."""

    def __init__(
        self,
        studio: PromptStudio | None = None,
        request_parser: HttpRequestParser | None = None,
        settings: ApiSettings | None = None,
    ) -> None:
        self._studio = studio or self._build_studio(settings or ApiSettings.from_env())
        self._parser = request_parser or HttpRequestParser()
        self._routes: Dict[str, tuple[Route, str]] = {
            "/concepts": (self._concepts, "Failed to generate concepts"),
            "/prompt": (self._prompt, "Failed to generate prompt"),
            "/analyze-reference": (self._analyze_reference, "Failed to analyze reference image"),
            "/analyze-image": (self._analyze_image, "Failed to analyze image"),
        }

    @staticmethod
    def _build_studio(settings: ApiSettings) -> PromptStudio:
        config = ServiceConfig.from_file(settings.config_path) if settings.config_path else ServiceConfig()
        check = config.check()
        if not check.ok:
            logger.error("Refusing to start: %s", check.summary())
            raise ConfigurationInvalidError(check)
        return PromptStudio.from_config(config)

    def handle_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        method = (event.get("httpMethod") or "POST").upper()
        path = _normalize_path(event.get("resource") or event.get("path") or "")
        logger.info("Prompt API event received: %s %s", method, path)

        if method == "OPTIONS":
            return cors_preflight_response()
        if path not in self._routes:
            return not_found(f"Unknown route {path}")
        if method != "POST":
            return method_not_allowed(f"{method} is not supported on {path}")

        route, failure_message = self._routes[path]
        try:
            payload = self._parser.parse(event)
            return ok(route(payload))
        except UnsupportedContentTypeError as exc:
            return unsupported_media_type(str(exc))
        except (ValidationError, RequestRejectedError, UnsupportedMediaTypeError) as exc:
            return bad_request(str(exc))
        except MalformedPromptError as exc:
            logger.error("Generated output could not be parsed: %s", exc)
            return server_error("Generated prompt could not be parsed", str(exc))
        except GenerationError as exc:
            logger.error("Generation failed on %s: %s", path, exc)
            return server_error(failure_message, str(exc))
        except Exception as exc:
            logger.exception("Unexpected failure on %s", path)
            return server_error(failure_message, str(exc))

    def _concepts(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = concept_request_from_payload(payload)
        return self._studio.generate_concepts(request).to_payload()

    def _prompt(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = prompt_request_from_payload(payload)
        return self._studio.generate_prompt(request).to_payload()

    def _analyze_reference(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = ReferenceRequest.from_payload(payload)
        analysis = self._studio.analyze_reference(
            request.image_base64,
            media_type=request.media_type,
            creative_direction=request.creative_direction,
        )
        return {"success": True, "analysis": analysis}

    def _analyze_image(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        request = ReferenceRequest.from_payload(payload)
        analysis = self._studio.describe_image(request.image_base64, media_type=request.media_type)
        return {"success": True, "analysis": analysis}


def _normalize_path(path: str) -> str:
    trimmed = path.rstrip("/")
    return trimmed or "/"


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:  # pragma: no cover - AWS entry
    return PromptApiApplication().handle_event(event)
