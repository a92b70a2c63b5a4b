from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from prompt_api.models import ValidationError


_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
}
_JSON_CONTENT_TYPE = "application/json"


class UnsupportedContentTypeError(ValueError):
    """Raised when the request body is not declared as JSON."""


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: Dict[str, Any] | None = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "headers": {**_CORS_HEADERS, "Content-Type": _JSON_CONTENT_TYPE},
            "body": json.dumps(self.body or {}),
        }


class HttpRequestParser:
    """Extracts the JSON payload from API Gateway proxy events."""

    def parse(self, event: Dict[str, Any]) -> Dict[str, Any]:
        content_type = header(event, "content-type") or ""
        if _JSON_CONTENT_TYPE not in content_type.lower():
            raise UnsupportedContentTypeError("Content-Type must be application/json")

        if "body" not in event or event["body"] is None:
            raise ValidationError("Missing request body")

        body = event["body"]
        if event.get("isBase64Encoded"):  # pragma: no cover - gateway config
            body = base64.b64decode(body).decode("utf-8")

        if isinstance(body, str):
            try:
                body = json.loads(body)
            except json.JSONDecodeError as exc:
                raise ValidationError("Body must be valid JSON") from exc

        if isinstance(body, dict):
            return body

        raise ValidationError("Body must be a JSON object")


def header(event: Mapping[str, Any], name: str) -> str | None:
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def cors_preflight_response() -> Dict[str, Any]:
    return {
        "statusCode": 204,
        "headers": {
            **_CORS_HEADERS,
            "Access-Control-Allow-Methods": "POST,OPTIONS",
        },
        "body": "",
    }


def ok(body: Dict[str, Any]) -> Dict[str, Any]:
    return HttpResponse(status_code=200, body=body).to_payload()


def bad_request(message: str) -> Dict[str, Any]:
    return HttpResponse(status_code=400, body={"error": message}).to_payload()


def not_found(message: str) -> Dict[str, Any]:
    return HttpResponse(status_code=404, body={"error": message}).to_payload()


def method_not_allowed(message: str) -> Dict[str, Any]:
    return HttpResponse(status_code=405, body={"error": message}).to_payload()


def unsupported_media_type(message: str) -> Dict[str, Any]:
    return HttpResponse(status_code=415, body={"error": message}).to_payload()


def server_error(message: str, details: str | None = None) -> Dict[str, Any]:
    return HttpResponse(
        status_code=500,
        body={"error": message, "details": details or "Unknown error"},
    ).to_payload()
