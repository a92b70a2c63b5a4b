from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from prompt_api.app import PromptApiApplication
from prompt_api.http import HttpRequestParser, UnsupportedContentTypeError
from prompt_api.models import ValidationError, prompt_request_from_payload
from prompt_api.settings import ApiSettings
from videoprompter.config import ConfigurationInvalidError, ServiceConfig
from videoprompter.generation.llm import EchoLLM, GenerationTimeoutError
from videoprompter.orchestrator import PromptStudio


class ScriptedLLM(EchoLLM):
    def __init__(self, text: str | None = None, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls = 0

    def generate_text(self, system_prompt, user_message, model=None, **kwargs):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.text is not None:
            return self.text
        return super().generate_text(system_prompt, user_message, model=model, **kwargs)


class RecordingVisionLLM(EchoLLM):
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.image_calls: list[tuple] = []

    def analyze_image(self, image_base64, media_type, prompt, model=None, **kwargs):
        if self.error is not None:
            raise self.error
        self.image_calls.append((image_base64, media_type, prompt))
        return "**Colors**: Amber"


def _app(llm=None) -> PromptApiApplication:
    studio = PromptStudio.from_config(ServiceConfig(llm_provider="echo"), llm=llm or EchoLLM())
    return PromptApiApplication(studio=studio)


def _event(path: str, body, method: str = "POST", content_type: str = "application/json"):
    return {
        "httpMethod": method,
        "resource": path,
        "headers": {"Content-Type": content_type},
        "body": body if isinstance(body, str) or body is None else json.dumps(body),
    }


def _body(response):
    return json.loads(response["body"])


def test_concepts_endpoint_returns_markdown_and_records():
    response = _app().handle_event(_event("/concepts", {"creativeDirection": "Cozy coffee teaser"}))

    assert response["statusCode"] == 200
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"
    body = _body(response)
    assert body["success"] is True
    assert "## Concept 1: Stub Concept" in body["conceptsMarkdown"]
    concept = body["concepts"][0]
    assert concept["id"] == 1
    assert concept["title"] == "Stub Concept"
    assert concept["scenes"] == [{"title": "Stub Scene", "description": "Stub description."}]
    assert concept["rawMarkdown"].startswith("## Concept 1:")


def test_prompt_endpoint_returns_prompt_and_validation():
    payload = {"model": "veo3", "concept": "Stub Concept", "duration": 4, "aspectRatio": "16:9"}

    response = _app().handle_event(_event("/prompt", payload))

    assert response["statusCode"] == 200
    body = _body(response)
    assert body["success"] is True
    assert body["data"]["shots"][0]["shot_number"] == 1
    assert body["validation"] == {"durationMatch": True, "totalDuration": 4.0, "expectedDuration": 4.0}


def test_analyze_reference_endpoint():
    payload = {"imageBase64": "data:image/png;base64,aGVsbG8=", "imageMediaType": "image/png"}

    response = _app().handle_event(_event("/analyze-reference", payload))

    assert response["statusCode"] == 200
    assert _body(response)["analysis"].startswith("**Product/Subject:**")


def test_analyze_image_endpoint_uses_generation_prompt():
    llm = RecordingVisionLLM()
    payload = {"imageBase64": "data:image/webp;base64,aGVsbG8=", "imageMediaType": "image/webp"}

    response = _app(llm).handle_event(_event("/analyze-image", payload))

    assert response["statusCode"] == 200
    assert _body(response) == {"success": True, "analysis": "**Colors**: Amber"}
    image, media_type, prompt = llm.image_calls[0]
    assert (image, media_type) == ("aGVsbG8=", "image/webp")
    assert "maintain visual consistency in video generation" in prompt


def test_analyze_image_failure_is_server_error():
    llm = RecordingVisionLLM(error=GenerationTimeoutError("Claude API timeout after 60 seconds"))

    response = _app(llm).handle_event(_event("/analyze-image", {"imageBase64": "aGVsbG8="}))

    assert response["statusCode"] == 500
    assert _body(response)["error"] == "Failed to analyze image"


def test_analyze_reference_rejects_unknown_media_type():
    payload = {"imageBase64": "aGVsbG8=", "imageMediaType": "image/tiff"}

    response = _app().handle_event(_event("/analyze-reference", payload))

    assert response["statusCode"] == 400
    assert "Unsupported media type" in _body(response)["error"]


def test_unsupported_duration_is_rejected_without_generation():
    llm = ScriptedLLM()
    payload = {"model": "veo3", "concept": "c", "duration": 5, "aspectRatio": "16:9"}

    response = _app(llm).handle_event(_event("/prompt", payload))

    assert response["statusCode"] == 400
    assert _body(response) == {"error": "VEO 3 only supports 4, 6, or 8 second durations"}
    assert llm.calls == 0


@pytest.mark.parametrize(
    "path,payload,message",
    [
        ("/concepts", {}, "creativeDirection"),
        ("/concepts", {"creativeDirection": "   "}, "creativeDirection"),
        ("/concepts", {"creativeDirection": "x", "targetDuration": -1}, "targetDuration"),
        ("/prompt", {"model": "veo3", "concept": "c"}, "Missing required fields: duration, aspectRatio"),
        ("/prompt", {"model": "sora2", "concept": "c", "duration": 4, "aspectRatio": "1:1"}, "Aspect ratio"),
        ("/prompt", {"model": "veo3", "concept": ["c"], "duration": 4, "aspectRatio": "16:9"}, "concept"),
        ("/analyze-reference", {"imageBase64": ""}, "imageBase64"),
    ],
)
def test_invalid_payloads_are_bad_requests(path, payload, message):
    response = _app().handle_event(_event(path, payload))

    assert response["statusCode"] == 400
    assert message in _body(response)["error"]


def test_non_json_body_is_bad_request():
    response = _app().handle_event(_event("/concepts", "{not json"))

    assert response["statusCode"] == 400
    assert _body(response) == {"error": "Body must be valid JSON"}


def test_missing_body_is_bad_request():
    response = _app().handle_event(_event("/concepts", None))

    assert response["statusCode"] == 400


def test_wrong_content_type_is_unsupported_media_type():
    response = _app().handle_event(_event("/concepts", "creativeDirection=x", content_type="text/plain"))

    assert response["statusCode"] == 415


def test_malformed_generated_prompt_is_server_error():
    payload = {"model": "sora2", "concept": "c", "duration": 8, "aspectRatio": "9:16"}

    response = _app(ScriptedLLM(text="Sure! Here is your prompt.")).handle_event(_event("/prompt", payload))

    assert response["statusCode"] == 500
    body = _body(response)
    assert body["error"] == "Generated prompt could not be parsed"
    assert "not valid JSON" in body["details"]


def test_generation_failure_is_server_error_with_details():
    llm = ScriptedLLM(error=GenerationTimeoutError("Claude API timeout after 60 seconds"))

    response = _app(llm).handle_event(_event("/concepts", {"creativeDirection": "Teaser"}))

    assert response["statusCode"] == 500
    assert _body(response) == {
        "error": "Failed to generate concepts",
        "details": "Claude API timeout after 60 seconds",
    }


def test_unexpected_failure_is_server_error():
    llm = ScriptedLLM(error=KeyError("boom"))

    response = _app(llm).handle_event(_event("/prompt", {"model": "veo3", "concept": "c", "duration": 4, "aspectRatio": "16:9"}))

    assert response["statusCode"] == 500
    assert _body(response)["error"] == "Failed to generate prompt"


def test_preflight_returns_no_content():
    response = _app().handle_event(_event("/prompt", None, method="OPTIONS"))

    assert response["statusCode"] == 204
    assert response["body"] == ""
    assert "POST" in response["headers"]["Access-Control-Allow-Methods"]


def test_unknown_route_and_method():
    app = _app()

    assert app.handle_event(_event("/videos", {}))["statusCode"] == 404
    assert app.handle_event(_event("/concepts/", {}, method="GET"))["statusCode"] == 405


def test_request_parser_handles_base64_and_header_case():
    raw = base64.b64encode(json.dumps({"creativeDirection": "x"}).encode("utf-8")).decode("ascii")
    event = {"headers": {"content-type": "application/json; charset=utf-8"}, "body": raw, "isBase64Encoded": True}

    assert HttpRequestParser().parse(event) == {"creativeDirection": "x"}
    with pytest.raises(UnsupportedContentTypeError):
        HttpRequestParser().parse({"headers": {}, "body": "{}"})
    with pytest.raises(ValidationError):
        HttpRequestParser().parse({"headers": {"Content-Type": "application/json"}, "body": "[1, 2]"})


def test_prompt_payload_defaults_shot_count_to_auto():
    request = prompt_request_from_payload(
        {"model": "sora2", "concept": "c", "duration": 12, "aspectRatio": "9:16", "imageUrl": "https://x/y.png"}
    )

    assert request.shot_count == "auto"
    assert request.image_url == "https://x/y.png"
    assert request.prompt_model is None


def test_settings_read_config_path_from_environment(monkeypatch):
    monkeypatch.setenv("PROMPT_API_CONFIG_PATH", "/etc/prompt-api.yaml")
    assert ApiSettings.from_env().config_path == Path("/etc/prompt-api.yaml")

    monkeypatch.delenv("PROMPT_API_CONFIG_PATH")
    assert ApiSettings.from_env().config_path is None


def test_application_refuses_to_start_without_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    with pytest.raises(ConfigurationInvalidError):
        PromptApiApplication(settings=ApiSettings())


def test_application_builds_studio_from_config_file(tmp_path):
    path = tmp_path / "prompt-api.json"
    path.write_text(json.dumps({"llm_provider": "echo"}), encoding="utf-8")

    app = PromptApiApplication(settings=ApiSettings(config_path=path))
    response = app.handle_event(_event("/concepts", {"creativeDirection": "Teaser"}))

    assert response["statusCode"] == 200


def test_prompt_with_sparse_shots_is_returned_as_generated():
    generated = {
        "project_title": "Sparse",
        "resolution": "16:9",
        "duration_total_seconds": 8,
        "shots": [
            {"shot_number": 1, "duration_seconds": 4, "action": "Pour", "transition": "cut"},
            {"shot_number": 2, "duration_seconds": 4, "action": "Sip"},
        ],
    }
    payload = {"model": "veo3", "concept": "c", "duration": 8, "aspectRatio": "16:9"}

    response = _app(ScriptedLLM(text=json.dumps(generated))).handle_event(_event("/prompt", payload))

    assert response["statusCode"] == 200
    body = _body(response)
    assert body["data"] == generated
    assert body["validation"]["durationMatch"] is True
