"""Tests for vision-model extractors."""

import json

import httpx
import pytest
from pydantic import ValidationError

from scan2meet.capture import CardImage
from scan2meet.config import Settings
from scan2meet.errors import ExtractionError
from scan2meet.extractor import (
    GeminiExtractor,
    OpenAIExtractor,
    create_extractor,
    extract_json,
    parse_card,
    split_backend,
)
from scan2meet.models.business_card import BusinessCardData

CARD_JSON = {
    "lastName": "Yamada",
    "firstName": "Taro",
    "position": "Manager",
    "department": "Sales",
    "company": "Acme Corp",
    "phone": "03-1234-5678",
    "email": "taro.yamada@acme.example",
    "address": "1-2-3 Chiyoda, Tokyo",
    "website": "acme.example",
}


@pytest.fixture
def image():
    return CardImage(data=b"\xff\xd8fakejpeg", mime_type="image/jpeg", filename="card.jpg")


def _transport(handler, calls):
    def record(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    return httpx.MockTransport(record)


class TestExtractJson:
    """Test JSON extraction from free-form model text."""

    def test_extract_json_from_code_block(self):
        text = '```json\n{"company": "Acme"}\n```'
        assert extract_json(text) == '{"company": "Acme"}'

    def test_extract_json_raw(self):
        text = 'Here you go: {"company": "Acme"} hope that helps'
        assert extract_json(text) == '{"company": "Acme"}'

    def test_extract_json_spans_lines(self):
        text = 'Result:\n{\n  "company": "Acme",\n  "email": "a@acme.example"\n}\nDone.'
        assert json.loads(extract_json(text)) == {
            "company": "Acme",
            "email": "a@acme.example",
        }

    def test_extract_json_missing(self):
        with pytest.raises(ExtractionError, match="No JSON object"):
            extract_json("I could not read this card.")


class TestParseCard:
    """Test parsing model responses into BusinessCardData."""

    def test_plain_json(self):
        card = parse_card(json.dumps(CARD_JSON))
        assert card.last_name == "Yamada"
        assert card.first_name == "Taro"
        assert card.company == "Acme Corp"
        assert card.website == "acme.example"

    def test_json_embedded_in_text(self):
        card = parse_card(f"Sure!\n{json.dumps(CARD_JSON)}\nLet me know.")
        assert card.email == "taro.yamada@acme.example"

    def test_missing_fields_are_empty(self):
        card = parse_card('{"company": "Acme"}')
        assert card.company == "Acme"
        assert card.phone == ""

    def test_empty_response(self):
        with pytest.raises(ExtractionError, match="empty"):
            parse_card("   ")

    def test_invalid_json(self):
        with pytest.raises(ExtractionError, match="Invalid JSON"):
            parse_card('{"company": "Acme",,}')

    def test_non_object_json(self):
        with pytest.raises(ExtractionError, match="Expected a JSON object"):
            parse_card('["Acme"]')

    def test_metadata_key_from_model_is_ignored(self):
        card = parse_card('{"company": "Acme", "metadata": "scan"}')
        assert card.company == "Acme"
        assert card.metadata is None

    def test_validation_error_becomes_extraction_error(self, monkeypatch):
        def reject(data):
            raise ValidationError.from_exception_data(
                "BusinessCardData", [{"type": "missing", "loc": ("company",), "input": data}]
            )

        monkeypatch.setattr(BusinessCardData, "model_validate", reject)
        with pytest.raises(ExtractionError, match="Unexpected fields"):
            parse_card('{"company": "Acme"}')


class TestGeminiExtractor:
    """Test GeminiExtractor requests and responses."""

    def test_name(self):
        assert GeminiExtractor(api_key="k").name == "gemini:gemini-2.0-flash"
        assert GeminiExtractor(api_key="k", model="gemini-2.5-pro").name == "gemini:gemini-2.5-pro"

    def test_requires_api_key(self):
        with pytest.raises(ValueError, match="API key"):
            GeminiExtractor(api_key="")

    def test_extract_success(self, image):
        calls = []

        def handler(request):
            return httpx.Response(
                200,
                json={
                    "candidates": [
                        {"content": {"parts": [{"text": "```json\n"}, {"text": json.dumps(CARD_JSON) + "\n```"}]}}
                    ]
                },
            )

        extractor = GeminiExtractor(api_key="secret", transport=_transport(handler, calls))
        card = extractor.extract(image)

        assert card.full_name == "Yamada Taro"
        assert card.department == "Sales"

        request = calls[0]
        assert request.url.path.endswith("/models/gemini-2.0-flash:generateContent")
        assert request.headers["x-goog-api-key"] == "secret"
        body = json.loads(request.content)
        parts = body["contents"][0]["parts"]
        assert "lastName" in parts[0]["text"]
        assert parts[1]["inline_data"] == {
            "mime_type": "image/jpeg",
            "data": image.to_base64(),
        }

    def test_extract_http_error(self, image):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(403, text="API key not valid")
        )
        extractor = GeminiExtractor(api_key="bad", transport=transport)

        with pytest.raises(ExtractionError, match="403.*API key not valid"):
            extractor.extract(image)

    def test_extract_connect_error(self, image):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        extractor = GeminiExtractor(api_key="k", transport=httpx.MockTransport(handler))
        with pytest.raises(ExtractionError, match="Cannot connect to Gemini"):
            extractor.extract(image)

    def test_extract_dropped_connection(self, image):
        def handler(request):
            raise httpx.ReadError("connection reset by peer", request=request)

        extractor = GeminiExtractor(api_key="k", transport=httpx.MockTransport(handler))
        with pytest.raises(ExtractionError, match="Gemini request failed.*connection reset") as exc_info:
            extractor.extract(image)
        assert isinstance(exc_info.value.__cause__, httpx.ReadError)

    def test_extract_no_candidates(self, image):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        extractor = GeminiExtractor(api_key="k", transport=transport)

        with pytest.raises(ExtractionError, match="no text"):
            extractor.extract(image)

    def test_extract_without_json(self, image):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "This is not a business card."}]}}]},
            )
        )
        extractor = GeminiExtractor(api_key="k", transport=transport)

        with pytest.raises(ExtractionError, match="No JSON object"):
            extractor.extract(image)


class TestOpenAIExtractor:
    """Test OpenAIExtractor requests and responses."""

    def test_name(self):
        assert OpenAIExtractor(api_key="k").name == "openai:gpt-4o"

    def test_extract_success(self, image):
        calls = []

        def handler(request):
            return httpx.Response(
                200,
                json={"choices": [{"message": {"content": json.dumps(CARD_JSON)}}]},
            )

        extractor = OpenAIExtractor(api_key="sk-test", transport=_transport(handler, calls))
        card = extractor.extract(image)

        assert card.company == "Acme Corp"
        assert card.phone == "03-1234-5678"

        request = calls[0]
        assert request.url.path.endswith("/chat/completions")
        assert request.headers["authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-4o"
        assert body["response_format"] == {"type": "json_object"}
        assert body["max_tokens"] == 1000
        content = body["messages"][0]["content"]
        assert content[0]["type"] == "text"
        assert content[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")

    def test_extract_falls_back_to_embedded_json(self, image):
        content = "Extracted:\n" + json.dumps(CARD_JSON)
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": {"content": content}}]})
        )
        card = OpenAIExtractor(api_key="k", transport=transport).extract(image)
        assert card.email == "taro.yamada@acme.example"

    def test_extract_empty_content(self, image):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": {"content": None}}]})
        )
        with pytest.raises(ExtractionError, match="empty response"):
            OpenAIExtractor(api_key="k", transport=transport).extract(image)

    def test_extract_server_error(self, image):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="oops"))
        with pytest.raises(ExtractionError, match="OpenAI API error"):
            OpenAIExtractor(api_key="k", transport=transport).extract(image)

    def test_extract_protocol_error(self, image):
        def handler(request):
            raise httpx.RemoteProtocolError("server disconnected", request=request)

        with pytest.raises(ExtractionError, match="OpenAI request failed"):
            OpenAIExtractor(api_key="k", transport=httpx.MockTransport(handler)).extract(image)


class TestCreateExtractor:
    """Test building extractors from settings."""

    def _settings(self, **overrides):
        values = {"gemini_api_key": "g-key", "openai_api_key": "o-key"}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    def test_gemini_default_model(self):
        extractor = create_extractor("gemini", self._settings())
        assert isinstance(extractor, GeminiExtractor)
        assert extractor.name == "gemini:gemini-2.0-flash"

    def test_model_suffix(self):
        extractor = create_extractor("openai:gpt-4.1-mini", self._settings())
        assert isinstance(extractor, OpenAIExtractor)
        assert extractor.name == "openai:gpt-4.1-mini"

    def test_missing_key(self):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            create_extractor("openai", self._settings(openai_api_key=None))

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown extractor backend"):
            create_extractor("ollama:llama3.2", self._settings())

    def test_split_backend(self):
        assert split_backend("gemini") == ("gemini", "")
        assert split_backend(" OpenAI:gpt-4.1-mini ") == ("openai", "gpt-4.1-mini")
