"""Unit tests for the collection reminder client"""

import json
from decimal import Decimal
import httpx
from fiado_ledger.infrastructure.clients.reminder import ReminderClient, build_prompt

FALLBACK = "fallback message"


def make_client(handler, api_key: str = "test-key") -> ReminderClient:
    return ReminderClient(
        api_key=api_key,
        base_url="https://text-gen.test",
        model="test-model",
        timeout=0.5,
        fallback_message=FALLBACK,
        transport=httpx.MockTransport(handler),
    )


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_prompt_lists_at_most_three_debts():
    debts = [("Arroz", Decimal("50")), ("Feijão", Decimal("12.5")), ("Café", Decimal("9")), ("Leite", Decimal("4"))]
    prompt = build_prompt("Ana", Decimal("75.5"), debts)

    assert "Ana" in prompt
    assert "R$ 75.50" in prompt
    assert "Feijão (R$ 12.50)" in prompt
    assert "Leite" not in prompt


async def test_generated_message_is_returned():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["key"] = request.headers.get("x-goog-api-key")
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=gemini_reply("Oi Ana! 😊 Podemos acertar?"))

    message, generated = await make_client(handler).generate_message("Ana", Decimal("30"), [("Arroz", Decimal("50"))])

    assert generated is True
    assert message == "Oi Ana! 😊 Podemos acertar?"
    assert captured["url"] == "https://text-gen.test/v1beta/models/test-model:generateContent"
    assert captured["key"] == "test-key"
    assert "Arroz" in captured["body"]["contents"][0]["parts"][0]["text"]


async def test_missing_api_key_uses_fallback_without_calling_out():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    message, generated = await make_client(handler, api_key="").generate_message("Ana", Decimal("30"), [])

    assert (message, generated) == (FALLBACK, False)


async def test_timeout_uses_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    message, generated = await make_client(handler).generate_message("Ana", Decimal("30"), [])

    assert (message, generated) == (FALLBACK, False)


async def test_server_error_uses_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "overloaded"})

    message, generated = await make_client(handler).generate_message("Ana", Decimal("30"), [])

    assert (message, generated) == (FALLBACK, False)


async def test_malformed_response_uses_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": []})

    message, generated = await make_client(handler).generate_message("Ana", Decimal("30"), [])

    assert (message, generated) == (FALLBACK, False)


async def test_non_object_parts_use_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": [{"content": {"parts": ["hi"]}}]})

    message, generated = await make_client(handler).generate_message("Ana", Decimal("30"), [])

    assert (message, generated) == (FALLBACK, False)


async def test_non_object_parts_are_ignored_next_to_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": [{"content": {"parts": ["hi", {"text": "Oi Ana!"}]}}]})

    message, generated = await make_client(handler).generate_message("Ana", Decimal("30"), [])

    assert (message, generated) == ("Oi Ana!", True)


async def test_blank_text_uses_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=gemini_reply("   "))

    message, generated = await make_client(handler).generate_message("Ana", Decimal("30"), [])

    assert (message, generated) == (FALLBACK, False)
