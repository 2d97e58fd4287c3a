import pytest
from conftest import FakeGenerator, gemini_payload

from style_assistant.errors import MalformedResponse, NetworkError, UpstreamError
from style_assistant.relay import ChatRelay, extract_reply_text
from style_assistant.utils import sanitize_reply, strip_emoji, strip_markdown

TEMPLATE = "Persona.\n<<INVENTORY>>\nCustomer says: <<MESSAGE>>"


def test_strip_markdown_removes_emphasis_and_headings():
    assert strip_markdown("## Drop\n**Forsaken** *Hoodie*") == " Drop\nForsaken Hoodie"


def test_strip_emoji_covers_each_range():
    text = "a\U0001F600b\U0001F525c\U0001F680d\U0001F1FAe\u2600f\u2702g"

    assert strip_emoji(text) == "abcdefg"


def test_sanitize_reply_trims():
    assert sanitize_reply("  **Stay dark.** \U0001F480  ") == "Stay dark."


def test_extract_reply_text_reads_first_part():
    payload = gemini_payload("Check this out")
    payload["candidates"].append({"content": {"parts": [{"text": "ignored"}]}})

    assert extract_reply_text(payload) == "Check this out"


@pytest.mark.parametrize(
    "payload",
    [
        None,
        ["not", "a", "dict"],
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"inline_data": {}}]}}]},
        {"candidates": [{"content": {"parts": [{"text": "   "}]}}]},
        {"candidates": "nope"},
    ],
)
def test_extract_reply_text_rejects_unexpected_shapes(payload):
    with pytest.raises(MalformedResponse):
        extract_reply_text(payload)


def test_relay_sends_prompt_and_sanitizes_reply():
    generator = FakeGenerator(payload=gemini_payload("**Check this out**\nPRODUCT:Forsaken Hoodie\n"))
    relay = ChatRelay(generator, TEMPLATE)

    reply = relay.relay("show me hoodies", "IN STOCK PRODUCTS:\n- Forsaken Hoodie")

    assert reply == "Check this out\nPRODUCT:Forsaken Hoodie"
    assert generator.prompts == [
        "Persona.\nIN STOCK PRODUCTS:\n- Forsaken Hoodie\nCustomer says: show me hoodies"
    ]


def test_relay_propagates_upstream_errors():
    relay = ChatRelay(FakeGenerator(error=NetworkError("timeout")), TEMPLATE)

    with pytest.raises(UpstreamError):
        relay.relay("hi", "")


def test_relay_flags_malformed_payload():
    relay = ChatRelay(FakeGenerator(payload={"error": {"code": 400}}), TEMPLATE)

    with pytest.raises(MalformedResponse):
        relay.relay("hi", "")


@pytest.mark.parametrize("text", ["\U0001F600\u2728", "** ## **"])
def test_reply_empty_after_sanitizing_is_rejected(text):
    relay = ChatRelay(FakeGenerator(payload=gemini_payload(text)), TEMPLATE)

    with pytest.raises(MalformedResponse):
        relay.relay("hi", "")
