import json

from sui_decoder.explainer.prompt import build_prompt
from sui_decoder.explainer.request import ChatCompletionRequest, ChatMessage


def test_prompt_contains_every_section_in_order(transaction_record):
    prompt = build_prompt(transaction_record)

    sections = ["### Summary", "### Key Actions", "### Gas Fee", "### Under the Hood", "Transaction JSON:"]
    positions = [prompt.index(section) for section in sections]
    assert positions == sorted(positions)


def test_prompt_embeds_the_full_record(transaction_record):
    prompt = build_prompt(transaction_record)

    embedded = prompt.split("```json\n", 1)[1].rsplit("\n```", 1)[0]
    assert json.loads(embedded) == transaction_record.data


def test_prompt_has_no_surrounding_whitespace(transaction_record):
    prompt = build_prompt(transaction_record)

    assert prompt == prompt.strip()
    assert prompt.startswith("You are a Sui blockchain expert.")


def test_chat_request_payload_drops_unset_fields():
    request = ChatCompletionRequest(model="m", messages=[ChatMessage(role="user", content="hi")])

    assert request.to_payload() == {
        "model": "m",
        "messages": [{"role": "user", "content": "hi"}],
        "stream": True,
    }
