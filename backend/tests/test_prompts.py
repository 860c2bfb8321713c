import base64
import itertools

import pytest

from snap2html.schemas import ConversationTurn, ImagePart, TextPart
from snap2html.services.prompts import (
    DEFAULT_PROMPT,
    INTERACTIVITY_BLOCK,
    build_generation_message,
    build_generation_prompt,
    build_refinement_messages,
)


@pytest.mark.parametrize("include_js,interactive", list(itertools.product([False, True], repeat=2)))
def test_default_prompt_with_optional_block(include_js, interactive):
    prompt = build_generation_prompt(None, include_js, interactive)
    assert prompt.startswith(DEFAULT_PROMPT)
    if include_js or interactive:
        assert prompt == DEFAULT_PROMPT + "\n\n" + INTERACTIVITY_BLOCK
    else:
        assert prompt == DEFAULT_PROMPT


def test_empty_user_prompt_falls_back_to_default():
    assert build_generation_prompt("", False, False) == DEFAULT_PROMPT
    assert build_generation_prompt(None, False, False) == DEFAULT_PROMPT


def test_whitespace_user_prompt_is_kept_verbatim():
    prompt = build_generation_prompt("   ", False, True)
    assert prompt.startswith("   ")
    assert not prompt.startswith(DEFAULT_PROMPT)


def test_user_prompt_used_verbatim():
    user_prompt = "Build the pricing table only. Keep {braces} as-is."
    assert build_generation_prompt(user_prompt, False, False) == user_prompt
    augmented = build_generation_prompt(user_prompt, False, True)
    assert augmented.startswith(user_prompt)
    assert augmented.endswith(INTERACTIVITY_BLOCK)


def test_prompt_is_deterministic():
    first = build_generation_prompt("hero section", True, False)
    second = build_generation_prompt("hero section", True, False)
    assert first == second


def test_prompt_overrides_from_yaml_mapping():
    prompts = {"generation": {"default_prompt": "Custom default", "interactivity_block": "Custom block"}}
    assert build_generation_prompt(None, True, False, prompts=prompts) == "Custom default\n\nCustom block"


def test_generation_message_shape():
    image = b"\x89PNG\r\n\x1a\nrest"
    message = build_generation_message("recreate it", image, "image/webp")
    assert message.role == "user"
    assert len(message.content) == 2
    text_part, image_part = message.content
    assert isinstance(text_part, TextPart)
    assert text_part.text == "recreate it"
    assert isinstance(image_part, ImagePart)
    prefix = "data:image/webp;base64,"
    assert image_part.data.startswith(prefix)
    assert base64.b64decode(image_part.data[len(prefix):]) == image


def test_refinement_drops_leading_image_turn():
    history = [
        ConversationTurn(role="user", content="screenshot attached", has_image=True),
        ConversationTurn(role="assistant", content="<html>first</html>"),
    ]
    messages = build_refinement_messages(history, "<html>first</html>", "dark mode")
    assert len(messages) == 2
    assert messages[0].role == "assistant"
    assert messages[0].text == "<html>first</html>"


def test_refinement_keeps_leading_turn_without_image():
    history = [
        ConversationTurn(role="user", content="hello"),
        ConversationTurn(role="assistant", content="hi"),
    ]
    messages = build_refinement_messages(history, "<html></html>", "change it")
    assert [m.text for m in messages[:2]] == ["hello", "hi"]


def test_refinement_only_drops_first_position():
    history = [
        ConversationTurn(role="assistant", content="intro"),
        ConversationTurn(role="user", content="later image", has_image=True),
    ]
    messages = build_refinement_messages(history, "<html></html>", "tweak")
    assert [m.text for m in messages[:2]] == ["intro", "later image"]


def test_refinement_final_message_embeds_html_and_request():
    html = "<html><style>a { color: {message}; }</style></html>"
    messages = build_refinement_messages([], html, "make links green")
    (final,) = messages
    assert final.role == "user"
    assert "```html\n" + html + "\n```" in final.text
    assert "User request: make links green" in final.text
    assert "Only modify what was specifically requested" in final.text
    assert "Provide the complete updated HTML file." in final.text
