import base64
import re
from typing import List, Optional, Sequence

from ..schemas import ConversationTurn, ImagePart, ModelMessage, TextPart


DEFAULT_PROMPT = (
    "Create a complete, standalone HTML file that recreates the UI shown in the screenshot as "
    "accurately as possible. Make it fully interactive and functional - all buttons, forms, "
    "dropdowns, and interactive elements should work with JavaScript. Include all necessary CSS "
    "and JavaScript inline within the HTML file. Make sure it's a pixel-perfect recreation with "
    "proper hover effects, animations, and user interactions."
)

INTERACTIVITY_BLOCK = "\n".join(
    [
        "IMPORTANT: This must include JavaScript functionality:",
        "- All buttons and interactive elements must be functional",
        "- Include event handlers for clicks, hovers, form submissions",
        "- Add animations and transitions where appropriate",
        "- Make dropdowns, modals, tabs, and other UI components fully working",
        "- Use vanilla JavaScript (no external libraries required)",
        "- Include all JavaScript code within <script> tags in the HTML file",
        "- Make sure every interactive element visible in the screenshot actually works",
    ]
)

REFINEMENT_TEMPLATE = (
    "Here is the current HTML code I'm working with:\n"
    "\n"
    "```html\n"
    "{current_html}\n"
    "```\n"
    "\n"
    "User request: {message}\n"
    "\n"
    "Please provide an updated version of the complete HTML file with the requested changes. "
    "Make sure to:\n"
    "- Keep all existing functionality that wasn't mentioned for changes\n"
    "- Maintain the same structure and styling unless specifically asked to change it\n"
    "- Include all CSS and JavaScript inline within the HTML file\n"
    "- Make sure all interactive elements continue to work properly\n"
    "- Only modify what was specifically requested\n"
    "\n"
    "Provide the complete updated HTML file."
)

_PLACEHOLDER = re.compile(r"\{(current_html|message)\}")


def _prompt_text(prompts: Optional[dict], key: str, default: str) -> str:
    section = (prompts or {}).get("generation")
    value = section.get(key) if isinstance(section, dict) else None
    return value if isinstance(value, str) and value.strip() else default


def build_generation_prompt(
    user_prompt: Optional[str],
    include_javascript: bool,
    make_interactive: bool,
    prompts: Optional[dict] = None,
) -> str:
    if user_prompt:
        prompt = user_prompt
    else:
        prompt = _prompt_text(prompts, "default_prompt", DEFAULT_PROMPT)
    if include_javascript or make_interactive:
        prompt += "\n\n" + _prompt_text(prompts, "interactivity_block", INTERACTIVITY_BLOCK)
    return prompt


def encode_data_uri(image_bytes: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def build_generation_message(prompt: str, image_bytes: bytes, mime_type: str) -> ModelMessage:
    # text first, image second: the order the model expects
    return ModelMessage(
        role="user",
        content=[
            TextPart(text=prompt),
            ImagePart(data=encode_data_uri(image_bytes, mime_type)),
        ],
    )


def build_refinement_messages(
    conversation_history: Sequence[ConversationTurn],
    current_html: str,
    message: str,
    prompts: Optional[dict] = None,
) -> List[ModelMessage]:
    """Replay the caller's history and append the edit request.

    The first turn is dropped when it is the user turn that carried the
    screenshot: images are not kept between requests, the current HTML stands
    in for that turn's outcome. Images on later turns are unsupported and are
    replayed as plain text.
    """
    messages: List[ModelMessage] = []
    for index, turn in enumerate(conversation_history):
        if index == 0 and turn.role == "user" and turn.has_image:
            continue
        messages.append(ModelMessage(role=turn.role, content=[TextPart(text=turn.content)]))

    template = _prompt_text(prompts, "refinement_template", REFINEMENT_TEMPLATE)
    values = {"current_html": current_html, "message": message}
    # single pass so braces inside the HTML or the request are never expanded
    context_prompt = _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)
    messages.append(ModelMessage(role="user", content=[TextPart(text=context_prompt)]))
    return messages
