"""
botsuite/services/prompt_service.py

Purpose: Prompt assembly for the generative API

- Selects the system instruction for a bot
- Builds the ordered user message parts (text, file text, inline image)
- Builds the generation config (image output for the image bot)
"""

from typing import Any, Dict, List, Optional

from botsuite.schemas.bot import ExtractionResult
from botsuite.utils.constants import (
    SYSTEM_INSTRUCTIONS,
    GENERIC_BOT_INSTRUCTION,
    DATA_CHART_INSTRUCTION,
    DATA_DEFAULT_CHART_INSTRUCTION,
    IMAGE_OUTPUT_BOTS,
    FILE_CONTENT_MARKER,
    NO_INPUT_PLACEHOLDER,
)


def build_system_instruction(bot_id: str, chart_type: Optional[str] = None) -> str:
    """
    Returns the system instruction for a bot.

    The data bot names the requested chart type, or asks for a
    recommendation when none was given. Unknown bots get a generic
    instruction.
    """
    template = SYSTEM_INSTRUCTIONS.get(bot_id)
    if template is None:
        return GENERIC_BOT_INSTRUCTION

    if bot_id == "data":
        if chart_type:
            chart_instruction = DATA_CHART_INSTRUCTION.format(chart_type=chart_type)
        else:
            chart_instruction = DATA_DEFAULT_CHART_INSTRUCTION
        return template.format(chart_instruction=chart_instruction)

    return template


def build_user_parts(user_text: str, extraction: Optional[ExtractionResult] = None) -> List[Dict[str, Any]]:
    """
    Builds the user message parts in fixed order: user text, file text,
    inline image. The API needs at least one part, so an empty request
    gets a placeholder.
    """
    extraction = extraction or ExtractionResult()
    parts: List[Dict[str, Any]] = []

    if user_text:
        parts.append({"text": user_text})

    if extraction.text:
        parts.append({"text": f"{FILE_CONTENT_MARKER}{extraction.text}"})

    if extraction.inline_image:
        parts.append({
            "inline_data": {
                "mime_type": extraction.inline_image.mime_type,
                "data": extraction.inline_image.data,
            }
        })

    if not parts:
        parts.append({"text": NO_INPUT_PLACEHOLDER})

    return parts


def build_generation_config(bot_id: str) -> Dict[str, Any]:
    if bot_id in IMAGE_OUTPUT_BOTS:
        return {"responseModalities": ["TEXT", "IMAGE"]}
    return {}


def build_request_body(
    system_instruction: str,
    parts: List[Dict[str, Any]],
    generation_config: Dict[str, Any],
) -> Dict[str, Any]:
    """generateContent request body."""
    return {
        "systemInstruction": {
            "role": "system",
            "parts": [{"text": system_instruction}],
        },
        "generationConfig": generation_config,
        "contents": [
            {
                "role": "user",
                "parts": parts,
            }
        ],
    }
