from __future__ import annotations

from typing import Any

from gemini_client.errors import GoogleGenerativeAIError

POSSIBLE_ROLES = ("user", "model", "function", "system")

_PART_FIELDS = (
    "text",
    "inlineData",
    "fileData",
    "functionCall",
    "functionResponse",
    "executableCode",
    "codeExecutionResult",
)

VALID_PART_FIELDS: dict[str, set[str]] = {
    "user": {"text", "inlineData", "fileData"},
    "function": {"functionResponse"},
    "model": {"text", "functionCall", "executableCode", "codeExecutionResult"},
    "system": {"text"},
}


def validate_chat_history(history: list[dict[str, Any]]) -> None:
    """Raise ``GoogleGenerativeAIError`` if ``history`` is not a valid seed for a chat."""
    for position, content in enumerate(history):
        role = content.get("role")
        parts = content.get("parts")

        if position == 0 and role != "user":
            raise GoogleGenerativeAIError(f"First content should be with role 'user', got {role}")
        if role not in POSSIBLE_ROLES:
            raise GoogleGenerativeAIError(
                f"Each item should include role field. Got {role} but valid roles are: {list(POSSIBLE_ROLES)}"
            )
        if not isinstance(parts, list):
            raise GoogleGenerativeAIError("Content should have 'parts' property with an array of Parts")
        if not parts:
            raise GoogleGenerativeAIError("Each Content should have at least one part")

        for part in parts:
            for field in _PART_FIELDS:
                if field in part and field not in VALID_PART_FIELDS[role]:
                    raise GoogleGenerativeAIError(f"Content with role '{role}' can't contain '{field}' part")
