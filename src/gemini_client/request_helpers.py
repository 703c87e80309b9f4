from __future__ import annotations

from typing import Any, Sequence

from gemini_client.errors import GoogleGenerativeAIError, GoogleGenerativeAIRequestInputError

# A message is a plain string, a single part dict, or a sequence mixing both.
PartLike = str | dict[str, Any]
MessageLike = PartLike | Sequence[PartLike]


def normalize_model_name(model: str) -> str:
    """``gemini-1.5-flash`` -> ``models/gemini-1.5-flash``; qualified names pass through."""
    return model if "/" in model else f"models/{model}"


def _to_part(item: PartLike) -> dict[str, Any]:
    if isinstance(item, str):
        return {"text": item}
    if isinstance(item, dict):
        return item
    raise GoogleGenerativeAIRequestInputError(f"Unsupported message part type: {type(item).__name__}")


def _to_parts(request: MessageLike) -> list[dict[str, Any]]:
    if isinstance(request, (str, dict)):
        return [_to_part(request)]
    return [_to_part(item) for item in request]


def format_new_content(request: MessageLike) -> dict[str, Any]:
    """Wrap a new message into a Content with the role its parts call for."""
    parts = _to_parts(request)

    user_parts: list[dict] = []
    function_parts: list[dict] = []
    for part in parts:
        if "functionResponse" in part:
            function_parts.append(part)
        else:
            user_parts.append(part)

    if user_parts and function_parts:
        raise GoogleGenerativeAIError(
            "Within a single message, FunctionResponse cannot be mixed with other type of part in the request "
            "for sending chat message."
        )
    if not user_parts and not function_parts:
        raise GoogleGenerativeAIError("No content is provided for sending chat message.")

    if function_parts:
        return {"role": "function", "parts": function_parts}
    return {"role": "user", "parts": user_parts}


def format_system_instruction(instruction: MessageLike | None) -> dict[str, Any] | None:
    if instruction is None:
        return None
    if isinstance(instruction, str):
        return {"role": "system", "parts": [{"text": instruction}]}
    if isinstance(instruction, dict) and "parts" in instruction:
        return {"role": "system", **{k: v for k, v in instruction.items() if k != "role"}}
    return {"role": "system", "parts": _to_parts(instruction)}


def _is_request_object(request: Any) -> bool:
    return isinstance(request, dict) and "contents" in request


def format_generate_content_input(request: MessageLike | dict[str, Any]) -> dict[str, Any]:
    """Accept either a full request body (``{"contents": [...]}``) or a message."""
    if _is_request_object(request):
        formatted = dict(request)
        if "systemInstruction" in formatted:
            formatted["systemInstruction"] = format_system_instruction(formatted["systemInstruction"])
        return formatted
    return {"contents": [format_new_content(request)]}


def format_count_tokens_input(
    request: MessageLike | dict[str, Any],
    model_params: dict[str, Any],
) -> dict[str, Any]:
    """Build a ``countTokens`` body; model-level settings ride along in ``generateContentRequest``."""
    if isinstance(request, dict) and "generateContentRequest" in request:
        return request

    if _is_request_object(request):
        contents = request["contents"]
    else:
        contents = [format_new_content(request)]

    generate_content_request = {"model": model_params["model"], "contents": contents}
    for key in ("generationConfig", "safetySettings", "tools", "toolConfig", "systemInstruction", "cachedContent"):
        if model_params.get(key) is not None:
            generate_content_request[key] = model_params[key]
    return {"generateContentRequest": generate_content_request}


def format_embed_content_input(request: MessageLike | dict[str, Any]) -> dict[str, Any]:
    if isinstance(request, dict) and "content" in request:
        return dict(request)
    content = format_new_content(request)
    return {"content": {"parts": content["parts"]}}
