"""Chat samples: plain, streamed, and streamed with an inline image."""

import asyncio
import base64
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from gemini_client.app_config import load_json_config, parse_app_config, resolve_runtime_env
from gemini_client.chat_session import ChatSession
from gemini_client.errors import GoogleGenerativeAIError
from gemini_client.gen_ai import GoogleGenerativeAI
from gemini_client.generative_model import GenerativeModel
from gemini_client.logging_config import setup_logging
from gemini_client.request_helpers import MessageLike

_GREETING_HISTORY = [
    {"role": "user", "parts": [{"text": "Hello"}]},
    {"role": "model", "parts": [{"text": "Great to meet you. What would you like to know?"}]},
]


async def send_message(chat: ChatSession, message: MessageLike) -> None:
    response = await chat.send_message(message)
    print(response.text())


async def send_message_stream(chat: ChatSession, message: MessageLike) -> None:
    result = await chat.send_message_stream(message)
    async for chunk in result:
        print(chunk.text(), end="", flush=True)
    print()


async def chat(model: GenerativeModel) -> None:
    session = model.start_chat({"history": _GREETING_HISTORY})
    await send_message(session, "I have 2 dogs in my house.")
    await send_message(session, "How many paws are in my house?")


async def chat_streaming(model: GenerativeModel) -> None:
    session = model.start_chat({"history": _GREETING_HISTORY})
    await send_message_stream(session, "I have 2 dogs in my house.")
    await send_message_stream(session, "How many paws are in my house?")


def load_inline_image(path: Path, mime_type: str = "image/jpeg") -> dict:
    return {
        "inlineData": {
            "data": base64.b64encode(path.read_bytes()).decode("ascii"),
            "mimeType": mime_type,
        }
    }


async def chat_streaming_with_images(model: GenerativeModel, media_path: Path) -> None:
    session = model.start_chat({
        "history": [{"role": "user", "parts": [{"text": "Hello, I'm designing inventions. Can I show you one?"}]}],
    })
    await send_message_stream(session, "Hello, I'm designing inventions. Can I show you one?")

    image_path = media_path / "jetpack.jpg"
    if not image_path.exists():
        logger.warning(f"Skipping image sample: {image_path} not found")
        return
    await send_message_stream(session, ["What do you think about this design?", load_inline_image(image_path)])


async def main() -> None:
    load_dotenv()

    config = parse_app_config(load_json_config())
    log_descriptions = setup_logging(level=config.log_level, consumers=config.log_consumers)

    env = resolve_runtime_env()
    if not env.api_key:
        logger.error(f"{env.api_key_env_var} environment variable is required.")
        sys.exit(1)

    gen_ai = GoogleGenerativeAI(env.api_key)
    model = gen_ai.get_generative_model({"model": config.model}, config.request_options())

    print(f"gemini-client samples (model: {model.model})")
    if log_descriptions:
        print(f"Logging: {', '.join(log_descriptions)}")
    print()

    # Comment out any sample you don't want to run.
    try:
        await chat(model)
        await chat_streaming(model)
        await chat_streaming_with_images(model, Path(config.media_path))
    except GoogleGenerativeAIError as ex:
        logger.error(f"Sample failed: {ex}")
        sys.exit(1)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
