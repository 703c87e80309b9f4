from loguru import logger

from gemini_client.chat_session import ChatSession
from gemini_client.errors import (
    GoogleGenerativeAIAbortError,
    GoogleGenerativeAIError,
    GoogleGenerativeAIFetchError,
    GoogleGenerativeAIRequestInputError,
    GoogleGenerativeAIResponseError,
)
from gemini_client.gen_ai import GoogleGenerativeAI
from gemini_client.generative_model import GenerativeModel
from gemini_client.request import RequestOptions
from gemini_client.response_helpers import GenerateContentResponse
from gemini_client.server import GoogleAICacheManager
from gemini_client.stream_reader import GenerateContentStreamResult

# Silent as a library until setup_logging() or logger.enable("gemini_client").
logger.disable("gemini_client")

__all__ = [
    "ChatSession",
    "GenerateContentResponse",
    "GenerateContentStreamResult",
    "GenerativeModel",
    "GoogleAICacheManager",
    "GoogleGenerativeAI",
    "GoogleGenerativeAIAbortError",
    "GoogleGenerativeAIError",
    "GoogleGenerativeAIFetchError",
    "GoogleGenerativeAIRequestInputError",
    "GoogleGenerativeAIResponseError",
    "RequestOptions",
]
