import unittest

from gemini_client.errors import GoogleGenerativeAIError, GoogleGenerativeAIRequestInputError
from gemini_client.gen_ai import GoogleGenerativeAI
from gemini_client.server.cache_types import CachedContent

_SYSTEM = {"role": "system", "parts": [{"text": "You are a librarian."}]}


def _cache(**overrides) -> CachedContent:
    fields = {
        "name": "cachedContents/abc",
        "model": "models/gemini-1.5-flash",
        "systemInstruction": _SYSTEM,
        **overrides,
    }
    return CachedContent.model_validate(fields)


class GoogleGenerativeAITests(unittest.TestCase):
    def setUp(self) -> None:
        self.gen_ai = GoogleGenerativeAI("test-key")

    def test_get_generative_model(self) -> None:
        model = self.gen_ai.get_generative_model({"model": "gemini-1.5-flash"})
        self.assertEqual("models/gemini-1.5-flash", model.model)
        self.assertEqual("test-key", model.api_key)

    def test_get_generative_model_requires_model(self) -> None:
        with self.assertRaises(GoogleGenerativeAIError):
            self.gen_ai.get_generative_model({})

    def test_model_from_cached_content(self) -> None:
        model = self.gen_ai.get_generative_model_from_cached_content(
            _cache(), {"generationConfig": {"temperature": 0.1}}
        )
        self.assertEqual("models/gemini-1.5-flash", model.model)
        self.assertEqual(_SYSTEM, model.system_instruction)
        self.assertEqual({"temperature": 0.1}, model.generation_config)
        self.assertEqual("cachedContents/abc", model.cached_content.name)

    def test_matching_model_name_is_accepted(self) -> None:
        model = self.gen_ai.get_generative_model_from_cached_content(_cache(), {"model": "gemini-1.5-flash"})
        self.assertEqual("models/gemini-1.5-flash", model.model)

    def test_conflicting_model_is_rejected(self) -> None:
        with self.assertRaises(GoogleGenerativeAIRequestInputError):
            self.gen_ai.get_generative_model_from_cached_content(_cache(), {"model": "gemini-1.5-pro"})

    def test_conflicting_system_instruction_is_rejected(self) -> None:
        with self.assertRaises(GoogleGenerativeAIRequestInputError):
            self.gen_ai.get_generative_model_from_cached_content(
                _cache(), {"systemInstruction": {"role": "system", "parts": [{"text": "other"}]}}
            )

    def test_cache_without_name_is_rejected(self) -> None:
        with self.assertRaises(GoogleGenerativeAIRequestInputError):
            self.gen_ai.get_generative_model_from_cached_content(_cache(name=None))


if __name__ == "__main__":
    unittest.main()
