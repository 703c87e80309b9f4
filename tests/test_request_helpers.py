import unittest

from gemini_client.errors import GoogleGenerativeAIError
from gemini_client.request_helpers import (
    format_count_tokens_input,
    format_embed_content_input,
    format_generate_content_input,
    format_new_content,
    format_system_instruction,
    normalize_model_name,
)

_IMAGE_PART = {"inlineData": {"data": "aGVsbG8=", "mimeType": "image/jpeg"}}


class NormalizeModelNameTests(unittest.TestCase):
    def test_bare_name_is_qualified(self) -> None:
        self.assertEqual("models/gemini-1.5-flash", normalize_model_name("gemini-1.5-flash"))

    def test_qualified_name_passes_through(self) -> None:
        self.assertEqual("models/gemini-1.5-flash", normalize_model_name("models/gemini-1.5-flash"))
        self.assertEqual("tunedModels/abc", normalize_model_name("tunedModels/abc"))


class FormatNewContentTests(unittest.TestCase):
    def test_string_message(self) -> None:
        self.assertEqual({"role": "user", "parts": [{"text": "hi"}]}, format_new_content("hi"))

    def test_mixed_text_and_inline_data(self) -> None:
        content = format_new_content(["What do you think about this design?", _IMAGE_PART])
        self.assertEqual("user", content["role"])
        self.assertEqual(
            [{"text": "What do you think about this design?"}, _IMAGE_PART],
            content["parts"],
        )

    def test_single_part_dict(self) -> None:
        self.assertEqual({"role": "user", "parts": [_IMAGE_PART]}, format_new_content(_IMAGE_PART))

    def test_function_response_gets_function_role(self) -> None:
        part = {"functionResponse": {"name": "lookup", "response": {"ok": True}}}
        self.assertEqual({"role": "function", "parts": [part]}, format_new_content([part]))

    def test_function_response_cannot_mix_with_text(self) -> None:
        part = {"functionResponse": {"name": "lookup", "response": {}}}
        with self.assertRaises(GoogleGenerativeAIError):
            format_new_content(["text", part])

    def test_empty_message_rejected(self) -> None:
        with self.assertRaises(GoogleGenerativeAIError):
            format_new_content([])


class FormatSystemInstructionTests(unittest.TestCase):
    def test_none(self) -> None:
        self.assertIsNone(format_system_instruction(None))

    def test_string(self) -> None:
        self.assertEqual({"role": "system", "parts": [{"text": "Be brief."}]}, format_system_instruction("Be brief."))

    def test_content_keeps_parts(self) -> None:
        content = {"role": "user", "parts": [{"text": "Be brief."}]}
        self.assertEqual({"role": "system", "parts": [{"text": "Be brief."}]}, format_system_instruction(content))

    def test_list_of_parts(self) -> None:
        result = format_system_instruction(["One.", {"text": "Two."}])
        self.assertEqual([{"text": "One."}, {"text": "Two."}], result["parts"])


class FormatRequestTests(unittest.TestCase):
    def test_generate_content_from_message(self) -> None:
        self.assertEqual(
            {"contents": [{"role": "user", "parts": [{"text": "hi"}]}]},
            format_generate_content_input("hi"),
        )

    def test_generate_content_request_object_passes_through(self) -> None:
        request = {"contents": [{"role": "user", "parts": [{"text": "hi"}]}], "systemInstruction": "Be brief."}
        formatted = format_generate_content_input(request)
        self.assertEqual(request["contents"], formatted["contents"])
        self.assertEqual("system", formatted["systemInstruction"]["role"])

    def test_count_tokens_wraps_generate_content_request(self) -> None:
        body = format_count_tokens_input(
            "hi",
            {"model": "models/m", "generationConfig": {"temperature": 0.1}, "cachedContent": None},
        )
        inner = body["generateContentRequest"]
        self.assertEqual("models/m", inner["model"])
        self.assertEqual({"temperature": 0.1}, inner["generationConfig"])
        self.assertNotIn("cachedContent", inner)

    def test_embed_content(self) -> None:
        self.assertEqual({"content": {"parts": [{"text": "hi"}]}}, format_embed_content_input("hi"))
        request = {"content": {"parts": [{"text": "hi"}]}, "taskType": "RETRIEVAL_QUERY"}
        self.assertEqual(request, format_embed_content_input(request))


if __name__ == "__main__":
    unittest.main()
