import unittest

from gemini_client.chat_session_helpers import validate_chat_history
from gemini_client.errors import GoogleGenerativeAIError


class ValidateChatHistoryTests(unittest.TestCase):
    def test_valid_history(self) -> None:
        validate_chat_history([
            {"role": "user", "parts": [{"text": "Hello"}, {"inlineData": {"data": "", "mimeType": "image/png"}}]},
            {"role": "model", "parts": [{"text": "Hi"}, {"functionCall": {"name": "f", "args": {}}}]},
            {"role": "function", "parts": [{"functionResponse": {"name": "f", "response": {}}}]},
        ])

    def test_empty_history_is_valid(self) -> None:
        validate_chat_history([])

    def test_first_entry_must_be_user(self) -> None:
        with self.assertRaises(GoogleGenerativeAIError):
            validate_chat_history([{"role": "model", "parts": [{"text": "Hi"}]}])

    def test_unknown_role(self) -> None:
        with self.assertRaises(GoogleGenerativeAIError):
            validate_chat_history([
                {"role": "user", "parts": [{"text": "Hi"}]},
                {"role": "assistant", "parts": [{"text": "Hi"}]},
            ])

    def test_parts_required(self) -> None:
        for entry in ({"role": "user"}, {"role": "user", "parts": []}):
            with self.subTest(entry=entry):
                with self.assertRaises(GoogleGenerativeAIError):
                    validate_chat_history([entry])

    def test_part_not_allowed_for_role(self) -> None:
        with self.assertRaises(GoogleGenerativeAIError) as ctx:
            validate_chat_history([
                {"role": "user", "parts": [{"text": "Hi"}]},
                {"role": "model", "parts": [{"inlineData": {"data": "", "mimeType": "image/png"}}]},
            ])
        self.assertIn("inlineData", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
