import unittest

from gemini_client.errors import GoogleGenerativeAIResponseError
from gemini_client.response_helpers import GenerateContentResponse, format_blocked_reason
from tests.http_fakes import text_reply


class GenerateContentResponseTests(unittest.TestCase):
    def test_text_joins_parts(self) -> None:
        payload = {
            "candidates": [
                {"content": {"role": "model", "parts": [{"text": "Eight "}, {"text": "paws."}]}, "finishReason": "STOP"}
            ],
            "usageMetadata": {"totalTokenCount": 12},
        }
        response = GenerateContentResponse(payload)
        self.assertEqual("Eight paws.", response.text())
        self.assertEqual({"totalTokenCount": 12}, response.usage_metadata)

    def test_text_empty_without_candidates(self) -> None:
        self.assertEqual("", GenerateContentResponse({}).text())

    def test_blocked_prompt_raises(self) -> None:
        response = GenerateContentResponse({"promptFeedback": {"blockReason": "SAFETY"}})
        with self.assertRaises(GoogleGenerativeAIResponseError) as ctx:
            response.text()
        self.assertIn("SAFETY", str(ctx.exception))
        self.assertIsNotNone(ctx.exception.response)

    def test_bad_finish_reason_raises(self) -> None:
        response = GenerateContentResponse(text_reply("partial", finish_reason="RECITATION"))
        with self.assertRaises(GoogleGenerativeAIResponseError):
            response.text()

    def test_max_tokens_is_not_an_error(self) -> None:
        response = GenerateContentResponse(text_reply("cut off", finish_reason="MAX_TOKENS"))
        self.assertEqual("cut off", response.text())

    def test_function_calls(self) -> None:
        call = {"name": "lookup", "args": {"q": "paws"}}
        response = GenerateContentResponse(
            {"candidates": [{"content": {"role": "model", "parts": [{"functionCall": call}]}}]}
        )
        self.assertEqual([call], response.function_calls())
        self.assertEqual("", response.text())


class FormatBlockedReasonTests(unittest.TestCase):
    def test_prompt_feedback_message(self) -> None:
        message = format_blocked_reason(
            {"promptFeedback": {"blockReason": "OTHER", "blockReasonMessage": "policy"}}
        )
        self.assertEqual("Response was blocked due to OTHER: policy", message)

    def test_candidate_message(self) -> None:
        message = format_blocked_reason(text_reply("", finish_reason="SAFETY"))
        self.assertEqual("Candidate was blocked due to SAFETY", message)


if __name__ == "__main__":
    unittest.main()
