import os
import unittest
from unittest.mock import patch

from gemini_client.app_config import parse_app_config, resolve_runtime_env


class ParseAppConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = parse_app_config({})
        self.assertEqual("gemini-1.5-flash", config.model)
        self.assertEqual("media", config.media_path)
        self.assertIsNone(config.timeout_seconds)
        self.assertEqual(0, config.max_retries)
        self.assertEqual("INFO", config.log_level)

    def test_request_options_from_config(self) -> None:
        config = parse_app_config({
            "TimeoutSeconds": "30",
            "MaxRetries": 2,
            "BaseUrl": "http://localhost:8080",
            "ApiVersion": "v1",
        })
        options = config.request_options()
        self.assertEqual(30.0, options.timeout)
        self.assertEqual(2, options.max_retries)
        self.assertEqual("http://localhost:8080", options.base_url)
        self.assertEqual("v1", options.api_version)

    def test_blank_base_url_is_unset(self) -> None:
        self.assertIsNone(parse_app_config({"BaseUrl": "  "}).base_url)


class ResolveRuntimeEnvTests(unittest.TestCase):
    def test_api_key_preferred(self) -> None:
        with patch.dict(os.environ, {"API_KEY": "a", "GEMINI_API_KEY": "b"}, clear=True):
            env = resolve_runtime_env()
        self.assertEqual("a", env.api_key)
        self.assertEqual("API_KEY", env.api_key_env_var)

    def test_gemini_api_key_fallback(self) -> None:
        with patch.dict(os.environ, {"GEMINI_API_KEY": "b"}, clear=True):
            env = resolve_runtime_env()
        self.assertEqual("b", env.api_key)
        self.assertEqual("GEMINI_API_KEY", env.api_key_env_var)

    def test_missing_key(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            env = resolve_runtime_env()
        self.assertEqual("", env.api_key)


if __name__ == "__main__":
    unittest.main()
