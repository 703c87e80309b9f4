from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from gemini_client.request import RequestOptions


@dataclass
class RuntimeEnv:
    api_key: str
    api_key_env_var: str


@dataclass
class AppConfig:
    model: str
    media_path: str
    timeout_seconds: float | None
    max_retries: int
    base_url: str | None
    api_version: str | None
    log_level: str
    log_consumers: list | None

    def request_options(self) -> RequestOptions:
        return RequestOptions(
            timeout=self.timeout_seconds,
            api_version=self.api_version,
            base_url=self.base_url,
            max_retries=self.max_retries,
        )


def load_json_config() -> dict:
    config_path = Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


def _to_optional_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def parse_app_config(config: dict) -> AppConfig:
    return AppConfig(
        model=config.get("Model", "gemini-1.5-flash"),
        media_path=str(config.get("MediaPath", "media")),
        timeout_seconds=_to_optional_float(config.get("TimeoutSeconds")),
        max_retries=int(config.get("MaxRetries", 0)),
        base_url=str(config.get("BaseUrl", "")).strip() or None,
        api_version=str(config.get("ApiVersion", "")).strip() or None,
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env() -> RuntimeEnv:
    for env_var in ("API_KEY", "GEMINI_API_KEY"):
        api_key = os.environ.get(env_var, "")
        if api_key:
            return RuntimeEnv(api_key=api_key, api_key_env_var=env_var)
    return RuntimeEnv(api_key="", api_key_env_var="API_KEY")
