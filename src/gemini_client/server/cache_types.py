from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gemini_client.errors import GoogleGenerativeAIRequestInputError
from gemini_client.request_helpers import format_system_instruction, normalize_model_name


@dataclass(frozen=True)
class Ttl:
    """Relative lifetime, sent as ``ttl: "<n>s"``."""

    seconds: int | float

    @classmethod
    def parse(cls, duration: str | int | float) -> Ttl:
        if isinstance(duration, (int, float)):
            return cls(duration)
        try:
            seconds = float(duration.removesuffix("s"))
        except ValueError as ex:
            raise GoogleGenerativeAIRequestInputError(f"Invalid ttl duration {duration!r}") from ex
        return cls(int(seconds) if seconds.is_integer() else seconds)

    def to_request_fields(self) -> dict[str, str]:
        return {"ttl": f"{self.seconds}s"}


@dataclass(frozen=True)
class ExpireTime:
    """Absolute expiry, an RFC 3339 timestamp."""

    timestamp: str | datetime

    def to_request_fields(self) -> dict[str, str]:
        if isinstance(self.timestamp, datetime):
            value = self.timestamp.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        else:
            value = self.timestamp
        return {"expireTime": value}


Expiration = Ttl | ExpireTime


def _pop_expiration(fields: dict[str, Any]) -> Expiration | None:
    ttl_seconds = fields.pop("ttlSeconds", None)
    ttl = fields.pop("ttl", None)
    expire_time = fields.pop("expireTime", None)

    if ttl_seconds is not None and ttl is not None:
        raise GoogleGenerativeAIRequestInputError("Cannot specify both `ttlSeconds` and `ttl`. Choose one.")
    if (ttl_seconds is not None or ttl is not None) and expire_time is not None:
        raise GoogleGenerativeAIRequestInputError("Cannot specify both `ttlSeconds` and `expireTime`. Choose one.")

    if ttl_seconds is not None:
        return Ttl(ttl_seconds)
    if ttl is not None:
        return Ttl.parse(ttl)
    if expire_time is not None:
        return ExpireTime(expire_time)
    return None


@dataclass
class CachedContentCreateParams:
    model: str
    contents: list[dict[str, Any]] | None = None
    expiration: Expiration | None = None
    display_name: str | None = None
    system_instruction: Any = None
    tools: list[dict[str, Any]] | None = None
    tool_config: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CachedContentCreateParams:
        """Build from wire-style keys (``ttlSeconds``, ``expireTime``, ``displayName``...)."""
        fields = dict(data)
        expiration = _pop_expiration(fields)
        model = fields.pop("model", None)
        if not model:
            raise GoogleGenerativeAIRequestInputError("Cached content must contain a `model` field.")
        return cls(
            model=model,
            contents=fields.pop("contents", None),
            expiration=expiration,
            display_name=fields.pop("displayName", None),
            system_instruction=fields.pop("systemInstruction", None),
            tools=fields.pop("tools", None),
            tool_config=fields.pop("toolConfig", None),
            extra=fields,
        )

    def to_request_body(self) -> dict[str, Any]:
        if not self.model:
            raise GoogleGenerativeAIRequestInputError("Cached content must contain a `model` field.")
        body: dict[str, Any] = {**self.extra, "model": normalize_model_name(self.model)}
        if self.contents is not None:
            body["contents"] = self.contents
        if self.display_name is not None:
            body["displayName"] = self.display_name
        if self.system_instruction is not None:
            body["systemInstruction"] = format_system_instruction(self.system_instruction)
        if self.tools is not None:
            body["tools"] = self.tools
        if self.tool_config is not None:
            body["toolConfig"] = self.tool_config
        if self.expiration is not None:
            body.update(self.expiration.to_request_fields())
        return body


@dataclass
class CachedContentUpdateParams:
    expiration: Expiration | None = None
    update_mask: list[str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CachedContentUpdateParams:
        """Build from ``{"cachedContent": {...}, "updateMask": [...]}``."""
        fields = dict(data.get("cachedContent") or {})
        expiration = _pop_expiration(fields)
        return cls(expiration=expiration, update_mask=data.get("updateMask"), extra=fields)

    def to_request_body(self) -> dict[str, Any]:
        body = dict(self.extra)
        if self.expiration is not None:
            body.update(self.expiration.to_request_fields())
        return body


class CachedContent(BaseModel):
    """A cached content resource as returned by the service."""

    name: str | None = None
    display_name: str | None = Field(None, alias="displayName")
    model: str | None = None
    contents: list[dict[str, Any]] | None = None
    tools: list[dict[str, Any]] | None = None
    system_instruction: dict[str, Any] | None = Field(None, alias="systemInstruction")
    tool_config: dict[str, Any] | None = Field(None, alias="toolConfig")
    create_time: str | None = Field(None, alias="createTime")
    update_time: str | None = Field(None, alias="updateTime")
    expire_time: str | None = Field(None, alias="expireTime")
    usage_metadata: dict[str, Any] | None = Field(None, alias="usageMetadata")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ListCacheResponse(BaseModel):
    cached_contents: list[CachedContent] = Field(default_factory=list, alias="cachedContents")
    next_page_token: str | None = Field(None, alias="nextPageToken")

    model_config = ConfigDict(populate_by_name=True)
