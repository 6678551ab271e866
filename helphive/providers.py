"""
Upstream providers for HelpHive.

Send a request to a hosted LLM and return its raw text. Providers are
pluggable: use a real provider in production or MockProvider for tests
and offline demos. Transport and HTTP failures are returned as results,
never raised.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from helphive.config import DEFAULT_TIMEOUT_SECONDS, Settings


@dataclass
class UpstreamRequest:
    """A single call to the text-understanding service."""
    model: str
    max_tokens: int
    system_prompt: str
    user_prompt: str


@dataclass
class UpstreamResult:
    """Raw result from an upstream call."""
    text: str
    http_status: int
    latency_ms: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.http_status < 300


class UpstreamProvider(ABC):
    """Abstract base class for upstream providers."""

    @abstractmethod
    def complete(self, request: UpstreamRequest) -> UpstreamResult:
        """Execute a request and return the reply text."""
        pass


def _failure(e: Exception, start_time: float) -> UpstreamResult:
    return UpstreamResult(
        text="",
        http_status=getattr(e, "status_code", None) or 500,
        latency_ms=int((time.time() - start_time) * 1000),
        error=f"{type(e).__name__}: {e}",
    )


class AnthropicProvider(UpstreamProvider):
    """
    Anthropic Messages API provider.

    Requires an API key (HELPHIVE_API_KEY or ANTHROPIC_API_KEY).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._client = None

    @property
    def client(self):
        if self._client is None:
            try:
                from anthropic import Anthropic
            except ImportError:
                raise ImportError("anthropic package required. Install with: pip install anthropic")
            self._client = Anthropic(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_seconds,
            )
        return self._client

    def complete(self, request: UpstreamRequest) -> UpstreamResult:
        """Execute request via the Anthropic API."""
        start_time = time.time()

        try:
            response = self.client.messages.create(
                model=request.model,
                max_tokens=request.max_tokens,
                system=request.system_prompt,
                messages=[{"role": "user", "content": request.user_prompt}],
            )
        except Exception as e:
            return _failure(e, start_time)

        text = ""
        if response.content:
            text = getattr(response.content[0], "text", "") or ""

        return UpstreamResult(
            text=text,
            http_status=200,
            latency_ms=int((time.time() - start_time) * 1000),
        )


class OpenAIProvider(UpstreamProvider):
    """
    OpenAI-compatible chat completions provider.

    Also works against self-hosted gateways via ``base_url``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._client = None

    @property
    def client(self):
        if self._client is None:
            try:
                from openai import OpenAI
            except ImportError:
                raise ImportError("openai package required. Install with: pip install openai")
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_seconds,
            )
        return self._client

    def complete(self, request: UpstreamRequest) -> UpstreamResult:
        """Execute request via the OpenAI API."""
        start_time = time.time()

        try:
            response = self.client.chat.completions.create(
                model=request.model,
                max_tokens=request.max_tokens,
                messages=[
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": request.user_prompt},
                ],
            )
        except Exception as e:
            return _failure(e, start_time)

        return UpstreamResult(
            text=response.choices[0].message.content or "",
            http_status=200,
            latency_ms=int((time.time() - start_time) * 1000),
        )


Reply = Union[str, UpstreamResult, Exception]


class MockProvider(UpstreamProvider):
    """
    Mock provider for testing.

    Replays scripted replies in order; the last one repeats. A reply may be
    reply text, a ready-made UpstreamResult, or an exception to simulate a
    transport failure. A callable may be given instead to compute replies.
    """

    def __init__(
        self,
        replies: Union[Iterable[Reply], Callable[[UpstreamRequest], Reply], None] = None,
    ):
        if callable(replies):
            self._responder = replies
            self._replies: list[Reply] = []
        else:
            self._responder = None
            self._replies = list(replies) if replies is not None else ["{}"]
        self.calls: list[UpstreamRequest] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def complete(self, request: UpstreamRequest) -> UpstreamResult:
        start_time = time.time()
        self.calls.append(request)

        if self._responder is not None:
            reply = self._responder(request)
        else:
            index = min(len(self.calls) - 1, len(self._replies) - 1)
            reply = self._replies[index]

        if isinstance(reply, UpstreamResult):
            return reply
        if isinstance(reply, Exception):
            return _failure(reply, start_time)
        return UpstreamResult(text=reply, http_status=200)


def provider_from_settings(settings: Settings) -> UpstreamProvider:
    """Build the configured provider."""
    if settings.provider == "openai":
        return OpenAIProvider(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
        )
    if settings.provider == "mock":
        return MockProvider()
    return AnthropicProvider(
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout_seconds=settings.timeout_seconds,
    )
