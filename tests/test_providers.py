"""Tests for upstream providers."""

from types import SimpleNamespace

from helphive.config import Settings
from helphive.providers import (
    AnthropicProvider,
    MockProvider,
    OpenAIProvider,
    UpstreamRequest,
    UpstreamResult,
    provider_from_settings,
)


REQUEST = UpstreamRequest(
    model="test-model",
    max_tokens=64,
    system_prompt="system",
    user_prompt="user",
)


class StatusError(Exception):
    status_code = 529


def _raising(exc):
    def create(**kwargs):
        raise exc
    return create


class TestMockProvider:
    """Test scripted replies."""

    def test_replays_in_order_then_repeats_last(self):
        provider = MockProvider(["one", "two"])
        texts = [provider.complete(REQUEST).text for _ in range(3)]
        assert texts == ["one", "two", "two"]
        assert provider.call_count == 3
        assert provider.calls[0] is REQUEST

    def test_exception_becomes_failure(self):
        result = MockProvider([RuntimeError("boom")]).complete(REQUEST)
        assert not result.ok
        assert result.http_status == 500
        assert "RuntimeError: boom" in result.error

    def test_result_passthrough(self):
        scripted = UpstreamResult(text="", http_status=503)
        assert MockProvider([scripted]).complete(REQUEST) is scripted

    def test_callable_replies(self):
        provider = MockProvider(lambda request: request.user_prompt.upper())
        assert provider.complete(REQUEST).text == "USER"


class TestUpstreamResult:
    def test_ok(self):
        assert UpstreamResult(text="x", http_status=200).ok
        assert not UpstreamResult(text="x", http_status=429).ok
        assert not UpstreamResult(text="x", http_status=200, error="late").ok


class TestAnthropicProvider:
    """Test the Anthropic provider against a stub client."""

    def test_complete(self):
        calls = []

        def create(**kwargs):
            calls.append(kwargs)
            return SimpleNamespace(content=[SimpleNamespace(text='{"title": "Hi"}')])

        provider = AnthropicProvider(api_key="k")
        provider._client = SimpleNamespace(messages=SimpleNamespace(create=create))

        result = provider.complete(REQUEST)
        assert result.ok
        assert result.text == '{"title": "Hi"}'
        assert calls[0]["model"] == "test-model"
        assert calls[0]["max_tokens"] == 64
        assert calls[0]["system"] == "system"
        assert calls[0]["messages"] == [{"role": "user", "content": "user"}]

    def test_empty_content(self):
        provider = AnthropicProvider(api_key="k")
        provider._client = SimpleNamespace(
            messages=SimpleNamespace(create=lambda **kwargs: SimpleNamespace(content=[]))
        )
        result = provider.complete(REQUEST)
        assert result.ok
        assert result.text == ""

    def test_sdk_error_is_returned(self):
        """SDK exceptions never escape; their status code is kept."""
        provider = AnthropicProvider(api_key="k")
        provider._client = SimpleNamespace(
            messages=SimpleNamespace(create=_raising(StatusError("overloaded")))
        )
        result = provider.complete(REQUEST)
        assert not result.ok
        assert result.http_status == 529
        assert "overloaded" in result.error


class TestOpenAIProvider:
    """Test the OpenAI provider against a stub client."""

    def test_complete(self):
        calls = []

        def create(**kwargs):
            calls.append(kwargs)
            message = SimpleNamespace(content='["a"]')
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

        provider = OpenAIProvider(api_key="k")
        provider._client = SimpleNamespace(
            chat=SimpleNamespace(completions=SimpleNamespace(create=create))
        )

        result = provider.complete(REQUEST)
        assert result.text == '["a"]'
        assert calls[0]["messages"][0] == {"role": "system", "content": "system"}

    def test_transport_error(self):
        provider = OpenAIProvider(api_key="k")
        provider._client = SimpleNamespace(
            chat=SimpleNamespace(completions=SimpleNamespace(create=_raising(TimeoutError("slow"))))
        )
        result = provider.complete(REQUEST)
        assert not result.ok
        assert result.http_status == 500


class TestProviderFromSettings:
    def test_selection(self):
        assert isinstance(provider_from_settings(Settings()), AnthropicProvider)
        assert isinstance(provider_from_settings(Settings(provider="openai")), OpenAIProvider)
        assert isinstance(provider_from_settings(Settings(provider="mock")), MockProvider)

    def test_settings_passed_through(self):
        settings = Settings(api_key="k", base_url="https://gateway.local", timeout_seconds=5)
        provider = provider_from_settings(settings)
        assert provider.api_key == "k"
        assert provider.base_url == "https://gateway.local"
        assert provider.timeout_seconds == 5
