from __future__ import annotations

import pytest

from receipt_ocr.config import DEFAULT_PROVIDER_ORDER, PROVIDER_ORDER_ENV
from receipt_ocr.providers import (
	AnthropicProvider,
	GeminiProvider,
	OpenAIProvider,
	register_builtin_providers,
)
from receipt_ocr.registry import ProviderRegistry, probe_available


def test_register_and_lookup(registry, make_provider):
	p = make_provider("anthropic")
	registry.register(p)

	assert registry.get("anthropic") is p
	assert registry.get("openai") is None
	assert registry.names() == ["anthropic"]
	assert registry.all() == [p]


def test_register_overwrites_by_name(registry, make_provider):
	first, second = make_provider("openai"), make_provider("openai")
	registry.register(first)
	registry.register(second)

	assert registry.get("openai") is second
	assert registry.names() == ["openai"]


def test_reset_clears_everything(registry, make_provider, settings):
	register_builtin_providers(registry, settings)
	registry.register(make_provider("extra"))

	registry.reset()

	assert registry.names() == []
	assert register_builtin_providers(registry, settings) is True


def test_registries_are_independent(make_provider):
	a, b = ProviderRegistry(), ProviderRegistry()
	a.register(make_provider("anthropic"))

	assert b.get("anthropic") is None


def test_default_order_when_unset(registry):
	assert registry.resolve_order() == list(DEFAULT_PROVIDER_ORDER)


@pytest.mark.parametrize(
	"raw, expected",
	[
		("openai,anthropic", ["openai", "anthropic"]),
		(" gemini ,, openai ,", ["gemini", "openai"]),
		("openai", ["openai"]),
		(" , ", list(DEFAULT_PROVIDER_ORDER)),
		("", list(DEFAULT_PROVIDER_ORDER)),
	],
)
def test_order_from_env(monkeypatch, registry, raw, expected):
	monkeypatch.setenv(PROVIDER_ORDER_ENV, raw)
	assert registry.resolve_order() == expected


def test_builtin_registration_is_idempotent(registry, settings):
	assert register_builtin_providers(registry, settings) is True
	first = {name: registry.get(name) for name in registry.names()}

	assert register_builtin_providers(registry, settings) is False

	assert registry.names() == ["anthropic", "openai", "gemini"]
	assert {name: registry.get(name) for name in registry.names()} == first
	assert isinstance(registry.get("anthropic"), AnthropicProvider)
	assert isinstance(registry.get("openai"), OpenAIProvider)
	assert isinstance(registry.get("gemini"), GeminiProvider)


def test_builtin_billing_tags(registry, settings):
	register_builtin_providers(registry, settings)
	assert {p.name: p.billing_provider for p in registry.all()} == {
		"anthropic": "anthropic",
		"openai": "openai",
		"gemini": "gemini",
	}


def test_probe_available_never_raises(make_provider):
	assert probe_available(make_provider("a")) is True
	assert probe_available(make_provider("b", available=False)) is False
	assert probe_available(make_provider("c", available=ImportError("sdk"))) is False
