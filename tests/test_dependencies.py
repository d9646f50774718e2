import pytest

from services.chat_gateway.app import dependencies
from services.chat_gateway.app.config import FREE_MODELS
from services.chat_gateway.app.logic import completion
from services.chat_gateway.app.logic.catalog import CatalogCache, ModelCatalogProvider, StaticCatalogProvider
from services.chat_gateway.app.logic.completion import CompletionClient, default_completion_client


@pytest.fixture(autouse=True)
def _default_config(monkeypatch):
    monkeypatch.setattr(dependencies, "UPSTREAM_DIALECT", "openrouter")
    monkeypatch.setattr(dependencies, "CATALOG_MODE", "discover")
    monkeypatch.setattr(completion, "UPSTREAM_DIALECT", "openrouter")


def test_discover_mode_uses_shared_cache():
    cache = CatalogCache()
    provider = dependencies.build_catalog_provider(cache)
    assert isinstance(provider, ModelCatalogProvider)
    assert provider.cache is cache


@pytest.mark.asyncio
async def test_static_mode_serves_free_models(monkeypatch):
    monkeypatch.setattr(dependencies, "CATALOG_MODE", "static")

    provider = dependencies.build_catalog_provider(CatalogCache())
    catalog = await provider.get_candidates()

    assert isinstance(provider, StaticCatalogProvider)
    assert list(catalog.models) == FREE_MODELS


@pytest.mark.asyncio
async def test_ollama_dialect_serves_single_local_model(monkeypatch):
    monkeypatch.setattr(dependencies, "UPSTREAM_DIALECT", "ollama")
    monkeypatch.setattr(dependencies, "OLLAMA_MODEL", "llama3.2")
    # dialect wins over catalog mode
    monkeypatch.setattr(dependencies, "CATALOG_MODE", "discover")

    provider = dependencies.build_catalog_provider(CatalogCache())
    catalog = await provider.get_candidates()

    assert isinstance(provider, StaticCatalogProvider)
    assert catalog.models == ("llama3.2",)


def test_default_client_is_openrouter():
    client = default_completion_client()
    assert isinstance(client, CompletionClient)
    assert client.dialect == "openrouter"
    url, headers, _ = client.build_request("hi", "A")
    assert url.endswith("/chat/completions")
    assert headers["Authorization"].startswith("Bearer ")


def test_ollama_client_targets_local_backend(monkeypatch):
    monkeypatch.setattr(completion, "UPSTREAM_DIALECT", "ollama")
    monkeypatch.setattr(completion, "OLLAMA_BASE_URL", "http://ollama.local:11434")

    client = default_completion_client()
    url, _, body = client.build_request("hi", "llama3.2")

    assert client.dialect == "ollama"
    assert url == "http://ollama.local:11434/api/generate"
    assert body == {"model": "llama3.2", "prompt": "hi", "stream": False}


def test_build_orchestrator_wires_catalog(monkeypatch):
    catalog = StaticCatalogProvider(["A"])
    orchestrator = dependencies.build_orchestrator(catalog)
    assert orchestrator.catalog is catalog
    assert isinstance(orchestrator.client, CompletionClient)
