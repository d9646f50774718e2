from fastapi import Request

from .config import CATALOG_MODE, FREE_MODELS, OLLAMA_MODEL, UPSTREAM_DIALECT
from .logic.catalog import CatalogCache, ModelCatalogProvider, StaticCatalogProvider
from .logic.completion import DIALECT_OLLAMA, default_completion_client
from .logic.orchestrator import FallbackOrchestrator


def build_catalog_provider(cache: CatalogCache):
    # A local backend serves exactly one fixed model
    if UPSTREAM_DIALECT == DIALECT_OLLAMA:
        return StaticCatalogProvider([OLLAMA_MODEL])
    if CATALOG_MODE == "static":
        return StaticCatalogProvider(FREE_MODELS)
    return ModelCatalogProvider(cache)


def build_orchestrator(catalog) -> FallbackOrchestrator:
    return FallbackOrchestrator(catalog=catalog, client=default_completion_client())


def get_catalog_provider(request: Request):
    return request.app.state.catalog


def get_orchestrator(request: Request) -> FallbackOrchestrator:
    return request.app.state.orchestrator
