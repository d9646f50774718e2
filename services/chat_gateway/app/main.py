import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import HOST, PORT
from .dependencies import build_catalog_provider, build_orchestrator
from .errors import InvalidInputError
from .logger import logger
from .logic.catalog import CatalogCache
from .routers import chat as chat_router

app = FastAPI(title="Model Fallback Gateway", version="0.1.0")

# Shared for the life of the process, across requests
app.state.catalog_cache = CatalogCache()
app.state.catalog = build_catalog_provider(app.state.catalog_cache)
app.state.orchestrator = build_orchestrator(app.state.catalog)

app.include_router(chat_router.router)


@app.exception_handler(RequestValidationError)
async def invalid_body(request: Request, exc: RequestValidationError):
    if request.url.path != "/chat":
        return await request_validation_exception_handler(request, exc)
    # Unparseable or mistyped chat bodies are reported like a missing prompt
    err = InvalidInputError()
    return JSONResponse(status_code=err.status_code, content=err.to_payload())


@app.get("/", response_class=PlainTextResponse)
def root():
    return "OpenRouter API with auto-fallback running."


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    logger.info("Server running on port {}", PORT)
    uvicorn.run(app, host=HOST, port=PORT)
