from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_catalog_provider, get_orchestrator
from ..errors import GatewayError
from ..logger import logger
from ..logic.orchestrator import FallbackOrchestrator
from ..schemas.chat import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    ExhaustedResponse,
    ModelsResponse,
)

router = APIRouter()

EXHAUSTED_MESSAGE = "All models are currently unavailable. Please try again later."


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ExhaustedResponse}},
)
async def chat(req: ChatRequest, orchestrator: FallbackOrchestrator = Depends(get_orchestrator)):
    try:
        result = await orchestrator.run(req.prompt)
    except GatewayError as exc:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
    except Exception as exc:
        logger.exception("Unexpected error handling /chat")
        return JSONResponse(status_code=500, content=ErrorResponse(error=str(exc) or type(exc).__name__).model_dump())

    if not result.succeeded:
        body = ExhaustedResponse(
            error=EXHAUSTED_MESSAGE,
            attempted_models=result.attempted,
            last_error=result.last_error,
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    return ChatResponse(reply=result.content, model_used=result.model_used, attempted_models=result.attempted)


@router.get("/models", response_model=ModelsResponse)
async def models(refresh: bool = False, catalog=Depends(get_catalog_provider)):
    current = await (catalog.refresh() if refresh else catalog.get_candidates())
    return ModelsResponse(free_models=list(current.models), count=len(current.models), cached=current.cached)
