import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from thinkcheck.core.config import settings
from thinkcheck.core.constants import GRAMMAR_VERSION
from thinkcheck.core.exceptions import MissingCredentialsError
from thinkcheck.core.llm import CompletionClient, CompletionRequest
from thinkcheck.core.prompt_manager import get_prompt_manager
from thinkcheck.dependencies import get_completion_client
from thinkcheck.schemas import ConnectionTestResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/")
async def root():
    return {"message": f"Welcome to the {settings.APP_NAME}", "version": settings.VERSION}


@router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "version": settings.VERSION,
        "grammar_version": GRAMMAR_VERSION,
        "llm_configured": settings.llm_configured,
    }


@router.get("/test-llm", response_model=ConnectionTestResponse)
async def test_llm(client: CompletionClient = Depends(get_completion_client)):
    """Send a short greeting prompt to check the completion service connection."""
    if not client.is_configured:
        raise MissingCredentialsError()

    prompt = get_prompt_manager().load_prompt("connection_test")
    result = await client.complete(CompletionRequest.for_task("connection_test", prompt))
    if not result.ok:
        logger.error(f"LLM connection test failed: {result.message}")
        body = ConnectionTestResponse(
            success=False,
            message="Failed to connect to the completion service",
            error=result.message,
        )
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    return ConnectionTestResponse(
        success=True,
        message="Completion service connection test successful",
        response=result.text,
    )
