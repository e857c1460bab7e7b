"""Policy analysis endpoints."""

import json

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse
from starlette.concurrency import iterate_in_threadpool

from policyscope.api.schemas.request import AnalyzeRequest
from policyscope.api.schemas.response import AnalyzeResponse
from policyscope.api.services.analysis_service import AnalysisService
from policyscope.config import Settings, get_settings
from policyscope.errors import AnalysisTimeoutError, PolicyScopeError
from policyscope.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


def get_analysis_service(settings: Settings = Depends(get_settings)) -> AnalysisService:
    """Dependency to get AnalysisService instance."""
    return AnalysisService(settings)


def error_status(error: Exception) -> int:
    """HTTP status for an analysis failure."""
    if isinstance(error, AnalysisTimeoutError):
        return 504
    return 500


def error_response(status_code: int, message: str) -> JSONResponse:
    body = AnalyzeResponse(success=False, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.post("", response_model=AnalyzeResponse)
def analyze_policy(
    request: AnalyzeRequest, service: AnalysisService = Depends(get_analysis_service)
):
    """
    Analyze a privacy policy.

    - **input**: Policy text, or an http(s) URL to fetch it from
    """
    try:
        logger.info(f"Received analyze request: input='{request.input[:50]}...'")
        result = service.analyze(request.input)
        logger.info("Analyze request completed successfully")
        return AnalyzeResponse(success=True, data=result)

    except PolicyScopeError as e:
        logger.error(f"Analysis error ({type(e).__name__}): {e}")
        return error_response(error_status(e), str(e))
    except Exception as e:
        logger.error(f"Error analyzing policy: {e}", exc_info=True)
        return error_response(500, f"Internal server error: {str(e)}")
    finally:
        service.close()


@router.post("/stream")
async def analyze_policy_stream(
    request: AnalyzeRequest, service: AnalysisService = Depends(get_analysis_service)
):
    """
    Analyze a privacy policy with real-time progress updates via SSE.

    Returns Server-Sent Events (SSE):
    - **fetching**: URL input is being downloaded
    - **started**: Assistant run created
    - **status**: Run status changed
    - **complete**: Final event with the analysis result
    - **error**: Error event with message and HTTP-equivalent status
    """
    logger.info(f"Received streaming analyze request: input='{request.input[:50]}...'")

    async def event_generator():
        try:
            async for event in iterate_in_threadpool(service.analyze_stream(request.input)):
                yield {"event": event["type"], "data": json.dumps(event["data"])}

        except Exception as e:
            logger.error(f"Error in streaming: {e}", exc_info=True)
            yield {
                "event": "error",
                "data": json.dumps({"message": str(e), "status": error_status(e)}),
            }
        finally:
            service.close()

    return EventSourceResponse(event_generator())
