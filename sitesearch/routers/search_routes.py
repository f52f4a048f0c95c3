from fastapi import APIRouter, Depends, Query, BackgroundTasks, Request
from typing import Optional
import logging
from pydantic import BaseModel, Field
import time

from ..services.search import SearchEngine, SearchUnavailable
from ..utils.custom_utils import generate_response
from ..utils.logging.error_logger import error_logger

router = APIRouter(prefix="/search", tags=["Search"])
logger = logging.getLogger(__name__)


# Dependency to get the search engine built at startup
def get_search_engine(request: Request) -> SearchEngine:
    return request.app.state.search_engine


# Pydantic models for request validation

class TrackSearchRequest(BaseModel):
    query: str = Field("", max_length=500, description="The search query the interaction belongs to")
    action: str = Field("click", max_length=50, description="Interaction type (click, view)")


async def _unavailable_response(error: SearchUnavailable, request: Request):
    await error_logger.log_error(error=error, request=request)
    return generate_response(
        status_code=503,
        response_message="Search service unavailable",
        customer_message=error.user_message,
        body=None
    )


@router.get("")
async def search_content(
    background_tasks: BackgroundTasks,
    request: Request,
    q: Optional[str] = Query(None, description="Free-text search query"),
    content_type: Optional[str] = Query(None, alias="type", description="Restrict to one content type"),
    category: Optional[str] = Query(None, description="Restrict to one category (slug or label)"),
    sort: Optional[str] = Query(None, description="relevance, date-desc, date-asc or title-asc"),
    page: Optional[str] = Query(None, description="1-based page number"),
    job_location: Optional[str] = Query(None, description="Job location contains this text"),
    job_type: Optional[str] = Query(None, description="Exact job type, e.g. full-time"),
    job_category: Optional[str] = Query(None, description="Job category slug"),
    salary_min: Optional[str] = Query(None, description="Minimum salary at least this amount"),
    salary_max: Optional[str] = Query(None, description="Maximum salary at most this amount"),
    engine: SearchEngine = Depends(get_search_engine)
):
    """
    Search site content.

    Every parameter is optional and taken as a raw string; unknown or
    malformed values fall back to their defaults instead of failing.
    """
    try:
        start_time = time.time()

        result_page = await engine.search(
            {
                "q": q, "type": content_type, "category": category, "sort": sort, "page": page,
                "job_location": job_location, "job_type": job_type, "job_category": job_category,
                "salary_min": salary_min, "salary_max": salary_max,
            },
            background_tasks=background_tasks
        )

        response_time = time.time() - start_time
        message = "Search completed successfully" if result_page.total else "No results found"

        return generate_response(
            status_code=200,
            response_message=message,
            customer_message=message,
            body={
                **result_page.to_dict(),
                "metadata": {
                    "response_time_ms": round(response_time * 1000, 2),
                    "query_string": result_page.query.to_query_string()
                }
            }
        )
    except SearchUnavailable as e:
        return await _unavailable_response(e, request)
    except Exception as e:
        logger.error(f"Error performing search: {e}")
        await error_logger.log_error(error=e, request=request)
        return generate_response(
            status_code=500,
            response_message="Error performing search",
            customer_message="An error occurred while performing the search",
            body=None
        )


@router.get("/suggestions")
async def get_search_suggestions(
    request: Request,
    q: Optional[str] = Query(None, description="Partial search query"),
    engine: SearchEngine = Depends(get_search_engine)
):
    """
    Get live-search suggestions for a partial query.
    """
    try:
        suggestions = await engine.autocomplete(q)

        return generate_response(
            status_code=200,
            response_message="Suggestions retrieved successfully",
            customer_message="Suggestions retrieved successfully",
            body={"suggestions": suggestions}
        )
    except SearchUnavailable as e:
        return await _unavailable_response(e, request)
    except Exception as e:
        logger.error(f"Error retrieving search suggestions: {e}")
        await error_logger.log_error(error=e, request=request)
        return generate_response(
            status_code=500,
            response_message="Error retrieving search suggestions",
            customer_message="An error occurred while retrieving suggestions",
            body=None
        )


@router.get("/popular")
async def get_popular_searches(
    request: Request,
    limit: int = Query(10, ge=1, le=100, description="Maximum number of terms to return"),
    engine: SearchEngine = Depends(get_search_engine)
):
    """
    Get the most popular search terms.
    """
    try:
        popular = await engine.popular_searches(limit)

        return generate_response(
            status_code=200,
            response_message="Popular searches retrieved successfully",
            customer_message="Popular searches retrieved successfully",
            body={"popular_searches": popular}
        )
    except Exception as e:
        logger.error(f"Error retrieving popular searches: {e}")
        await error_logger.log_error(error=e, request=request)
        return generate_response(
            status_code=500,
            response_message="Error retrieving popular searches",
            customer_message="An error occurred while retrieving popular searches",
            body=None
        )


@router.post("/track")
async def track_search(
    payload: TrackSearchRequest,
    request: Request,
    engine: SearchEngine = Depends(get_search_engine)
):
    """
    Record a click or view on a search result.
    """
    try:
        recorded = await engine.record_interaction(payload.query, payload.action)

        return generate_response(
            status_code=200,
            response_message="Search interaction recorded" if recorded else "Nothing to record",
            customer_message="Thank you",
            body={"recorded": recorded}
        )
    except Exception as e:
        logger.error(f"Error tracking search interaction: {e}")
        await error_logger.log_error(error=e, request=request)
        return generate_response(
            status_code=500,
            response_message="Error tracking search interaction",
            customer_message="An error occurred while recording the interaction",
            body=None
        )
