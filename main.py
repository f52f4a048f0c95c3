# Import necessary FastAPI components
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
from datetime import datetime
from redis.asyncio import Redis

# Import application routes and custom error handlers
from sitesearch.routers import search_routes
from sitesearch.utils.exception_handlers import (
    http_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler
)

# Import middleware
from sitesearch.middleware.logging_middleware import ErrorLoggingMiddleware, RequestIDMiddleware

# Import configuration
from sitesearch.core.config import settings

# Import search services
from sitesearch.services.search import (
    InMemoryContentStore,
    SearchCacheManager,
    SearchEngine,
    get_search_tracker
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def load_content_store() -> InMemoryContentStore:
    """Load the content store, starting empty when the data file is unusable."""
    try:
        return InMemoryContentStore.from_json_file(settings.content_data_file)
    except (FileNotFoundError, ValueError) as e:
        logger.warning(f"Content data unavailable ({e}). Starting with an empty content store.")
        return InMemoryContentStore()


# Lifespan context manager for startup and shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Initialize application state
    app.state.settings = settings

    # Initialize Redis connection for caching and search analytics
    try:
        redis_url = settings.redis_url
        logger.info(f"Connecting to Redis at: {redis_url}")

        redis = Redis.from_url(
            url=redis_url,
            decode_responses=True,
            socket_timeout=5,  # Redis timeout
            socket_connect_timeout=5  # Redis connection timeout
        )
        await redis.ping()
        app.state.redis = redis
        logger.info("Redis connection established successfully")
    except Exception as e:
        logger.warning(f"Redis connection failed: {str(e)}. Running without cache.")
        app.state.redis = None
        logger.warning("Will use in-memory search analytics as fallback")

    # Build the search engine
    content_store = load_content_store()
    app.state.content_store = content_store
    app.state.search_engine = SearchEngine(
        content_store,
        cache_manager=SearchCacheManager(app.state.redis),
        tracker=get_search_tracker(app.state.redis)
    )
    logger.info(f"Search engine ready with {len(content_store)} content items")

    yield

    # Close Redis connection if it exists
    if getattr(app.state, "redis", None):
        try:
            await app.state.redis.close()
            logger.info("Redis connection closed successfully")
        except Exception as e:
            logger.warning(f"Error closing Redis connection: {str(e)}")


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Content search and faceting API for the RecruitPro recruitment site",
    version=settings.app_version,
    default_response_class=ORJSONResponse,
    lifespan=lifespan
)

# CORS Configuration
logger.info(f"Effective CORS Origins: {settings.cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_methods,
    allow_headers=settings.cors_headers,
)

# Add logging middleware
app.add_middleware(ErrorLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

# Register custom exception handlers
# These ensure consistent error responses across the API
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint for monitoring system status

    Returns a status response indicating the API is operational and the status of its dependencies.
    """
    health_status = {
        "status": "healthy",
        "timestamp": str(datetime.now()),
        "version": settings.app_version,
        "dependencies": {
            "redis": "unknown",
            "content_store": "unknown"
        }
    }

    # Check Redis health
    redis = getattr(request.app.state, "redis", None)
    try:
        if redis:
            redis_ping = await redis.ping()
            health_status["dependencies"]["redis"] = "healthy" if redis_ping else "unhealthy"
        else:
            health_status["dependencies"]["redis"] = "not_configured"
    except Exception as e:
        logger.error(f"Redis health check error: {str(e)}")
        health_status["dependencies"]["redis"] = "unhealthy"

    # Check the content store
    content_store = getattr(request.app.state, "content_store", None)
    if content_store is None:
        health_status["dependencies"]["content_store"] = "not_loaded"
    else:
        health_status["dependencies"]["content_store"] = "healthy"
        health_status["content_items"] = len(content_store)
        health_status["content_version"] = content_store.version

    # Search services report their cache status
    search_engine = getattr(request.app.state, "search_engine", None)
    if search_engine is not None:
        health_status["search"] = await search_engine.health_check()

    # Redis is optional, so only a missing content store makes the service unhealthy
    if health_status["dependencies"]["content_store"] != "healthy":
        health_status["status"] = "unhealthy"

    return ORJSONResponse(content=health_status)


# Include all routers with appropriate prefixes
api_prefix = settings.api_prefix

# Search routes
app.include_router(
    search_routes.router,
    prefix=api_prefix,
    tags=["Search"]
)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
