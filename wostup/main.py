"""
Wostup API - Main Application

FastAPI backend with:
- MongoDB for all documents
- JWT authentication with email verification codes
- Plan-gated hiring features for startups
- WebSocket notifications at /ws/notifications

Run: uvicorn wostup.main:app --reload --port 4000
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wostup.api import api_router, ws_router
from wostup.core.config import get_settings
from wostup.core.errors import register_exception_handlers
from wostup.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Wostup API",
    description="""
    Recruiting marketplace backend connecting students with startups.

    ## Features
    - **Authentication**: JWT auth for students and startups, 6-digit email verification
    - **Startup profiles**: company pages and subscription plans
    - **Jobs & applications**: posting, applying, status tracking
    - **Interviews**: scheduling with slot conflict detection
    - **Analytics**: hiring funnel, gated by plan
    - **Notifications**: stored in-app notifications with realtime push
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")
app.include_router(ws_router)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "ok": True,
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("wostup.main:app", host="0.0.0.0", port=settings.port)
