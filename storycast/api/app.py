import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storycast import __version__
from storycast.api.routes import history
from storycast.db import connection as db_connection

app = FastAPI(
    title="Storycast API",
    description="Listening analytics for the story narration dashboard",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("STORYCAST_CORS_ORIGINS", "http://localhost:3000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(history.router, prefix="/api/history", tags=["history"])


@app.on_event("shutdown")
async def shutdown_connection_pool() -> None:
    """Close the database connection pool on shutdown."""
    db_connection.close_pool()


@app.get("/")
async def root():
    return {"message": "Storycast API", "version": __version__}


@app.get("/health")
async def health():
    """Health check with connection pool stats."""
    try:
        return {
            "status": "healthy",
            "pool": db_connection.get_pool_stats(),
        }
    except Exception as e:
        return {
            "status": "degraded",
            "error": str(e),
        }
