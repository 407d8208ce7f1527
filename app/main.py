import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import CORS_ALLOW_ORIGINS, LOG_LEVEL
from app.database import Base, engine
from app.errors import register_exception_handlers
from app.routes import (auth, users_routes, projects_routes, reports_routes,
                        community_proposals_routes, votes_routes)

# Rate limiting setup
from app.limiter import limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Civic Participation API")

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please slow down."}
    )

register_exception_handlers(app)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router, prefix="/auth")
app.include_router(users_routes.router)
app.include_router(projects_routes.router)
app.include_router(reports_routes.router)
app.include_router(community_proposals_routes.router)
app.include_router(votes_routes.router)

# Run DB init on startup
@app.on_event("startup")
async def on_startup():
    # One retry, then boot with whatever tables already exist
    for attempt in range(2):
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            break
        except Exception as exc:
            if attempt == 0:
                logger.warning("DB init failed, retrying once: %r", exc)
                await asyncio.sleep(0.5)
            else:
                logger.error("Skipping DB init due to error: %r", exc)
