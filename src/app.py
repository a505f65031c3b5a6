"""
User Management Backend API Server
Core functionality: CRUD for User records under /api/users
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS, USER_STORE
from database.connection import init_database, close_database
from api.routes import health, users
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    if USER_STORE == "postgres":
        await init_database()
    else:
        logger.info(f"Using {USER_STORE} user store, skipping database initialization")
    yield
    if USER_STORE == "postgres":
        await close_database()

# FastAPI app initialization
app = FastAPI(
    title="User Management Backend",
    description="Backend API for creating, reading, updating and deleting users",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

setup_error_handling(app)

# Include API routes
app.include_router(health.router, tags=["Health"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
