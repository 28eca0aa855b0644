"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.config import settings
from api.deps import create_translation_cache, engine
from api.routes import books, dictionary, paragraphs
from interlinea_core.db.session import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    init_db(engine)
    yield


app = FastAPI(
    title="Interlinea API",
    description="REST API for the Interlinea interlinear reading library",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.translation_cache = create_translation_cache()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(books.router, prefix="/api/books", tags=["books"])
app.include_router(paragraphs.router, prefix="/api/paragraphs", tags=["paragraphs"])
app.include_router(dictionary.router, prefix="/api/dictionary", tags=["dictionary"])


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
