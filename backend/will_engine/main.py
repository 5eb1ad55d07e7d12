"""
Will Engine - FastAPI Application

Main entry point for the Will Engine backend.

Architecture:
- Intake snapshot → Family Context → family clause suggestions
- Clause catalogs → ClauseLibrary (loaded once, read-only)
- Stored selections → SelectionResolver → resolved clauses per article
- Intake snapshot → TokenDeriver → token map → hydrated WillDocument
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import catalogs_router, family_router, selections_router, documents_router
from .catalogs import init_library


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load clause catalogs on startup."""
    app.state.library = init_library()
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Will Engine",
    description="""
    Will Engine - Clause Resolution and Will Assembly

    This service turns an intake snapshot (client fields plus the Name Bank)
    and stored per-article clause selections into a will document.

    ## Pipeline
    1. **Family Context**: Name Bank + relationship status → flags and counts
    2. **Suggestions**: Family Context → suggested family clauses
    3. **Resolution**: stored selections → clauses per article (legacy ids mapped)
    4. **Hydration**: derived tokens substituted into `[[Token]]` placeholders

    ## Key Principles
    - Every output is recomputed from the snapshot; nothing is persisted here
    - Catalogs are loaded once and never mutated
    - Unresolved data surfaces as visible placeholders, never as errors
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(catalogs_router)
app.include_router(family_router)
app.include_router(selections_router)
app.include_router(documents_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Will Engine",
        "version": "1.0.0",
        "description": "Clause Resolution and Will Assembly",
        "docs": "/docs",
        "articles": [article.value for article in app.state.library.catalogs]
        if hasattr(app.state, "library") else [],
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m will_engine.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
