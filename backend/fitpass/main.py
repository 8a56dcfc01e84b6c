"""FastAPI application entry point."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .routes import chat, profile, site, tools
from .services.site_metadata import SECURITY_HEADERS
from .utils.logger import logger

# Create FastAPI app
app = FastAPI(
    title="FitPass API",
    description="Fitness class booking backend with an AI booking assistant",
    version="1.0.0",
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    # Session cookies are only shared with explicitly listed origins
    allow_credentials="*" not in settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Apply the fixed security header policy to every response."""
    response = await call_next(request)
    for key, value in SECURITY_HEADERS.items():
        response.headers.setdefault(key, value)
    return response


# Include routers
app.include_router(chat.router)
app.include_router(tools.router)
app.include_router(profile.router)
app.include_router(site.router)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "fitpass",
        "sanity_configured": settings.sanity_configured,
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint.

    Returns:
        Welcome message
    """
    return {
        "message": "FitPass API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Startup event
@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info("Starting FitPass API")
    logger.info(f"LLM provider: {settings.llm_provider}")
    logger.info(f"Sanity dataset: {settings.sanity_dataset} (configured: {settings.sanity_configured})")
    logger.info(f"Debug mode: {settings.debug}")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    logger.info("Shutting down FitPass API")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fitpass.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info",
    )
