"""
Main entrypoint for the FastAPI server
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from core.cors import ClientCORSMiddleware
from core.lifespan import lifespan
from core.config import Settings, get_settings

from api.abstracts.errors import AbstractDownloadError
from api.abstracts.routes import router as abstracts_router

# REST routers
# Add each api/feature folder here
API_PREFIX = "/api"

# Routes answering their own CORS preflight
PREFLIGHT_ROUTE_PREFIXES = (f"{API_PREFIX}/abstracts/download/",)


# Customize route id's
# Helpful for creating sensible names in the client
def custom_generate_unique_id(route: APIRoute):
    """ Generate unique route IDs based on route name """
    return f"{route.name}"  # these must be unique


async def abstract_download_error_handler(request: Request, exc: AbstractDownloadError):
    """ Render download errors with their diagnostic body """
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    # Create schema & router
    app = FastAPI(
        lifespan=lifespan,
        generate_unique_id_function=custom_generate_unique_id
    )

    # CORS settings to allow client-server communication
    # Set with env variable
    if settings.CLIENT_ORIGIN:
        app.add_middleware(
            ClientCORSMiddleware,
            passthrough_prefixes=PREFLIGHT_ROUTE_PREFIXES,
            allow_origins=[settings.CLIENT_ORIGIN],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(AbstractDownloadError, abstract_download_error_handler)

    app.include_router(abstracts_router, prefix=API_PREFIX)

    # Health check endpoint for monitoring
    @app.get("/api/health", tags=["health"])
    def health_check():
        return {"status": "ok", "message": "Abstracts API is running"}

    return app


app = create_app()


if __name__ == "__main__":
    # For debugging purposes
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
