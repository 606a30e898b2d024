"""Main FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contractdesk import __version__
from contractdesk.api.interfaces.controllers.root_controller import router as root_router
from contractdesk.api.interfaces.controllers.contracts_controller import router as contracts_router


app = FastAPI(
    title="contractdesk API",
    description="Contract document analysis and CRM ingestion",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(root_router)
app.include_router(contracts_router)


if __name__ == "__main__":
    import uvicorn
    from contractdesk.utils.settings.factory import settings_factory

    app_settings = settings_factory.create_app_settings()
    uvicorn.run(app, host=app_settings.host, port=app_settings.port)
