"""
LeadFlow - FastAPI Backend
Lead progression, signals and chat import
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError

from leadflow.config import settings
from leadflow.api.routes import (
    leads_router,
    interactions_router,
    imports_router,
    pipeline_router
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Pipeline de leads: etapas, temperatura, urgencia e importación de chats",
    version=settings.app_version
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(leads_router, prefix="/api")
app.include_router(interactions_router, prefix="/api")
app.include_router(imports_router, prefix="/api")
app.include_router(pipeline_router, prefix="/api")


@app.exception_handler(APIError)
async def storage_error_handler(request: Request, exc: APIError):
    """Storage failures are reported, never retried"""
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "Error de almacenamiento"})


@app.get("/")
def root():
    """Health check"""
    return {
        "status": "online",
        "app": settings.app_name,
        "version": settings.app_version
    }


@app.get("/health")
def health():
    """Detailed health check"""
    from leadflow.integrations.supabase import get_supabase_client

    try:
        client = get_supabase_client()
        client.table(settings.table_leads).select("id").limit(1).execute()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy" if db_status == "connected" else "unhealthy",
        "database": db_status
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
