from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.routes import router
from app.core.errors import GuidanceError
from app.core.logging import get_logger

log = get_logger("main")

app = FastAPI(title="Calm Loop Guidance API", version="0.1.0")
app.include_router(router, prefix="/api")


@app.exception_handler(GuidanceError)
async def on_guidance_error(request: Request, exc: GuidanceError):
    return JSONResponse(status_code=exc.status_code, content=exc.body)


@app.exception_handler(Exception)
async def on_unexpected_error(request: Request, exc: Exception):
    log.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc) or "Server error"})
