import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db import Base, engine
from .exceptions import CloseTheLoopError, UnclassifiedError
from .logging_setup import configure_logging
from .settings import settings
from .routers import health, sessions, kaus, submissions

logger = logging.getLogger(__name__)

app = FastAPI(title="CloseTheLoop API")
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.include_router(health.router, prefix=settings.api_prefix)
app.include_router(sessions.router, prefix=settings.api_prefix)
app.include_router(kaus.router, prefix=settings.api_prefix)
app.include_router(submissions.router, prefix=settings.api_prefix)


@app.exception_handler(CloseTheLoopError)
async def handle_app_error(request: Request, exc: CloseTheLoopError):
	if exc.status_code >= 500:
		logger.error("%s %s failed: %s", request.method, request.url.path, exc)
	return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _validation_errors(exc: RequestValidationError):
	return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
	return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": _validation_errors(exc)})


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
	logger.exception("Unhandled error on %s %s", request.method, request.url.path)
	err = UnclassifiedError("Something went wrong!")
	return JSONResponse(status_code=err.status_code, content={"error": err.message})


@app.get("/info")
def root():
	return {
		"status": "ok",
		"gemini_configured": bool(settings.gemini_api_key),
		"storage_backend": settings.storage_backend,
	}


@app.on_event("startup")
async def startup_event():
	configure_logging(settings.log_level)
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
