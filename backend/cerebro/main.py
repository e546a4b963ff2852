from __future__ import annotations
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import CerebroError, SchemaError
from .routers import adaptive, health, language
from .routers.health import ENDPOINTS, API_VERSION
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = list(ENDPOINTS.values())

SECURITY_HEADERS = {
	"X-Content-Type-Options": "nosniff",
	"X-Frame-Options": "SAMEORIGIN",
	"Referrer-Policy": "no-referrer",
	"X-DNS-Prefetch-Control": "off",
}


def configure_logging(settings: Settings) -> None:
	logging.basicConfig(
		level=settings.log_level.upper(),
		format="%(asctime)s %(levelname)s %(name)s - %(message)s",
	)


def _log_banner(settings: Settings) -> None:
	logger.info("CEREBRO AI BACKEND")
	logger.info("Server port: %s", settings.port)
	logger.info("Environment: %s", settings.environment)
	logger.info("AI model: %s", settings.openrouter_model)
	logger.info("OpenRouter API key: %s", "configured" if settings.openrouter_api_key else "MISSING")
	logger.info("Speech API key: %s", "configured" if settings.openai_api_key else "not set (native speech fallback)")


def _error_body(error: str, settings: Settings, **extra) -> dict:
	body = {"success": False, "error": error}
	if not settings.is_production:
		body.update({k: v for k, v in extra.items() if v is not None})
	return body


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	settings = settings or get_settings()

	@asynccontextmanager
	async def lifespan(_: FastAPI):
		configure_logging(settings)
		_log_banner(settings)
		yield

	app = FastAPI(title="Cerebro AI Backend", version=API_VERSION, lifespan=lifespan)
	app.state.settings = settings
	app.state.started_at = time.monotonic()
	app.dependency_overrides[get_settings] = lambda: settings

	app.include_router(health.router)
	app.include_router(adaptive.router)
	app.include_router(language.router)

	app.add_middleware(GZipMiddleware, minimum_size=1000)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.origins(),
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	@app.middleware("http")
	async def log_and_secure(request: Request, call_next):
		logger.info("%s %s", request.method, request.url.path)
		response = await call_next(request)
		for header, value in SECURITY_HEADERS.items():
			response.headers.setdefault(header, value)
		if settings.is_production:
			response.headers.setdefault("Strict-Transport-Security", "max-age=15552000; includeSubDomains")
		return response

	@app.exception_handler(CerebroError)
	async def handle_cerebro_error(request: Request, exc: CerebroError):
		if not isinstance(exc, SchemaError):
			# SchemaError already logged with its raw content by the parser
			logger.error("%s on %s: %s", exc.__class__.__name__, request.url.path, exc.message)
		return JSONResponse(
			status_code=exc.status_code,
			content=_error_body(exc.message, settings, details=repr(exc)),
		)

	@app.exception_handler(RequestValidationError)
	async def handle_request_validation(request: Request, exc: RequestValidationError):
		logger.info("Rejected malformed body on %s", request.url.path)
		return JSONResponse(
			status_code=400,
			content=_error_body("Invalid request body", settings, details=str(exc.errors())),
		)

	@app.exception_handler(StarletteHTTPException)
	async def handle_http_exception(request: Request, exc: StarletteHTTPException):
		if exc.status_code == 404:
			return JSONResponse(
				status_code=404,
				content={"success": False, "error": "Endpoint not found", "availableEndpoints": AVAILABLE_ENDPOINTS},
			)
		return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc.detail)})

	@app.exception_handler(Exception)
	async def handle_unexpected(request: Request, exc: Exception):
		logger.exception("Unhandled error on %s", request.url.path)
		return JSONResponse(
			status_code=500,
			content=_error_body("Internal server error", settings, message=str(exc)),
		)

	public_dir = Path(settings.public_dir)
	if public_dir.is_dir():
		app.mount("/app", StaticFiles(directory=public_dir, html=True), name="frontend")

	return app


app = create_app()


def run() -> None:
	import uvicorn

	settings = get_settings()
	configure_logging(settings)
	uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
	run()
