import time

from fastapi import APIRouter, Depends, Request

from ..generator import utc_timestamp
from ..settings import Settings, get_settings

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"

ENDPOINTS = {
	"health": "GET /health",
	"api": "GET /api",
	"generate": "POST /api/adaptive/generate",
	"analytics": "POST /api/adaptive/analytics",
	"conversation": "POST /api/language/conversation",
	"hint": "POST /api/language/hint",
	"speak": "POST /api/language/speak",
}


@router.get("/health")
def health(request: Request, settings: Settings = Depends(get_settings)):
	started = getattr(request.app.state, "started_at", None)
	uptime = time.monotonic() - started if started is not None else 0.0
	return {
		"status": "healthy",
		"timestamp": utc_timestamp(),
		"uptime": round(uptime, 3),
		"environment": settings.environment,
	}


@router.get("/api")
def api_root(settings: Settings = Depends(get_settings)):
	return {
		"name": "Cerebro AI Backend",
		"version": API_VERSION,
		"endpoints": ENDPOINTS,
		"powered_by": f"{settings.openrouter_model} via OpenRouter",
	}
