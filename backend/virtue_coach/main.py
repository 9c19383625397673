import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from .gemini_client import GeminiClient
from .settings import settings
from .routers import coach


logger = logging.getLogger("virtue_coach")
# Honor LOG_LEVEL and attach a handler once so our logs show up under uvicorn
logger.setLevel(getattr(logging, settings.log_level.strip().upper(), logging.INFO))
if not logger.handlers:
	_h = logging.StreamHandler()
	_h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
	logger.addHandler(_h)
logger.propagate = False

app = FastAPI(title="Virtue Coach API")
app.include_router(coach.router)

CORS_HEADERS = {
	"Access-Control-Allow-Methods": "POST, OPTIONS",
	"Access-Control-Allow-Headers": "Content-Type",
}


def _allowed_origin(origin: str | None) -> str | None:
	allowed = settings.cors_allow_origins
	if "*" in allowed:
		return "*"
	if origin and origin in allowed:
		return origin
	return None


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
	# Preflights never reach the routers: 204, no body
	if request.method == "OPTIONS":
		response = Response(status_code=204)
	else:
		response = await call_next(request)
	origin = _allowed_origin(request.headers.get("origin"))
	if origin:
		response.headers["Access-Control-Allow-Origin"] = origin
	response.headers.update(CORS_HEADERS)
	return response


def _describe_validation_error(exc: RequestValidationError) -> str:
	errors = exc.errors()
	if not errors:
		return "Invalid request body"
	first = errors[0]
	# Drop the leading "body" segment FastAPI adds to every location
	loc = [str(p) for p in first.get("loc", ()) if p != "body"]
	parts = [".".join(loc), first.get("msg", "")]
	return "Invalid request body: " + " ".join(p for p in parts if p)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
	message = _describe_validation_error(exc)
	logger.info("Rejected request to %s: %s", request.url.path, message)
	return JSONResponse(status_code=400, content={"error": message})


@app.get("/info")
def root():
	return {
		"status": "ok",
		"gemini_configured": bool(settings.gemini_api_key),
		"provider": settings.gemini_provider,
		"dashboard_models": settings.dashboard_models,
		"synthesis_models": settings.synthesis_models,
	}


@app.on_event("startup")
async def startup_event():
	# One shared client for the whole process
	app.state.gemini = GeminiClient()
	if not app.state.gemini.configured:
		logger.warning("GEMINI_API_KEY is not set; all requests will use fallback messages")


@app.on_event("shutdown")
async def shutdown_event():
	client = getattr(app.state, "gemini", None)
	if client is not None:
		await client.aclose()
