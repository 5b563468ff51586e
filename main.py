import asyncio
import json
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import uvicorn

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.core import console
from backend.core.config import Settings, parse_args
from backend.core.network import get_local_ip
from backend.models.schemas import DataAck, ServerStatus

TEMPLATES_DIR = Path(__file__).resolve().parent / "frontend" / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

ENDPOINTS = [
    ("GET", "/", "This page"),
    ("POST", "/data", "Receive telemetry data"),
    ("GET", "/status", "Server status"),
]
NOT_FOUND_TEXT = "404 - Not Found"

# --- FAULT HOOKS ---
def _loop_fault(loop, context):
    exc = context.get("exception") or RuntimeError(context.get("message", "unknown error"))
    console.report_fault("Unhandled Rejection", exc)

def _thread_fault(args):
    console.report_fault("Uncaught Exception", args.exc_value)

def install_fault_hooks():
    """Report background errors instead of letting them take the server down."""
    asyncio.get_running_loop().set_exception_handler(_loop_fault)
    threading.excepthook = _thread_fault

@asynccontextmanager
async def lifespan(app: FastAPI):
    install_fault_hooks()
    yield
    console.print_shutdown()

# --- BODY PARSING ---
def _reject_constant(name):
    raise ValueError(f"{name} is not valid JSON")

async def read_json_body(request: Request) -> Any:
    """Parsed JSON body, or None when the request carries no JSON."""
    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if media_type != "application/json" and not media_type.endswith("+json"):
        return None

    raw = await request.body()
    if len(raw) > request.app.state.settings.max_body_bytes:
        raise HTTPException(status_code=413, detail="Payload Too Large")
    if not raw.strip():
        return None
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        raise HTTPException(status_code=400, detail="Malformed JSON body")

# --- APP ---
def create_app(settings: Settings) -> FastAPI:
    # trailing-slash variants fall through to the catch-all instead of redirecting
    app = FastAPI(title="STM32 Robot Control Server", lifespan=lifespan, redirect_slashes=False)
    app.state.settings = settings

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        console.log_request(request.method, request.url.path)
        try:
            return await call_next(request)
        except Exception as exc:
            console.report_fault("Uncaught Exception", exc)
            return PlainTextResponse("500 - Internal Server Error", status_code=500)

    @app.exception_handler(StarletteHTTPException)
    async def not_found(request: Request, exc: StarletteHTTPException):
        # unknown path and known path with the wrong method both count as "not here"
        if exc.status_code in (404, 405):
            return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)
        return await http_exception_handler(request, exc)

    # --- ROUTES ---
    @app.get("/", response_class=HTMLResponse)
    async def landing_page(request: Request):
        return templates.TemplateResponse(
            request, "index.html", {"port": settings.port, "endpoints": ENDPOINTS}
        )

    @app.post("/data", response_model=DataAck)
    async def receive_data(body: Any = Depends(read_json_body)):
        """Telemetry forwarded by the ESP bridge from the STM32."""
        timestamp = console.iso_now()
        console.print_transcript(body, timestamp)
        return DataAck(timestamp=timestamp)

    @app.get("/status", response_model=ServerStatus)
    async def server_status():
        return ServerStatus(
            uptime=settings.uptime(),
            timestamp=console.iso_now(),
            port=settings.port,
        )

    return app

def app_from_env():
    """Factory for `uvicorn main:app_from_env --factory`."""
    return create_app(Settings.from_env())

# --- SERVER ---
class RobotServer(uvicorn.Server):
    async def startup(self, sockets=None):
        await super().startup(sockets=sockets)
        # still running means the socket is bound
        if not self.should_exit:
            console.print_banner(self.config.port, get_local_ip())

def main(argv=None):
    settings = parse_args(argv)
    config = uvicorn.Config(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
        timeout_graceful_shutdown=0,
    )
    try:
        RobotServer(config).run()
    except KeyboardInterrupt:
        # uvicorn re-raises the Ctrl-C it handled; the shutdown line is already out
        pass

if __name__ == "__main__":
    main()
