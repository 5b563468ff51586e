import argparse
import os
import time
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_MAX_BODY = 100 * 1024

def _env_int(names, default: int) -> int:
    for name in names:
        raw = os.getenv(name)
        if raw is None or raw.strip() == "":
            continue
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    return default

class Settings(BaseModel):
    """Server configuration, fixed once the process has started."""

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY, gt=0)
    started_at: float = Field(default_factory=time.monotonic)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.getenv("ROBOT_SERVER_HOST") or DEFAULT_HOST,
            port=_env_int(("ROBOT_SERVER_PORT", "PORT"), DEFAULT_PORT),
            max_body_bytes=_env_int(("ROBOT_SERVER_MAX_BODY",), DEFAULT_MAX_BODY),
        )

    def uptime(self) -> float:
        return max(0.0, time.monotonic() - self.started_at)

def parse_args(argv: Optional[Sequence[str]] = None) -> Settings:
    """Build settings from the environment, then apply command-line overrides."""
    base = Settings.from_env()
    parser = argparse.ArgumentParser(description="STM32 Robot Control Server")
    parser.add_argument("--host", default=base.host, help=f"Interface to bind (default: {base.host})")
    parser.add_argument("--port", type=int, default=base.port, help=f"Port to listen on (default: {base.port})")
    parser.add_argument(
        "--max-body",
        type=int,
        default=base.max_body_bytes,
        help="Largest accepted request body in bytes",
    )
    args = parser.parse_args(argv)
    return Settings(
        host=args.host,
        port=args.port,
        max_body_bytes=args.max_body,
        started_at=base.started_at,
    )
