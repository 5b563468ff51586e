"""
Operator console output.

Everything the server tells the person watching the terminal goes through
here: the per-request access line, the transcript printed for each telemetry
packet, the startup banner and fault reports. Line labels are kept stable so
people can grep the output.
"""
import json
import sys
from datetime import datetime, timezone
from typing import Any, List

from backend.models.schemas import MotorSnapshot, TelemetryMessage

RULE = "━" * 40
BANNER_RULE = "━" * 54
MISSING = object()

def iso_now() -> str:
    """UTC timestamp like 2026-02-17T09:30:00.123Z."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")

def has_field(message: TelemetryMessage, name: str) -> bool:
    return message.has(name)

def _plain(value: Any) -> Any:
    # integral floats print as integers, in the dump and in the field lines alike
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value

def _display(value: Any) -> str:
    if value is MISSING:
        return "N/A"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(_plain(value), ensure_ascii=False, separators=(",", ":"))
    return str(value)

def _or(value: Any, fallback: Any) -> Any:
    # null, false, "" and 0 fall back; empty lists and objects do not
    return fallback if value in (None, False, "", 0) else value

def _field(message, name: str) -> Any:
    return getattr(message, name) if message.has(name) else MISSING

def _motor_line(index: int, entry: Any) -> str:
    state = speed = MISSING
    if isinstance(entry, dict):
        snapshot = MotorSnapshot.model_validate(entry)
        if "state" in snapshot.model_fields_set:
            state = snapshot.state
        if "speed" in snapshot.model_fields_set:
            speed = snapshot.speed
    return f"   Motor {index}: {_display(state)} ({_display(speed)}%)"

def format_transcript(body: Any, timestamp: str) -> List[str]:
    lines = ["", RULE, f"[{timestamp}] 📦 Received data from STM32:", RULE]

    if body is not None:
        lines.append(json.dumps(_plain(body), indent=2, ensure_ascii=False))

        if isinstance(body, dict):
            msg = TelemetryMessage.model_validate(body)

            if has_field(msg, "button"):
                lines += ["", f"🔘 Button {_display(msg.button)}: {_display(_field(msg, 'state'))}"]

            if has_field(msg, "motor"):
                lines += [
                    "",
                    f"🔧 Motor {_display(msg.motor)}:",
                    f"   Direction: {_display(_or(msg.direction, 'N/A'))}",
                    f"   Speed: {_display(_or(msg.speed, 0))}%",
                ]

            if msg.motors:
                lines += ["", "🚗 All motors:"]
                if isinstance(msg.motors, list):
                    lines += [_motor_line(i, entry) for i, entry in enumerate(msg.motors)]
                else:
                    lines.append(f"   Motors: {_display(msg.motors)}")

            if has_field(msg, "rpm"):
                lines += ["", f"⚡ RPM: {_display(msg.rpm)}"]

    lines += [RULE, ""]
    return lines

def print_transcript(body: Any, timestamp: str) -> None:
    # single write so transcripts from concurrent requests stay whole
    print("\n".join(format_transcript(body, timestamp)), flush=True)

def log_request(method: str, path: str) -> None:
    print(f"[{iso_now()}] {method} {path}", flush=True)

def clear_screen() -> None:
    if sys.stdout.isatty():
        print("\033[2J\033[H", end="", flush=True)

def print_banner(port: int, network_ip: str) -> None:
    clear_screen()
    print("\n".join([
        BANNER_RULE,
        "🚀 STM32 Robot Control Server",
        BANNER_RULE,
        "",
        f"✅ Server running on: http://localhost:{port}",
        f"📡 Network address: http://{network_ip}:{port}",
        "",
        "📝 Waiting for data from ESP8266...",
        "",
        BANNER_RULE,
        "",
    ]), flush=True)

def print_shutdown() -> None:
    print("\n\n👋 Shutting down server...", flush=True)

def report_fault(kind: str, exc: BaseException) -> None:
    print(f"\n❌ {kind}: {type(exc).__name__}: {exc}", file=sys.stderr, flush=True)
