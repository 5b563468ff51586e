from pydantic import BaseModel, ConfigDict
from typing import Any, Literal

class TelemetryMessage(BaseModel):
    # Every field is optional and untyped: the ESP bridge forwards whatever the
    # STM32 printed, so any JSON object must be accepted.
    model_config = ConfigDict(extra="allow")

    button: Any = None
    state: Any = None
    motor: Any = None
    direction: Any = None
    speed: Any = None
    motors: Any = None
    rpm: Any = None

    def has(self, name: str) -> bool:
        """True when the sender included `name`, even as 0, false or null."""
        return name in self.model_fields_set or name in (self.model_extra or {})

class MotorSnapshot(BaseModel):
    model_config = ConfigDict(extra="allow")

    state: Any = None
    speed: Any = None

class DataAck(BaseModel):
    status: Literal["OK"] = "OK"
    message: str = "Data received"
    timestamp: str

class ServerStatus(BaseModel):
    status: Literal["running"] = "running"
    uptime: float
    timestamp: str
    port: int
