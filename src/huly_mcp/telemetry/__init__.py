from .telemetry import (
    NoopTelemetry,
    SessionStartProps,
    Telemetry,
    ToolCalledProps,
    get_telemetry,
    is_telemetry_enabled,
)

__all__ = [
    "NoopTelemetry",
    "SessionStartProps",
    "Telemetry",
    "ToolCalledProps",
    "get_telemetry",
    "is_telemetry_enabled",
]
