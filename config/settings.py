"""
config/settings.py
──────────────────
Depot agent configuration loaded from environment variables.
"""
import os
from dataclasses import dataclass


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


@dataclass
class Settings:
    # Depot served by this agent ("ALL" runs every depot in one loop)
    DEPOT_ID: str = os.getenv("DEPOT_ID", "MOC")

    # Transport
    MQTT_BROKER: str = os.getenv("MQTT_BROKER", "mqtt://localhost:1883")
    TOPIC_PREFIX: str = os.getenv("TOPIC_PREFIX", "railstream")
    RECONNECT_DELAY_S: int = int(os.getenv("RECONNECT_DELAY_S", "5"))
    CONNECT_TIMEOUT_S: int = int(os.getenv("CONNECT_TIMEOUT_S", "30"))

    # Tick cadence in milliseconds
    PUBLISH_INTERVAL_MS: int = int(os.getenv("PUBLISH_INTERVAL_MS", "3000"))
    POINT_MACHINE_EVERY: int = int(os.getenv("POINT_MACHINE_EVERY", "3"))

    # Simulation
    SIMULATION_PROFILE: str = os.getenv("SIMULATION_PROFILE", "depot-agent")
    SIMULATION_SEED: int | None = _optional_int("SIMULATION_SEED")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    AGENT_VERSION: str = "1.0.0"


settings = Settings()
