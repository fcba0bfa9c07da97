from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    api_url: str = os.getenv("PASSINGS_API_URL", "http://localhost:4000/api")
    domain: str = os.getenv("PASSINGS_DOMAIN", "vehicles")
    fetch_timeout_seconds: float = float(os.getenv("PASSINGS_FETCH_TIMEOUT_SECONDS", "10.0"))

    kafka_bootstrap: str = os.getenv("KAFKA_BOOTSTRAP", "localhost:9092")
    push_topic_prefix: str = os.getenv("PASSINGS_PUSH_TOPIC_PREFIX", "passings.live")
    group: str = os.getenv("PASSINGS_GROUP", "passings")

    forecast_alpha: float = float(os.getenv("PASSINGS_FORECAST_ALPHA", "0.5"))
    forecast_beta: float = float(os.getenv("PASSINGS_FORECAST_BETA", "0.5"))

    log_level: str = os.getenv("PASSINGS_LOG_LEVEL", "INFO")

settings = Settings()
