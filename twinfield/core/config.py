import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    twinfield_username: str = os.getenv("TWINFIELD_USERNAME", "")
    twinfield_password: str = os.getenv("TWINFIELD_PASSWORD", "")
    twinfield_organisation: str = os.getenv("TWINFIELD_ORGANISATION", "")
    twinfield_login_url: str = os.getenv(
        "TWINFIELD_LOGIN_URL", "https://login.twinfield.com"
    )
    twinfield_timeout_seconds: float = float(
        os.getenv("TWINFIELD_TIMEOUT_SECONDS", "30")
    )
    twinfield_chunk_size: int = int(os.getenv("TWINFIELD_CHUNK_SIZE", "20"))
    json_logging: bool = os.getenv("TWINFIELD_JSON_LOGGING", "").lower() in (
        "1",
        "true",
        "yes",
    )


settings = Settings()
