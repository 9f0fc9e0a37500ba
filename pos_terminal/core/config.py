"""Application configuration."""

from decimal import Decimal
from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the terminal engine."""

    app_name: str = "pos_terminal API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./pos_terminal.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "720"))
    terminal_device_id: str = getenv("TERMINAL_DEVICE_ID", "LOCAL-TERMINAL")
    admin_user: str = getenv("ADMIN_USER", "admin")
    admin_pass: str = getenv("ADMIN_PASS", "")
    server_base_url: str = getenv("SERVER_BASE_URL", "")
    server_device_token: str = getenv("SERVER_DEVICE_TOKEN", "")
    print_service_url: str = getenv("PRINT_SERVICE_URL", "")
    http_timeout_seconds: float = float(getenv("HTTP_TIMEOUT_SECONDS", "15"))
    currency: str = getenv("CURRENCY", "KWD")
    order_number_prefix: str = getenv("ORDER_NUMBER_PREFIX", "POS")
    order_number_style: str = getenv("ORDER_NUMBER_STYLE", "short")
    money_quantum: Decimal = Decimal("0.001")


settings: Settings = Settings()
