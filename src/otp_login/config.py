"""OTP Login — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── OTP ───────────────────────────────────────────────
    otp_length: int = 6
    otp_alphabet: str = "0123456789"
    otp_ttl_seconds: int = 300
    otp_sweep_interval_seconds: int = 60

    # ── Sessions ──────────────────────────────────────────
    session_cookie_name: str = "otp_session"

    # ── SMTP (empty host → codes are logged, not sent) ────
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = True
    email_from: str = "no-reply@example.com"

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Login"
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
