import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

MANUAL_REGISTRATION = "manual-registration"


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


@dataclass(frozen=True)
class Settings:
    # Supabase
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    # Google OAuth
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_url: Optional[str] = None

    frontend_url: str = "http://localhost:5173"

    # Email
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_email: Optional[str] = None
    smtp_password: Optional[str] = None
    sender_name: str = "Tech Event Team"

    # Event
    event_id: str = "tech2025"
    event_name: str = "Tech 2025"
    event_title: str = "Tech Event 2025"
    event_description: str = "Explore new technologies, network with peers, and gain insights."

    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        if load_env_file:
            load_dotenv()
        return cls(
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_KEY"),
            client_id=os.getenv("CLIENT_ID"),
            client_secret=os.getenv("CLIENT_SECRET"),
            redirect_url=os.getenv("REDIRECT_URL"),
            frontend_url=(os.getenv("FRONTEND_URL") or cls.frontend_url).rstrip("/"),
            smtp_server=os.getenv("SMTP_SERVER", cls.smtp_server),
            smtp_port=int(os.getenv("SMTP_PORT") or cls.smtp_port),
            smtp_email=os.getenv("EMAIL_USER"),
            smtp_password=os.getenv("EMAIL_PASS"),
            sender_name=os.getenv("SENDER_NAME", cls.sender_name),
            event_id=os.getenv("EVENT_ID", cls.event_id),
            event_name=os.getenv("EVENT_NAME", cls.event_name),
            event_title=os.getenv("EVENT_TITLE", cls.event_title),
            event_description=os.getenv("EVENT_DESCRIPTION", cls.event_description),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )
