from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Backend queries bypass RLS with this key

    # Resend (email)
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "TapIn <onboarding@resend.dev>"

    # Expo push gateway
    expo_push_url: str = "https://exp.host/--/api/v2/push/send"
    outbound_timeout_seconds: float = 10.0

    # App
    app_name: str = "tapin-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:8081,http://localhost:19006,http://127.0.0.1:8081"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "10/minute"
    message_rate_limit: str = "20/minute"

    # Geofencing (metres)
    default_room_radius_m: float = 500.0
    chat_radius_m: float = 100.0  # proximity gate fallback when a room has no radius
    nearby_rooms_radius_m: float = 1000.0
    nearby_users_radius_m: float = 5000.0
    room_search_radius_m: float = 5000.0  # bounding-box prefilter for location sync
    auto_room_spacing_m: float = 1000.0
    room_dedup_distance_m: float = 100.0

    # Lifetimes
    auto_room_ttl_hours: int = 24
    public_room_ttl_hours: int = 24
    tapin_ttl_hours: int = 24

    # Messages
    message_page_size: int = 50
    max_message_length: int = 2000

    # Expired room reaper
    room_cleanup_rpc: str = "cleanup_expired_rooms"
    room_reaper_enabled: bool = False
    room_reaper_interval_seconds: int = 300

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
