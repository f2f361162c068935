from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Appointment Booking Backend"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 3000
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Requests larger than this are dropped, not parsed
    MAX_BODY_BYTES: int = 1_000_000

    # Static site
    STATIC_DIR: str = "public"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
