from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "CampusConnect Scheduling"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 8000
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    ERROR_LOG_PATH: str = "logs/errors.log"

    # Security
    # Empty key disables the write-endpoint token check (local development)
    SECRET_KEY: str = ""

    # Campus
    CAMPUS_TIMEZONE: str = "Asia/Kolkata"
    CAMPUS_CONFIG_PATH: str = "data/campus_config.json"
    PUBLIC_BASE_URL: str = "http://localhost:9002"

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
