from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str
    run_migrations: bool = True

    secret_key: str
    access_token_expire_minutes: int = 10080
    allow_registration: bool = True

    rate_limit_enabled: bool = True
    auth_rate_limit: str = "20/minute"

    log_level: str = "ERROR"

    # Seconds; applies to the notes client transport
    client_timeout: float = 30.0

    cors_origins: str = "http://localhost,http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
