from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./restaurant.db"
    sql_echo: bool = False
    log_level: str = "INFO"

    # Lifetime of a login session token.
    session_ttl_minutes: int = 60

    # Comma-separated list, e.g. https://menu.example.com,http://localhost:3000.
    # Empty means all origins are allowed (development).
    cors_origins: str = ""

    # Fill the dish table from data/menu.py on startup when it is empty.
    seed_menu: bool = True

    # First manager account, created on startup if absent. Staff roles can only
    # be assigned by a manager. Empty email or password skips the bootstrap.
    manager_username: str = "manager"
    manager_email: str = ""
    manager_password: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
