from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url


class Settings(BaseSettings):
    # MySQL server; the database itself is created on startup if missing
    mysql_host: str = "mysql"
    mysql_port: int = 3306
    mysql_root_user: str = "root"
    mysql_root_password: str = ""
    mysql_database: str = "demo"

    # Full SQLAlchemy DSN override, e.g. sqlite+aiosqlite:///./demo.db
    database_dsn: str | None = None
    db_echo: bool = False

    host: str = "0.0.0.0"
    port: int = 8005

    readiness_delay_ms: int = 4000
    api_busy_iterations: int = 10_000

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def creates_database(self) -> bool:
        return self.database_dsn is None

    def server_url(self) -> URL:
        return URL.create(
            "mysql+aiomysql",
            username=self.mysql_root_user,
            password=self.mysql_root_password or None,
            host=self.mysql_host,
            port=self.mysql_port,
        )

    def database_url(self) -> URL:
        if self.database_dsn:
            return make_url(self.database_dsn)
        return self.server_url().set(database=self.mysql_database)


settings = Settings()
