import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv
load_dotenv()

logger = logging.getLogger("learnhub")


class Settings(BaseSettings):
    """
    Runtime configuration, read from the environment or a .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str = "sqlite:///./learnhub.db"

    JWT_SECRET_KEY: str = "your-secret-key-here-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    COOKIE_SECURE: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_CONSOLE: bool = False

    CORS_ORIGINS: list[str] = ["*"]
    SEED_ACHIEVEMENTS_ON_STARTUP: bool = True


settings = Settings()


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across FastAPI's threadpool.
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


def enable_sqlite_savepoints(engine: Engine) -> Engine:
    """
    Let SQLAlchemy own transaction boundaries on pysqlite.
    Without this the driver defers BEGIN until the first DML statement, so a
    SAVEPOINT issued first would open (and its RELEASE would commit) the
    outer transaction. BEGIN IMMEDIATE takes the write lock up front, standing
    in for SELECT ... FOR UPDATE, which SQLite ignores.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args(settings.DATABASE_URL))
if engine.dialect.name == "sqlite":
    enable_sqlite_savepoints(engine)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def reset_db():
    Base.metadata.drop_all(bind=engine)
    logger.info("Database dropped")
    create_db()

def create_db():
    # Registers every table on Base.metadata before create_all.
    import learnhub.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database created url=%s", engine.url.render_as_string(hide_password=True))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
