import os

class BaseConfig:
    # Secrets (env in prod; dev/test may use defaults)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-not-secure")

    # Database (env in prod; dev/test may use default)
    try:
        from dotenv import dotenv_values
        _ENV_FALLBACK = dotenv_values(".env")
    except Exception:
        _ENV_FALLBACK = {}
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or _ENV_FALLBACK.get("DATABASE_URL") or "sqlite:///feedback.db"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Key-value backend: "sql" (kv_store table) or "memory" (process-local dict)
    KV_BACKEND = os.environ.get("KV_BACKEND", "sql").lower()

    # All API routes hang off this prefix
    API_PREFIX = os.environ.get("API_PREFIX", "/api")

    # CORS: open by default; comma-separated list to narrow
    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Read-side knobs
    COMMUNITY_DEFAULT_LIMIT = int(os.environ.get("COMMUNITY_DEFAULT_LIMIT", "20"))
    COMMUNITY_MAX_LIMIT = int(os.environ.get("COMMUNITY_MAX_LIMIT", "100"))
    RECENT_FEEDBACK_LIMIT = int(os.environ.get("RECENT_FEEDBACK_LIMIT", "10"))

    # Flask-Limiter: default off globally; per-route limits for write endpoints
    RATELIMIT_DEFAULT = None
    FEEDBACK_RATE_LIMIT = os.environ.get("FEEDBACK_RATE_LIMIT", "30 per minute")
    MESSAGE_RATE_LIMIT = os.environ.get("MESSAGE_RATE_LIMIT", "60 per minute")

    # Logging / misc
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Demo seed pack for `flask feedback seed-demo`
    DEMO_SEED_FILE = os.environ.get("DEMO_SEED_FILE", "data/demo_feedback.csv")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")

class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
    # Required in production; create_app() fails fast if either is missing
    SECRET_KEY = os.environ.get("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")

class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    RATELIMIT_ENABLED = False

_ENV_MAP = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}

def get_config():
    env = os.environ.get("APP_ENV", "development").lower()
    return _ENV_MAP.get(env, DevelopmentConfig)
