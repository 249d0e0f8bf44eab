import os
import tempfile


class Config:
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY") or "listly_dev_key"
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///listly.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Remote scrape API; the local fetcher is used when unset
    SCRAPER_API_URL = os.environ.get("SCRAPER_API_URL")
    SCRAPER_API_KEY = os.environ.get("SCRAPER_API_KEY")
    SCRAPER_TIMEOUT = int(os.environ.get("SCRAPER_TIMEOUT", "15"))
    SCRAPER_USER_AGENT = os.environ.get(
        "SCRAPER_USER_AGENT", "Mozilla/5.0 (compatible; Listly/1.0)"
    )

    EXPORT_DIR = os.environ.get("EXPORT_DIR") or os.path.join(os.getcwd(), 'data', 'exports')
    EXPORT_RETENTION_HOURS = int(os.environ.get("EXPORT_RETENTION_HOURS", "24"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "testing"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SCRAPER_API_URL = None
    SCRAPER_API_KEY = None
    EXPORT_DIR = os.path.join(tempfile.gettempdir(), 'listly-test-exports')
