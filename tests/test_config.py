import re
from pathlib import Path

from nbhwc_api.core.config import Settings

PACKAGE = Path(__file__).resolve().parent.parent / "nbhwc_api"

def test_render_postgres_url_is_normalised():
    s = Settings(DATABASE_URL="postgres://u:p@db.example.com/nbhwc")
    assert s.DATABASE_URL == "postgresql+psycopg2://u:p@db.example.com/nbhwc"
    assert Settings(DATABASE_URL="sqlite://").DATABASE_URL == "sqlite://"

def test_cors_origins_from_comma_list():
    s = Settings(CORS_ORIGINS="http://localhost:3000, https://study.example.com,")
    assert s.CORS_ORIGINS == ["http://localhost:3000", "https://study.example.com"]

def test_production_flag():
    assert Settings(ENVIRONMENT="Production").is_production()
    assert not Settings(ENVIRONMENT="testing").is_production()

def test_every_setting_is_read_by_the_app():
    sources = "\n".join(p.read_text(encoding="utf-8") for p in PACKAGE.rglob("*.py") if p.name != "config.py")
    unread = [name for name in Settings.model_fields if not re.search(rf"\b{name}\b", sources)]
    assert unread == []
