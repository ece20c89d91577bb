from app.core.config import Settings, parse_cors_origins


def test_parse_cors_origins_csv():
    value = "http://localhost:5173, http://localhost:3000"
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "http://localhost:3000",
    ]


def test_parse_cors_origins_json_list():
    value = '["http://localhost:5173", "https://wallet.example.com"]'
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "https://wallet.example.com",
    ]


def test_parse_cors_origins_deduplicates():
    value = "http://localhost:5173,http://localhost:5173"
    assert parse_cors_origins(value) == ["http://localhost:5173"]


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("TRANSACT_RATE_LIMIT", "5/second")
    monkeypatch.setenv("API_V1_PREFIX", "/api")
    settings = Settings()
    assert settings.transact_rate_limit == "5/second"
    assert settings.api_v1_prefix == "/api"
