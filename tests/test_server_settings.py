from poster_backend.poster_cache import MetadataMode, UrlMode
from poster_server.api.settings import Settings


def test_settings_from_env_cors_star(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "*")
    settings = Settings.from_env()

    assert settings.cors_allow_origins() == ["*"]
    assert settings.cors_allow_credentials is False
    assert settings.cors_headers() == {"Access-Control-Allow-Origin": "*"}


def test_settings_from_env_custom_origins(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.com, https://b.com")
    settings = Settings.from_env()

    assert settings.cors_allow_origins() == ["https://a.com", "https://b.com"]
    assert settings.cors_allow_credentials is True
    assert settings.cors_headers() == {}


def test_settings_storj_and_modes(monkeypatch):
    monkeypatch.setenv("STORJ_ENDPOINT", "https://gateway.storjshare.io")
    monkeypatch.setenv("STORJ_BUCKET", "posters")
    monkeypatch.setenv("STORJ_PUBLIC_BASE", "https://link.storjshare.io/raw/x/posters")
    monkeypatch.setenv("POSTER_URL_MODE", "SIGNED")
    monkeypatch.setenv("POSTER_METADATA_MODE", "stored")
    monkeypatch.setenv("SIGNED_URL_EXPIRES_SECONDS", "600")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings.from_env()
    config = settings.gateway_config()

    assert settings.storj_endpoint == "https://gateway.storjshare.io"
    assert settings.api_port == 8080
    assert config.url_mode is UrlMode.SIGNED
    assert config.metadata_mode is MetadataMode.STORED
    assert config.signed_url_ttl_s == 600
    assert config.public_base_url == "https://link.storjshare.io/raw/x/posters"


def test_settings_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("POSTER_URL_MODE", "cdn")
    monkeypatch.setenv("PORT", "not-a-port")
    monkeypatch.setenv("SIGNED_URL_EXPIRES_SECONDS", "-5")

    settings = Settings.from_env()

    assert settings.url_mode is UrlMode.PUBLIC
    assert settings.api_port == 3000
    assert settings.signed_url_ttl_s == 1


def test_settings_key_prefix(monkeypatch):
    monkeypatch.delenv("POSTER_KEY_PREFIX", raising=False)
    assert Settings.from_env().poster_key_prefix == "posters/"

    monkeypatch.setenv("POSTER_KEY_PREFIX", "")
    assert Settings.from_env().poster_key_prefix == ""

    monkeypatch.setenv("POSTER_KEY_PREFIX", "/art/")
    assert Settings.from_env().poster_key_prefix == "art/"

    monkeypatch.setenv("POSTER_KEY_PREFIX", "posters")
    assert Settings.from_env().poster_key_prefix == "posters/"
