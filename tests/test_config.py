from calshare.config import load_config


def test_defaults(monkeypatch):
    for name in (
        "FEED_PRODUCT_ID",
        "FEED_UID_DOMAIN",
        "FEED_INCLUDE_CALENDAR_NAME",
        "FEED_HTTP_MAX_AGE",
        "FEED_CACHE_TTL_SECONDS",
        "FEED_CACHE_MAX_ENTRIES",
        "PUBLIC_BASE_URL",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    config = load_config()
    assert config.feed.product_id == "-//Company Calendar Platform//Calendar Feed//EN"
    assert config.feed.uid_domain == "company-calendar-platform.com"
    assert config.feed.include_calendar_name is True
    assert config.feed.http_max_age == 900
    assert config.cache.ttl_seconds is None
    assert config.cache.max_entries is None
    assert config.public_base_url == "http://localhost:5003"
    assert config.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FEED_UID_DOMAIN", "example.org")
    monkeypatch.setenv("FEED_INCLUDE_CALENDAR_NAME", "false")
    monkeypatch.setenv("FEED_HTTP_MAX_AGE", "60")
    monkeypatch.setenv("FEED_CACHE_TTL_SECONDS", "300")
    monkeypatch.setenv("FEED_CACHE_MAX_ENTRIES", "50")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://cal.example.org/")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = load_config()
    assert config.feed.uid_domain == "example.org"
    assert config.feed.include_calendar_name is False
    assert config.feed.http_max_age == 60
    assert config.cache.ttl_seconds == 300
    assert config.cache.max_entries == 50
    assert config.public_base_url == "https://cal.example.org"
    assert config.log_level == "DEBUG"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("FEED_HTTP_MAX_AGE", "soon")
    monkeypatch.setenv("FEED_CACHE_TTL_SECONDS", "-5")
    monkeypatch.setenv("FEED_CACHE_MAX_ENTRIES", "0")

    config = load_config()
    assert config.feed.http_max_age == 900
    assert config.cache.ttl_seconds is None
    assert config.cache.max_entries is None
