import logging

from kiosk.core.config import Settings
from kiosk.core.logging import _parse_headers, configure_logging, init_tracer


def test_parse_headers_skips_malformed_items():
    assert _parse_headers("a=1, b = 2,broken,,=x") == {"a": "1", "b": "2"}
    assert _parse_headers(None) == {}


def test_configure_logging_applies_level():
    logger = configure_logging(Settings(log_level="debug"))

    assert logger.name == "kiosk"
    assert logger.level == logging.DEBUG


def test_tracer_is_disabled_by_default():
    assert init_tracer(Settings()) is None


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("KIOSK_QR_IMAGE_FORMAT", "png")
    monkeypatch.setenv("KIOSK_UPLOAD_DIR", "/srv/uploads")

    settings = Settings()

    assert settings.qr_image_format == "png"
    assert settings.upload_dir == "/srv/uploads"
    assert set(Settings.model_fields) == {
        "app_name",
        "log_level",
        "log_format",
        "database_dsn",
        "upload_dir",
        "upload_url_prefix",
        "public_base_url",
        "qr_image_format",
        "otel_enabled",
        "otel_service_name",
        "otel_exporter_otlp_endpoint",
        "otel_exporter_otlp_headers",
    }
