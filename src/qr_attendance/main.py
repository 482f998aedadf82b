from __future__ import annotations

import importlib
import logging
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .attendance.controller import register as register_attendance
from .attendance.issuer import IssuerConfig
from .common.clock import Clock
from .common.logging_config import configure_logging
from .config import get_settings_module
from .container import build_container
from .core.enums import StoreBackend
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)

_SETTING_KEYS = (
    "SECRET_KEY",
    "DEBUG",
    "TESTING",
    "LOG_LEVEL",
    "DB_CONFIG",
    "STORE_BACKEND",
    "ATTENDANCE_WINDOW_MINUTES",
    "TOKEN_BYTES",
    "AUTO_INIT_DB",
    "TRUSTED_PROXIES",
    "DEMO_LESSONS",
)


def load_settings(overrides: Optional[Mapping[str, Any]] = None) -> dict:
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    values = {key: getattr(settings, key) for key in _SETTING_KEYS if hasattr(settings, key)}
    values["SETTINGS_MODULE"] = settings_module
    values.update(overrides or {})
    return values


def create_app(overrides: Optional[Mapping[str, Any]] = None, *, clock: Optional[Clock] = None) -> Flask:
    load_dotenv(override=False)
    settings = load_settings(overrides)

    configure_logging(settings.get("LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings.get("DEBUG", False))
    app.config["TESTING"] = bool(settings.get("TESTING", False))

    trusted_proxies = int(settings.get("TRUSTED_PROXIES", 0))
    if trusted_proxies > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=trusted_proxies)

    db_config = dict(settings.get("DB_CONFIG", {}))
    backend = StoreBackend(settings.get("STORE_BACKEND", StoreBackend.MYSQL.value))
    logger.info("settings=%s backend=%s", settings["SETTINGS_MODULE"], backend.value)

    if backend == StoreBackend.MYSQL and settings.get("AUTO_INIT_DB"):
        apply_schema(db_config)
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))

    issuer_config = IssuerConfig.from_settings(
        window_minutes=settings.get("ATTENDANCE_WINDOW_MINUTES", 15),
        token_bytes=settings.get("TOKEN_BYTES", 16),
    )
    container = build_container(
        db_config=db_config,
        store_backend=backend,
        issuer_config=issuer_config,
        clock=clock,
        demo_lessons=settings.get("DEMO_LESSONS", ()),
    )
    app.extensions["qr_attendance"] = container

    register_attendance(app, container)

    return app
