from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import ensure_indexes

from .container import Container, build_container
from .billing.controller import register as register_billing
from .clients.controller import register as register_clients
from .gst.controller import register as register_gst
from .notifications.controller import register as register_notifications

logger = logging.getLogger(__name__)


def register_all(app: Flask, container: Container) -> None:
    register_gst(app, container)
    register_billing(app, container)
    register_clients(app, container)
    register_notifications(app, container)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    mongo_config = getattr(settings, "MONGO_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("settings=%s db=%s", settings_module, mongo_config.get("database"))

    container = build_container(mongo_config=mongo_config)

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        ensure_indexes(container.conn.db)

    register_all(app, container)
    return app
