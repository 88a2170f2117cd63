from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask
from dotenv import load_dotenv

from config.settings import get_settings
from models import init_db, reset_engine

_ENV_LOADED = False


def _ensure_env_loaded() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return

    base_dir = Path(__file__).resolve().parent.parent
    env_path = base_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        load_dotenv()

    _ENV_LOADED = True


def create_app() -> Flask:
    _ensure_env_loaded()

    # Drop any cached connection so DATABASE_URL from the environment is honoured.
    reset_engine()

    settings = get_settings()
    logging.getLogger("app").setLevel(settings.LOG_LEVEL)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.SECRET_KEY

    init_db()

    from .routes import bp as core_bp

    app.register_blueprint(core_bp)

    return app
