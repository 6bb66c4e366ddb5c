from __future__ import annotations

from typing import Optional

from flask import Flask

from .config import BaseConfig
from .extensions import db, login_manager


def create_app(config_class: Optional[type] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_object(config_class or BaseConfig)

    db.init_app(app)
    login_manager.init_app(app)

    from . import models  # noqa: F401 - register tables before create_all

    with app.app_context():
        db.create_all()
        ensure_seed_data()

    register_blueprints(app)
    register_cli(app)

    return app


def register_blueprints(app: Flask) -> None:
    from .auth.routes import bp as auth_bp
    from .plans.routes import bp as plans_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(plans_bp)


def register_cli(app: Flask) -> None:
    from .utils.seed import register_seed_commands

    register_seed_commands(app)


def ensure_seed_data() -> None:
    from .utils.seed import ensure_base_data

    ensure_base_data()
