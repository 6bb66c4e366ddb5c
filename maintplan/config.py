import os
from pathlib import Path


class BaseConfig:
    SECRET_KEY = os.environ.get("MAINTPLAN_SECRET", "change-me")
    BASE_DIR = Path(__file__).resolve().parent
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "MAINTPLAN_DATABASE_URI", f"sqlite:///{BASE_DIR.parent / 'maintplan.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PLAN_ANCHOR_DAY = int(os.environ.get("MAINTPLAN_ANCHOR_DAY", 15))
    PLAN_MIN_YEAR = int(os.environ.get("MAINTPLAN_MIN_YEAR", 2000))
    PLAN_MAX_YEAR = int(os.environ.get("MAINTPLAN_MAX_YEAR", 2100))


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
