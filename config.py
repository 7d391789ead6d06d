"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Application settings, read from environment variables with development
defaults. Loaded through app.config.from_object(Config).
"""

import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///smartorder.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" (SQLAlchemy database) or "memory" (in-process mock store)
    DATA_STORE = os.environ.get("DATA_STORE", "sql")

    TABLE_COUNT = int(os.environ.get("TABLE_COUNT", "75"))
    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:5013/")
    QR_SERVICE_URL = os.environ.get("QR_SERVICE_URL", "https://api.qrserver.com/v1/create-qr-code/")

    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "eventlet")

    DEFAULT_ADMIN_NAME = os.environ.get("DEFAULT_ADMIN_NAME", "Administrator")
    DEFAULT_ADMIN_EMAIL = os.environ.get("DEFAULT_ADMIN_EMAIL", "admin@smartorder.local")
    DEFAULT_ADMIN_PASSWORD = os.environ.get("DEFAULT_ADMIN_PASSWORD", "password")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
