"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Production entry point, e.g. `gunicorn -k eventlet -w 1 wsgi:app`.
"""

import logging

from app import create_app
from config import Config

logging.basicConfig(level=Config.LOG_LEVEL)
app = create_app()
