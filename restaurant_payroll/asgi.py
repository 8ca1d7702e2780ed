"""Process entry point: ``uvicorn restaurant_payroll.asgi:app``."""
import logging
import os

from restaurant_payroll.main import create_app

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

app = create_app()
