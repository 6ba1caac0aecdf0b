# marketpay/celery_worker.py
from celery import Celery
import os

BROKER = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")

celery_app = Celery(
    "marketpay",
    broker=BROKER,
    backend=RESULT_BACKEND,
)

# taski trzeba zaimportowac jawnie zeby worker je zarejestrowal
celery_app.conf.imports = (
    "marketpay.services.notification_service",
)

celery_app.conf.task_always_eager = os.getenv("CELERY_TASK_ALWAYS_EAGER", "0") in ("1", "true")
celery_app.conf.task_serializer = "json"
celery_app.conf.timezone = "UTC"
