"""
Entrypoint for the Celery worker and beat:

    celery -A celery_worker.celery worker --loglevel=info
    celery -A celery_worker.celery beat --loglevel=info
"""
import os

from salat_engine import create_app
from salat_engine.celery_utils import init_celery
from salat_engine import tasks  # noqa: F401  registers the tasks

app = create_app(os.environ.get('FLASK_CONFIG') or 'default')
celery = init_celery(app)
