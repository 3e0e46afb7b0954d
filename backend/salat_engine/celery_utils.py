"""
Celery application for the cache maintenance tasks, bound to the Flask app
so every task sees the same configured prayer engine.
"""
from celery import Celery
from celery.schedules import crontab

# The broker and backend are loaded from the Flask app config later.
celery = Celery(__name__)


def init_celery(app):
    """
    Configures the Celery instance from the Flask app and wraps its tasks in
    the app context. Also schedules the daily prayer cache cleanup for beat.

    Args:
        app (Flask): The configured Flask application instance.

    Returns:
        Celery: The configured Celery instance.
    """
    celery.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        task_always_eager=app.config.get('TESTING', False),
        beat_schedule={
            'cleanup-prayer-cache-daily': {
                'task': 'tasks.cleanup_prayer_cache',
                'schedule': crontab(hour=app.config.get('PRAYER_CACHE_CLEANUP_HOUR', 3), minute=0),
            },
        },
    )

    class ContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery
