from celery import Celery
from app.core.config import settings

# Create Celery app
celery_app = Celery(
    "marketplace_worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.tasks.payouts"]
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=10 * 60,  # 10 minutes
    task_soft_time_limit=8 * 60,  # 8 minutes
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)

# Configure periodic tasks
celery_app.conf.beat_schedule = {
    'reconcile-payouts': {
        'task': 'app.tasks.payouts.reconcile_payouts',
        'schedule': 60.0,  # Run every minute
    },
    'scan-wallet-allowances': {
        'task': 'app.tasks.payouts.scan_wallet_allowances',
        'schedule': 300.0,  # Run every 5 minutes
    },
}

if __name__ == "__main__":
    celery_app.start()
