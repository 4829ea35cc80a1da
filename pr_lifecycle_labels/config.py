"""
Flask app configurations, chosen by name with PR_LIFECYCLE_LABELS_CONFIG.

Celery's settings live under the "CELERY" key, in Celery's own lowercase
names, and are handed to the Celery app by `create_celery_app`.
"""

import os

# Heroku-style Redis add-ons set one of these.
REDIS_URL = os.environ.get("REDIS_TLS_URL") or os.environ.get("REDIS_URL") or "redis://"


def redis_url(url):
    """Hosted Redis over TLS uses self-signed certificates."""
    if url.startswith("rediss:") and "ssl_cert_reqs" not in url:
        url += "?ssl_cert_reqs=none"
    return url


class DefaultConfig:
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "secrettoeveryone")
    GITHUB_WEBHOOKS_SECRET = os.environ.get("GITHUB_WEBHOOKS_SECRET")
    # Modules with tasks, for workers to import.
    CELERY_IMPORTS: tuple = ()

    def __init__(self):
        self.CELERY = {
            "broker_url": redis_url(REDIS_URL),
            "result_backend": redis_url(REDIS_URL),
            "accept_content": ["json"],
            "task_serializer": "json",
            "result_serializer": "json",
            "task_eager_propagates": True,
            "imports": self.CELERY_IMPORTS,
        }


class WorkerConfig(DefaultConfig):
    CELERY_IMPORTS = ("pr_lifecycle_labels.tasks.github",)


class DevelopmentConfig(DefaultConfig):
    DEBUG = True


class TestingConfig(DefaultConfig):
    TESTING = True
    GITHUB_WEBHOOKS_SECRET = "webhook-test-secret"
