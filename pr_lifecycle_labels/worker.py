"""
The Celery application for workers:

  $ celery --app=pr_lifecycle_labels.worker worker

Celery can't be given a factory function as its application, so this module
builds one at import time.
"""

from pr_lifecycle_labels import create_celery_app

application = create_celery_app(config="worker")
