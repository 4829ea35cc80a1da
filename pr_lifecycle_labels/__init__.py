"""
Keep pull request labels in step with the pull request lifecycle.

The same code runs two ways: as a GitHub Actions step (see cli.py), or as a
Flask webhook receiver with Celery workers (`create_app`, `worker.py`).
"""

import logging
import os
import sys
import traceback

from celery import Celery
from flask import Flask
import sentry_sdk
from sentry_sdk.integrations.celery import CeleryIntegration
from sentry_sdk.integrations.flask import FlaskIntegration
from werkzeug.middleware.proxy_fix import ProxyFix
from werkzeug.utils import import_string

__version__ = "0.3.0"

log_level = os.environ.get("LOGLEVEL", "INFO").upper()
logger = logging.getLogger(__name__)
_handler = logging.StreamHandler(sys.stderr)
_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
logger.addHandler(_handler)
logger.setLevel(log_level)

# Every GitHub call would otherwise log a connection line.
logging.getLogger("urllib3").setLevel(logging.WARNING)

celery = Celery(__name__, strict_typing=False)


def config_class_path(name=None):
    """"worker" -> "pr_lifecycle_labels.config.WorkerConfig"."""
    return f"{__name__}.config.{(name or 'default').capitalize()}Config"


def create_app(config=None):
    """
    Make the Flask app.  `config` names a class in config.py, defaulting
    to $PR_LIFECYCLE_LABELS_CONFIG, then "default".
    """
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app)   # type: ignore[method-assign]
    config = config or os.environ.get("PR_LIFECYCLE_LABELS_CONFIG")
    app.config.from_object(import_string(config_class_path(config))())

    create_celery_app(app)

    from .github_views import github_bp
    app.register_blueprint(github_bp, url_prefix="/github")
    from .tasks import tasks as tasks_blueprint
    app.register_blueprint(tasks_blueprint, url_prefix="/tasks")

    return app


def create_celery_app(app=None, config="worker"):
    """
    Configure the shared Celery app from a Flask app, making one if needed.

    Tasks run inside the Flask app context, because bot comments are
    rendered with Flask templates.
    """
    if os.environ.get("SENTRY_DSN"):
        sentry_sdk.init(integrations=[CeleryIntegration(), FlaskIntegration()])

    app = app or create_app(config=config)
    celery.main = app.import_name
    celery.conf.update(app.config["CELERY"])

    class ContextTask(celery.Task):     # type: ignore[name-defined]
        abstract = True

        def __call__(self, *args, **kwargs):
            with app.app_context():
                try:
                    return self.run(*args, **kwargs)
                except Exception:
                    # Store the traceback as the result, it's more use than
                    # the pickled exception.
                    return traceback.format_exc()

    celery.Task = ContextTask
    return celery
