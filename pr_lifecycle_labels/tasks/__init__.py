"""
Celery tasks, their logger, and views to check on them.
"""

from celery.utils.log import get_task_logger
from flask import Blueprint, jsonify

from pr_lifecycle_labels import celery, log_level
from pr_lifecycle_labels.utils import requires_auth

logger = get_task_logger(__name__)
logger.setLevel(log_level)

tasks = Blueprint('tasks', __name__)


def _task_info(task_id, show=lambda value: value):
    result = celery.AsyncResult(task_id)
    return jsonify({"status": show(result.state), "info": show(result.info)})


@tasks.route('/status/<task_id>')
@requires_auth
def status(task_id):
    """The state of a queued task, and its result (a RunResult) once done."""
    return _task_info(task_id)


@tasks.route('/statusrepr/<task_id>')
@requires_auth
def statusrepr(task_id):
    """Like /status, with repr() of everything, for results JSON can't show."""
    return _task_info(task_id, show=repr)
