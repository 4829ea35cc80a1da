"""
Command-line entry points, for running as a GitHub Actions step.

Actions gives us the event name and the path to the event payload in the
environment, and the action inputs as INPUT_* variables (see settings.py).
"""

import json

import click

from pr_lifecycle_labels import create_app
from pr_lifecycle_labels.github_api import GitHubRepo
from pr_lifecycle_labels.tasks.github import run_event
from pr_lifecycle_labels.tasks.github_work import synchronize_labels
from pr_lifecycle_labels.utils import RequestFailed


def fail(message):
    """Report a failure the way Actions shows it, and exit non-zero."""
    click.echo(f"::error::Action failed: {message}")
    raise SystemExit(1)


@click.group()
def cli():
    pass


@cli.command()
@click.option("--event-name", envvar="GITHUB_EVENT_NAME", required=True, help="The GitHub event name.")
@click.option(
    "--event-path", envvar="GITHUB_EVENT_PATH",
    type=click.Path(exists=True, dir_okay=False),
    help="A file with the JSON event payload.",
)
@click.option("--dry-run", is_flag=True, help="Show the changes without making them.")
def run(event_name, event_path, dry_run):
    """
    Handle one GitHub event.
    """
    payload = {}
    if event_path:
        try:
            with open(event_path) as f:
                payload = json.load(f)
        except (OSError, ValueError) as exc:
            fail(f"Couldn't read event payload {event_path}: {exc}")

    # Comments are rendered with Flask templates.
    with create_app().app_context():
        result = run_event(event_name, payload, dry_run=dry_run)

    if dry_run:
        click.echo(json.dumps(result.dry_run_actions, indent=2))
    for effect, error in result.failures:
        click.echo(f"::warning::Couldn't {effect}: {error}")
    if not result.ok:
        fail(result.error)


@cli.command("sync-labels")
@click.option("--repo", envvar="GITHUB_REPOSITORY", required=True, help="The owner/repo to update.")
@click.option("--dry-run", is_flag=True, help="Show the changes without making them.")
def sync_labels(repo, dry_run):
    """
    Create or update every label the bot manages.
    """
    try:
        changes = synchronize_labels(GitHubRepo(repo), dry_run=dry_run)
    except RequestFailed as exc:
        fail(exc)
    click.echo(json.dumps(changes, indent=2))


if __name__ == "__main__":
    cli()
