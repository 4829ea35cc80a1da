"""Tests of labels.py"""

import re

import pytest

from pr_lifecycle_labels.labels import (
    CONTENT_LABELS,
    DEPLOYMENT_STATUS_LABELS,
    FEATURE_ROLE_LABELS,
    FIX_URGENCY_LABELS,
    MERGE_HEALTH_LABELS,
    REVIEW_STATUS_LABELS,
    TRANSITION_LABELS,
    Label,
    Transition,
    project_labels,
)


def test_every_label_has_a_color_and_description():
    for label in Label:
        assert re.fullmatch(r"[0-9a-f]{6}", label.color), label
        assert label.description


def test_label_names_are_distinct():
    assert len({label.value for label in Label}) == len(Label) == 22


def test_every_label_is_on_an_axis():
    axes = (
        REVIEW_STATUS_LABELS | DEPLOYMENT_STATUS_LABELS | MERGE_HEALTH_LABELS
        | FEATURE_ROLE_LABELS | FIX_URGENCY_LABELS | CONTENT_LABELS
    )
    assert axes == set(Label)


def test_from_name():
    assert Label.from_name("Status: Draft") is Label.DRAFT
    assert Label.from_name("bug") is None
    assert str(Label.MERGED) == "Status: Merged"


def test_every_transition_has_labels():
    assert set(TRANSITION_LABELS) == set(Transition)


@pytest.mark.parametrize("transition", list(Transition))
def test_transitions_dont_contradict_themselves(transition):
    delta = TRANSITION_LABELS[transition]
    assert not set(delta.present) & set(delta.absent)


def test_approval_flow():
    labels = project_labels(set(), Transition.OPENED_FOR_REVIEW)
    assert labels == {Label.READY_FOR_REVIEW}
    labels = project_labels(labels, Transition.REVIEW_COMMENTED)
    assert labels == {Label.READY_FOR_REVIEW, Label.IN_PROGRESS}
    labels = project_labels(labels, Transition.APPROVED)
    assert labels == {Label.APPROVED, Label.READY_FOR_STAGING}


def test_new_commits_after_deployment_start_over():
    labels = {Label.APPROVED, Label.DEPLOYED_STAGING, Label.DEPLOYED_PRODUCTION, Label.SECURITY}
    labels = project_labels(labels, Transition.NEW_COMMITS_AFTER_APPROVAL)
    assert labels == {Label.READY_FOR_REVIEW, Label.SECURITY}


def test_changes_requested():
    labels = {Label.READY_FOR_REVIEW, Label.IN_PROGRESS, Label.APPROVED, Label.READY_FOR_STAGING}
    assert project_labels(labels, Transition.CHANGES_REQUESTED) == {Label.REQUEST_CHANGES}


def test_deployments():
    labels = {Label.MERGED, Label.READY_FOR_STAGING}
    labels = project_labels(labels, Transition.DEPLOYED_TO_STAGING)
    assert labels == {Label.MERGED, Label.DEPLOYED_STAGING}
    labels = project_labels(labels, Transition.DEPLOYED_TO_PRODUCTION)
    assert labels == {Label.MERGED, Label.DEPLOYED_PRODUCTION}


def test_merged_keeps_everything_else():
    labels = {Label.APPROVED, Label.DEPLOYED_STAGING, Label.FIX_BUG}
    assert project_labels(labels, Transition.MERGED) == labels | {Label.MERGED}


@pytest.mark.parametrize("transition", [Transition.APPROVED, Transition.MERGED, Transition.CONFLICTED])
def test_projection_is_idempotent(transition):
    once = project_labels({Label.DRAFT, Label.URGENT}, transition)
    assert project_labels(once, transition) == once
