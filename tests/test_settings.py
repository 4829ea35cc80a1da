"""Tests of settings.py"""

import logging

from pr_lifecycle_labels.settings import read_input, read_int_input


def test_action_input_wins(monkeypatch):
    monkeypatch.setenv("INPUT_STAGINGBRANCH", "qa")
    monkeypatch.setenv("STAGING_BRANCH", "stage")
    assert read_input("stagingBranch", "STAGING_BRANCH", "staging") == "qa"


def test_environment_then_default(monkeypatch):
    monkeypatch.delenv("INPUT_STAGINGBRANCH", raising=False)
    monkeypatch.setenv("STAGING_BRANCH", "stage")
    assert read_input("stagingBranch", "STAGING_BRANCH", "staging") == "stage"
    monkeypatch.setenv("STAGING_BRANCH", "")
    assert read_input("stagingBranch", "STAGING_BRANCH", "staging") == "staging"


def test_int_input(monkeypatch):
    monkeypatch.delenv("ABANDONED_TIMEOUT", raising=False)
    monkeypatch.setenv("INPUT_ABANDONEDTIMEOUT", "14")
    assert read_int_input("abandonedTimeout", "ABANDONED_TIMEOUT", 30) == 14
    monkeypatch.delenv("INPUT_ABANDONEDTIMEOUT")
    assert read_int_input("abandonedTimeout", "ABANDONED_TIMEOUT", 30) == 30


def test_bad_int_input_uses_default(monkeypatch, caplog):
    monkeypatch.setenv("INPUT_ABANDONEDTIMEOUT", "thirty")
    with caplog.at_level(logging.WARNING, logger="pr_lifecycle_labels"):
        assert read_int_input("abandonedTimeout", "ABANDONED_TIMEOUT", 30) == 30
    assert "abandonedTimeout should be a whole number, not 'thirty'" in caplog.text
