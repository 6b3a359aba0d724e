"""Committer identity checks."""

from __future__ import annotations


def check_name(expected_name: str, committer_name: str) -> bool:
    return expected_name == committer_name


def check_email(expected_email: str, committer_email: str) -> bool:
    return expected_email == committer_email
