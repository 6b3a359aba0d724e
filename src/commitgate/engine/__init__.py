"""Commit validation engine: matching, per-changeset and per-ref validators, result tree."""
