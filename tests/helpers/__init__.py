"""Test helpers for the snippet runtime test suite."""
