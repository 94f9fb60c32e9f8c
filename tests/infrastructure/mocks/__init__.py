"""Test doubles for time and scheduling."""
