"""Shared factories and test doubles for BlockGov tests."""
