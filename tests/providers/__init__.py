"""Tests for login providers."""
