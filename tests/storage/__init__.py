"""Tests for storage layers."""
