"""Tests for ldaplogin."""
