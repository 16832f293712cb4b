"""Data models for ldaplogin."""
