"""Support code for ldaplogin tests."""
