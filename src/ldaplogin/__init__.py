"""LDAP login provider with directory group mapping."""

from importlib.metadata import version

__all__ = ["__version__"]

__version__: str = version("ldaplogin")
"""The version string of ldaplogin (PEP 440 / SemVer compatible)."""
