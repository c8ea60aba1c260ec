"""
Generation Server
=================

HTTP surface for the self-healing contract generator: session start,
server-sent progress feed, one-shot generation and code lookup.
"""

from .app import create_app, main
from .sessions import SessionRecord, SessionRegistry

__all__ = ["create_app", "main", "SessionRecord", "SessionRegistry"]
