"""
BullyWatch - Services Package
=============================

Temporal analysis engine and its maintenance scheduler.
"""
