"""
BullyWatch - Utilities Package
==============================
"""
