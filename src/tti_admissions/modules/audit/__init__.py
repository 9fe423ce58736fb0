"""
Audit Module

Append-only log of admission workflow actions.
"""
