"""Presence core package.

Feature modules (employees, identity, attendance, reconciliation) each keep a
Protocol port, a concrete adapter and a service; Flask controllers stay thin.
"""
