"""Inspection and administration client for cluster quorum services."""

__version__ = '1.4.0'
