"""Appointment booking service for Prima Cure Medical Center."""

__version__ = "1.0.0"
