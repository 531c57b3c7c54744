"""Reconciling device deletion across Intune and Entra ID."""

__version__ = "0.1.0"
