"""Wallet session single sign-on for registered dApps."""

__version__ = "0.1.0"
