"""Support Desk - support chat with escalation to human operators."""

__version__ = "1.0.0"
