"""
Do Not Contact - automate opt-out requests to nonprofit organizations.

Finds a contact channel (email or web form) for each organization on a list,
tracks progress in a local SQLite database and sends one opt-out email per
organization.
"""

__version__ = "0.1.0"
