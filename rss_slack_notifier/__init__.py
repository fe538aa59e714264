"""
RSS Slack Notifier - Relay new RSS items to a Slack webhook.

A Python application that polls RSS/Atom feeds, skips items that were
already delivered in a previous run, and posts the rest to a Slack
incoming webhook with a per-run delivery cap.
"""

__version__ = "1.0.0"
