"""
Changelog → GitBook Sync

Webhook-driven pipeline that keeps changelog pages in a GitBook space
in step with the CHANGELOG of a GitHub repository.
"""

__version__ = "1.0.0"
__author__ = "Adesh Srivastava"
