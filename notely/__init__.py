"""
Notely.

Note-taking client for the Notely REST API: authentication, onboarding and
note CRUD with a local cache that only changes after the server confirms.
"""

__version__ = "1.0.0"
