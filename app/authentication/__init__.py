"""
Authentication application.

Provides the custom email-based User model whose id, display name and
avatar the chat app reads. Requests are authenticated with simplejwt
bearer tokens (see REST_FRAMEWORK in config/settings.py).

Usage:
    from authentication.models import User
"""
