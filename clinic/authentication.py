"""
Token authentication for the clinic API.

DRF's ``TokenAuthentication`` already refuses tokens that belong to
inactive users, which is how suspended staff accounts are locked out
of every endpoint.  The subclass gives settings a stable import path.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """Legacy ``Authorization: Token <key>`` authentication."""

    keyword = 'Token'
