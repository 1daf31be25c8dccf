"""
PATH: users/auth_backends.py

AUTH BACKEND: email OR username login

- identifier containing "@" is looked up by email, anything else by username
- explicit email= and username= together are rejected
- inactive users never authenticate
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import BaseBackend


class EmailOrUsernameBackend(BaseBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        User = get_user_model()

        email_kw = (kwargs.get("email") or "").strip()
        identifier = (username or "").strip()

        if email_kw and identifier:
            return None

        identifier = identifier or email_kw
        if not identifier or password is None:
            return None

        lookup = {"email__iexact": identifier} if "@" in identifier else {"username__iexact": identifier}

        user = User.objects.filter(**lookup).first()
        if user is None or not user.is_active:
            return None

        return user if user.check_password(password) else None

    def get_user(self, user_id):
        User = get_user_model()
        return User.objects.filter(pk=user_id).first()
