"""Django AppConfig for the accounts app.

This app houses the project's custom user model (`accounts.Account`).
"""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
