"""Admin registrations for the accounts app (back-office only)."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Account


@admin.register(Account)
class AccountAdmin(DjangoUserAdmin):
    list_display = ("id", "email", "first_name", "last_name", "github_id", "is_staff", "date_joined")
    search_fields = ("email", "first_name", "last_name", "github_id")
    fieldsets = DjangoUserAdmin.fieldsets + (("Linked identities", {"fields": ("github_id", "current_user")}),)
    raw_id_fields = ("current_user",)
