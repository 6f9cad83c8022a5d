from django.contrib import admin

from .models import ApiToken


@admin.register(ApiToken)
class ApiTokenAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "user", "preview_chars", "last_access_at", "created_at")
    readonly_fields = ("token_hash", "preview_chars", "last_access_at")
