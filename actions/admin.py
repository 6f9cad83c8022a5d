from django.contrib import admin

from .models import Action, ActionLog, ActionStep


class ActionStepInline(admin.TabularInline):
    model = ActionStep
    extra = 0
    readonly_fields = ("name", "message", "status", "created_at", "completed_at")


@admin.register(Action)
class ActionAdmin(admin.ModelAdmin):
    list_display = ("id", "workspace", "resource", "user", "created_at")
    inlines = [ActionStepInline]


@admin.register(ActionLog)
class ActionLogAdmin(admin.ModelAdmin):
    list_display = ("id", "step", "level", "message", "created_at")
    list_filter = ("level",)
