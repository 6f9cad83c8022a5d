from django.contrib import admin

from .models import Entity, EntityField


class EntityFieldInline(admin.TabularInline):
    model = EntityField
    extra = 0
    fields = ("position", "name", "display_name", "data_type", "required", "unique", "searchable")


@admin.register(Entity)
class EntityAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "display_name", "resource", "created_at", "deleted_at")
    list_filter = ("deleted_at",)
    search_fields = ("name", "display_name")
    inlines = [EntityFieldInline]

    def get_queryset(self, request):
        return Entity.all_objects.select_related("resource")
