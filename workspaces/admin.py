from django.contrib import admin

from .models import Commit, Project, Resource, Workspace, WorkspaceUser


class WorkspaceUserInline(admin.TabularInline):
    model = WorkspaceUser
    extra = 0


@admin.register(Workspace)
class WorkspaceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    search_fields = ("name",)
    inlines = [WorkspaceUserInline]


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "workspace", "created_at", "deleted_at")
    list_filter = ("deleted_at",)

    def get_queryset(self, request):
        return Project.all_objects.select_related("workspace")


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "resource_type", "project", "deleted_at")
    list_filter = ("resource_type",)

    def get_queryset(self, request):
        return Resource.all_objects.select_related("project")


@admin.register(Commit)
class CommitAdmin(admin.ModelAdmin):
    list_display = ("id", "project", "user", "message", "created_at")
