"""
Entities: the data model of a service resource.

- `Entity` belongs to a `workspaces.Resource` and is soft-deleted, so pending
  changes can report deletions until the next commit.
- `EntityField.properties` holds data-type specific settings (option lists,
  lookup targets, ...), mirroring what the schema import produces.
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q

from core.models import AliveManager, SoftDeleteModel, SoftDeleteQuerySet


class DataType(models.TextChoices):
    SINGLE_LINE_TEXT = "SingleLineText", "Single line text"
    MULTI_LINE_TEXT = "MultiLineText", "Multi line text"
    EMAIL = "Email", "Email"
    WHOLE_NUMBER = "WholeNumber", "Whole number"
    DECIMAL_NUMBER = "DecimalNumber", "Decimal number"
    DATE_TIME = "DateTime", "Date time"
    BOOLEAN = "Boolean", "Boolean"
    OPTION_SET = "OptionSet", "Option set"
    MULTI_SELECT_OPTION_SET = "MultiSelectOptionSet", "Multi select option set"
    LOOKUP = "Lookup", "Lookup"
    JSON = "Json", "JSON"
    ID = "Id", "Id"
    CREATED_AT = "CreatedAt", "Created at"
    UPDATED_AT = "UpdatedAt", "Updated at"


class EntityQuerySet(SoftDeleteQuerySet):

    def for_workspace(self, workspace_id):
        return self.filter(resource__project__workspace_id=workspace_id)


class Entity(SoftDeleteModel):
    resource = models.ForeignKey("workspaces.Resource", on_delete=models.CASCADE, related_name="entities")
    name = models.CharField(max_length=200)
    display_name = models.CharField(max_length=200)
    plural_display_name = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    objects = AliveManager.from_queryset(EntityQuerySet)()
    all_objects = EntityQuerySet.as_manager()

    class Meta:
        ordering = ("created_at", "id")
        verbose_name_plural = "entities"
        constraints = [
            models.UniqueConstraint(
                fields=("resource", "name"),
                condition=Q(deleted_at__isnull=True),
                name="uniq_live_entity_name_per_resource",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class EntityField(models.Model):
    entity = models.ForeignKey(Entity, on_delete=models.CASCADE, related_name="fields")
    name = models.CharField(max_length=200)
    display_name = models.CharField(max_length=200)
    data_type = models.CharField(max_length=32, choices=DataType.choices)
    required = models.BooleanField(default=False)
    unique = models.BooleanField(default=False)
    searchable = models.BooleanField(default=False)
    description = models.TextField(blank=True)
    properties = models.JSONField(default=dict, blank=True)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("position", "id")
        constraints = [
            models.UniqueConstraint(fields=("entity", "name"), name="uniq_entity_field_name"),
        ]

    def __str__(self) -> str:
        return f"{self.entity_id}.{self.name}"
