"""django-filter sets backing the `entities` query arguments."""

from __future__ import annotations

import django_filters

from .models import Entity


class EntityFilter(django_filters.FilterSet):
    """
    Filters:
      - resource: exact resource id
      - name / name__icontains
      - display_name__icontains
    """

    name__icontains = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    display_name__icontains = django_filters.CharFilter(field_name="display_name", lookup_expr="icontains")

    class Meta:
        model = Entity
        fields = ["resource", "name"]
