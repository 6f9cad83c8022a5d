"""
Prisma schema import: create a resource's entities from a `.prisma` file.

Flow
----
1. `read_schema_upload()` checks the file itself (extension, size, empty,
   UTF-8). These problems raise `BadUserInput` before any action exists.
2. `import_prisma_schema()` opens an Action with a single `PROCESSING` step and
   reports progress through `actions.services.ActionService`.
3. The schema is parsed (`entities.prisma_schema`) and, with the resource row
   locked, checked against its live entities. Content problems are logged as `Error` lines with
   the line number in `meta`, the step is completed as `Failed`, and the
   result carries no entities.
4. Otherwise every entity and field is created inside one transaction, and
   the step completes as `Success`.

Action rows are written outside that transaction, so a poller can follow the
import and the log survives a rollback.

Type mapping
------------
- `@id` -> Id; `DateTime @default(now())` -> CreatedAt; `DateTime @updatedAt` -> UpdatedAt
- String -> SingleLineText (`@db.Text` -> MultiLineText; a field named `email` -> Email)
- Int/BigInt -> WholeNumber; Float/Decimal -> DecimalNumber; Boolean; DateTime; Json
- enum -> OptionSet, enum[] -> MultiSelectOptionSet (with options)
- model -> Lookup (`relatedEntityId`, `allowMultipleSelection`, `relatedFieldId`);
  scalar columns named in `@relation(fields: [...])` are folded into the lookup
- Bytes, `Unsupported(...)` -> skipped with a `Warning`; scalar lists -> Json
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.files.uploadedfile import UploadedFile
from django.db import IntegrityError, transaction

from actions.models import Action, ActionStep, ActionStepStatus
from actions.services import ActionService
from core.exceptions import BadUserInput
from workspaces.models import Resource

from .models import DataType, Entity, EntityField
from .naming import display_name, plural_display_name
from .prisma_schema import (
    PrismaField,
    PrismaModel,
    PrismaSchema,
    PrismaSchemaError,
    PrismaSchemaParseError,
    parse_list,
    parse_schema,
    unquote,
)

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".prisma",)

STEP_NAME = "PROCESSING"
STEP_MESSAGE = "Import Prisma schema file"
START_LOG_MESSAGE = "Processing Prisma schema file"

_SEARCHABLE_TYPES = {
    DataType.ID,
    DataType.SINGLE_LINE_TEXT,
    DataType.MULTI_LINE_TEXT,
    DataType.EMAIL,
    DataType.WHOLE_NUMBER,
    DataType.DECIMAL_NUMBER,
    DataType.BOOLEAN,
    DataType.DATE_TIME,
    DataType.OPTION_SET,
    DataType.LOOKUP,
}


@dataclass
class ImportResult:
    """Result envelope returned by the import runner.

    Attributes:
        action: The action (with its single step) describing the run.
        entities: Entities created; empty when the step failed.
        errors: Content problems as dicts with keys message and line.
    """
    action: Action
    entities: List[Entity] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class _FieldPlan:
    source: PrismaField
    name: str
    data_type: str
    required: bool
    unique: bool
    properties: Dict[str, Any]


# ---------------------------------------------------------------------------
# Upload handling
# ---------------------------------------------------------------------------

def _ensure_size(upload: UploadedFile) -> None:
    max_bytes = int(getattr(settings, "MAX_IMPORT_BYTES", 5_000_000))
    size = upload.size if upload.size is not None else 0
    if size and size > max_bytes:
        raise BadUserInput(f"File too large (>{max_bytes} bytes).", field="file")


def read_schema_upload(upload: UploadedFile) -> str:
    """Return the text of an uploaded `.prisma` file or raise `BadUserInput`."""
    name = upload.name or ""
    if os.path.splitext(name)[1].lower() not in ALLOWED_EXTENSIONS:
        raise BadUserInput("Only .prisma files are accepted", field="file")
    _ensure_size(upload)
    max_bytes = int(getattr(settings, "MAX_IMPORT_BYTES", 5_000_000))
    raw = upload.read(max_bytes + 1)
    if len(raw) > max_bytes:
        raise BadUserInput(f"File too large (>{max_bytes} bytes).", field="file")
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise BadUserInput("The schema file must be UTF-8 encoded", field="file")
    if not text.strip():
        raise BadUserInput("The schema file is empty", field="file")
    return text


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------

def _fk_columns(model: PrismaModel) -> set:
    """Scalar fields that back a relation (`@relation(fields: [...])`)."""
    columns = set()
    for fld in model.fields:
        relation = fld.attribute("relation")
        if relation is not None:
            _, named = relation.arguments()
            columns.update(parse_list(named.get("fields")))
    return columns


def _relation_name(fld: PrismaField) -> Optional[str]:
    relation = fld.attribute("relation")
    if relation is None:
        return None
    positional, named = relation.arguments()
    if positional:
        return unquote(positional[0])
    return unquote(named.get("name"))


def _default_args(fld: PrismaField) -> str:
    default = fld.attribute("default")
    return default.args if default is not None else ""


def _id_type(fld: PrismaField) -> str:
    args = _default_args(fld)
    if args.startswith("uuid"):
        return "UUID"
    if args.startswith("autoincrement") or fld.type_name in ("Int", "BigInt"):
        return "AUTO_INCREMENT"
    return "CUID"


def _scalar_plan(fld: PrismaField) -> tuple[str, Dict[str, Any]]:
    db_attr = fld.db_attribute
    db_type = db_attr.name[3:] if db_attr is not None else None

    if fld.type_name == "String":
        if db_type == "Text":
            return DataType.MULTI_LINE_TEXT, {"maxLength": 65535}
        if fld.name.lower() == "email":
            return DataType.EMAIL, {}
        max_length = 256
        if db_type == "VarChar" and db_attr.args.isdigit():
            max_length = int(db_attr.args)
        return DataType.SINGLE_LINE_TEXT, {"maxLength": max_length}
    if fld.type_name in ("Int", "BigInt"):
        return DataType.WHOLE_NUMBER, {"databaseFieldType": "BIG_INT" if fld.type_name == "BigInt" else "INT"}
    if fld.type_name in ("Float", "Decimal"):
        return DataType.DECIMAL_NUMBER, {"databaseFieldType": fld.type_name.upper(), "precision": 8}
    if fld.type_name == "Boolean":
        return DataType.BOOLEAN, {}
    if fld.type_name == "DateTime":
        return DataType.DATE_TIME, {"timeZone": "localTime", "dateOnly": db_type == "Date"}
    return DataType.JSON, {}


class _Importer:
    def __init__(self, schema: PrismaSchema, step: ActionStep) -> None:
        self.schema = schema
        self.step = step

    def warn(self, fld: PrismaField, model: PrismaModel, message: str) -> None:
        ActionService.warning(self.step, message, {"line": fld.line, "field": f"{model.name}.{fld.name}"})

    def plan_field(self, model: PrismaModel, fld: PrismaField) -> Optional[_FieldPlan]:
        if fld.is_unsupported or fld.type_name == "Bytes":
            self.warn(fld, model, f"Field {model.name}.{fld.name} of type {fld.type_name} is not supported and was skipped")
            return None

        properties: Dict[str, Any] = {}
        mapped = fld.attribute("map")
        if mapped is not None:
            positional, named = mapped.arguments()
            column = unquote(positional[0] if positional else named.get("name"))
            if column:
                properties["databaseFieldName"] = column
            else:
                self.warn(fld, model, f"@map on {model.name}.{fld.name} has no column name and was ignored")

        unique = fld.has("unique") or fld.has("id")
        required = not fld.optional and not fld.is_list

        if fld.has("id"):
            data_type = DataType.ID
            properties["idType"] = _id_type(fld)
        elif fld.type_name == "DateTime" and fld.has("updatedAt"):
            data_type = DataType.UPDATED_AT
        elif fld.type_name == "DateTime" and _default_args(fld) == "now()":
            data_type = DataType.CREATED_AT
        elif fld.type_name in self.schema.enums:
            enum = self.schema.enums[fld.type_name]
            data_type = DataType.MULTI_SELECT_OPTION_SET if fld.is_list else DataType.OPTION_SET
            properties["options"] = [{"label": display_name(v), "value": v} for v in enum.values]
        elif fld.type_name in self.schema.model_names:
            data_type = DataType.LOOKUP
            fk_columns = []
            relation = fld.attribute("relation")
            if relation is not None:
                fk_columns = parse_list(relation.arguments()[1].get("fields"))
            properties.update(
                {
                    "relatedEntityId": None,
                    "allowMultipleSelection": fld.is_list,
                    "relatedFieldId": None,
                    "fkFieldName": fk_columns[0] if fk_columns else None,
                }
            )
        else:
            data_type, scalar_props = _scalar_plan(fld)
            properties.update(scalar_props)
            if fld.is_list:
                ActionService.info(
                    self.step,
                    f"Scalar list {model.name}.{fld.name} was imported as Json",
                    {"line": fld.line},
                )
                data_type, required = DataType.JSON, False

        return _FieldPlan(
            source=fld,
            name=fld.name,
            data_type=data_type,
            required=required,
            unique=unique,
            properties=properties,
        )

    def plan(self) -> Dict[str, List[_FieldPlan]]:
        plans: Dict[str, List[_FieldPlan]] = {}
        for model in self.schema.models:
            folded = _fk_columns(model)
            plans[model.name] = []
            for fld in model.fields:
                if fld.name in folded and fld.type_name not in self.schema.model_names:
                    continue
                plan = self.plan_field(model, fld)
                if plan is not None:
                    plans[model.name].append(plan)
        return plans

    def persist(self, resource, plans: Dict[str, List[_FieldPlan]]) -> List[Entity]:
        entities: Dict[str, Entity] = {}
        for model in self.schema.models:
            entities[model.name] = Entity.objects.create(
                resource=resource,
                name=model.name,
                display_name=display_name(model.name),
                plural_display_name=plural_display_name(model.name),
                description=model.documentation,
            )

        lookups: List[tuple[PrismaModel, _FieldPlan, EntityField]] = []
        for model in self.schema.models:
            for position, plan in enumerate(plans[model.name]):
                if plan.data_type == DataType.LOOKUP:
                    plan.properties["relatedEntityId"] = entities[plan.source.type_name].id
                row = EntityField.objects.create(
                    entity=entities[model.name],
                    name=plan.name,
                    display_name=display_name(plan.name),
                    data_type=plan.data_type,
                    required=plan.required,
                    unique=plan.unique,
                    searchable=plan.data_type in _SEARCHABLE_TYPES,
                    description=plan.source.documentation,
                    properties=plan.properties,
                    position=position,
                )
                if plan.data_type == DataType.LOOKUP:
                    lookups.append((model, plan, row))

        for model, plan, row in lookups:
            counterpart = self._counterpart(model, plan, lookups)
            if counterpart is not None:
                row.properties["relatedFieldId"] = counterpart.id
                row.save(update_fields=["properties"])
        return list(entities.values())

    @staticmethod
    def _counterpart(model, plan, lookups) -> Optional[EntityField]:
        """The field on the other side of a relation (same relation name, pointing back)."""
        name = _relation_name(plan.source)
        for other_model, other_plan, other_row in lookups:
            if other_plan is plan:
                continue
            if other_model.name != plan.source.type_name or other_plan.source.type_name != model.name:
                continue
            if _relation_name(other_plan.source) == name:
                return other_row
        return None


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class _NameConflict(Exception):
    def __init__(self, errors: List[PrismaSchemaError]) -> None:
        super().__init__("; ".join(e.message for e in errors))
        self.errors = errors


def _conflicts(resource, schema: PrismaSchema) -> List[PrismaSchemaError]:
    existing = set(
        Entity.objects.filter(resource=resource, name__in=[m.name for m in schema.models]).values_list("name", flat=True)
    )
    return [
        PrismaSchemaError(f"Entity {m.name} already exists in this resource", m.line)
        for m in schema.models
        if m.name in existing
    ]


def _fail(step: ActionStep, result: ImportResult, errors: List[PrismaSchemaError]) -> ImportResult:
    for err in errors:
        ActionService.error(step, err.message, {"line": err.line} if err.line is not None else {})
        result.errors.append({"message": err.message, "line": err.line})
    ActionService.error(step, "The schema could not be imported; no entities were created")
    ActionService.complete(step, ActionStepStatus.FAILED)
    return result


def import_prisma_schema(resource, text: str, user=None) -> ImportResult:
    """
    Run a full import for `resource` from schema `text`.

    Content problems end in a `Failed` step; unexpected errors are logged on the
    step, which is marked `Failed`, and re-raised.
    """
    action = ActionService.create_action(resource.project.workspace_id, resource=resource, user=user)
    step = ActionService.create_step(action, STEP_NAME, STEP_MESSAGE)
    ActionService.info(step, START_LOG_MESSAGE)
    result = ImportResult(action=action)

    try:
        schema = parse_schema(text)
    except PrismaSchemaParseError as exc:
        return _fail(step, result, exc.errors)

    for warning in schema.warnings:
        ActionService.warning(step, warning.message, {"line": warning.line})
    ActionService.info(
        step,
        f"Found {len(schema.models)} models and {len(schema.enums)} enums",
        {"models": [m.name for m in schema.models]},
    )

    importer = _Importer(schema, step)
    try:
        plans = importer.plan()
        with transaction.atomic():
            # Lock the resource so concurrent imports into it run one at a time.
            Resource.all_objects.select_for_update().get(pk=resource.pk)
            conflicts = _conflicts(resource, schema)
            if conflicts:
                raise _NameConflict(conflicts)
            result.entities = importer.persist(resource, plans)
    except _NameConflict as exc:
        return _fail(step, result, exc.errors)
    except IntegrityError as exc:
        logger.warning("Prisma import into resource %s hit a name conflict: %s", resource.pk, exc)
        conflicts = _conflicts(resource, schema) or [
            PrismaSchemaError("An entity with the same name already exists in this resource")
        ]
        return _fail(step, result, conflicts)
    except Exception as exc:
        logger.exception("Prisma import failed for resource %s", resource.pk)
        ActionService.error(step, f"Import failed: {exc}")
        ActionService.complete(step, ActionStepStatus.FAILED)
        raise

    for entity in result.entities:
        ActionService.debug(step, f"Created entity {entity.name}", {"entityId": entity.id})
    ActionService.info(step, f"Created {len(result.entities)} entities")
    ActionService.complete(step, ActionStepStatus.SUCCESS)
    return result
