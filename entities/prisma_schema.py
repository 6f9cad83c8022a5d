"""
Prisma schema parser.

Reads the subset of the Prisma schema language that describes a data model:

- `model` and `enum` blocks; `datasource`/`generator` blocks are skipped, and
  `type`/`view` blocks are skipped with a warning;
- fields `name Type`, with the `?` (optional) and `[]` (list) modifiers and
  `Unsupported("...")` types;
- field attributes (`@id`, `@default(...)`, `@unique`, `@updatedAt`,
  `@relation(...)`, `@map(...)`, `@db.*`) and block attributes (`@@id`,
  `@@unique`, `@@index`, `@@map`);
- `//` comments, and `///` doc comments which become descriptions.

`parse_schema()` returns a `PrismaSchema` or raises `PrismaSchemaParseError`
with every problem found, each carrying the 1-based line number.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

SCALAR_TYPES = frozenset(
    {"String", "Boolean", "Int", "BigInt", "Float", "Decimal", "DateTime", "Json", "Bytes"}
)

_BLOCK_RE = re.compile(r"^(model|enum|datasource|generator|type|view)\s+(\w+)\s*\{$")
_FIELD_RE = re.compile(r'^(\w+)\s+(Unsupported\(\s*"[^"]*"\s*\)|\w+)(\[\]|\?)?(?:\s+(.*))?$')
_ENUM_VALUE_RE = re.compile(r"^(\w+)(?:\s+(.*))?$")
_ATTR_NAME_RE = re.compile(r"@@?([A-Za-z_][\w.]*)")


@dataclass(frozen=True)
class PrismaSchemaError:
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"line {self.line}: {self.message}"


class PrismaSchemaParseError(ValueError):
    def __init__(self, errors: List[PrismaSchemaError]) -> None:
        self.errors = errors
        super().__init__("; ".join(str(e) for e in errors))


@dataclass
class PrismaAttribute:
    name: str
    args: str = ""

    def arguments(self) -> Tuple[List[str], Dict[str, str]]:
        return split_arguments(self.args)


@dataclass
class PrismaField:
    name: str
    type_name: str
    line: int
    optional: bool = False
    is_list: bool = False
    attributes: List[PrismaAttribute] = field(default_factory=list)
    documentation: str = ""

    def attribute(self, name: str) -> Optional[PrismaAttribute]:
        return next((a for a in self.attributes if a.name == name), None)

    def has(self, name: str) -> bool:
        return self.attribute(name) is not None

    @property
    def is_unsupported(self) -> bool:
        return self.type_name.startswith("Unsupported(")

    @property
    def db_attribute(self) -> Optional[PrismaAttribute]:
        return next((a for a in self.attributes if a.name.startswith("db.")), None)


@dataclass
class PrismaModel:
    name: str
    line: int
    fields: List[PrismaField] = field(default_factory=list)
    attributes: List[PrismaAttribute] = field(default_factory=list)
    documentation: str = ""

    def get_field(self, name: str) -> Optional[PrismaField]:
        return next((f for f in self.fields if f.name == name), None)


@dataclass
class PrismaEnum:
    name: str
    line: int
    values: List[str] = field(default_factory=list)
    documentation: str = ""


@dataclass
class PrismaSchema:
    models: List[PrismaModel] = field(default_factory=list)
    enums: Dict[str, PrismaEnum] = field(default_factory=dict)
    warnings: List[PrismaSchemaError] = field(default_factory=list)

    @property
    def model_names(self) -> set:
        return {m.name for m in self.models}


# ---------------------------------------------------------------------------
# Lexical helpers
# ---------------------------------------------------------------------------

def strip_comment(line: str) -> str:
    """Drop a trailing `//` comment, ignoring `//` inside string literals."""
    in_string = False
    prev = ""
    for idx, ch in enumerate(line):
        if ch == '"' and prev != "\\":
            in_string = not in_string
        elif ch == "/" and prev == "/" and not in_string:
            return line[: idx - 1]
        prev = ch
    return line


def _balanced(text: str, start: int) -> int:
    """Index just past the `)` closing the `(` at `start`; -1 when unbalanced."""
    depth = 0
    in_string = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if ch == '"' and (idx == 0 or text[idx - 1] != "\\"):
            in_string = not in_string
        elif in_string:
            continue
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return idx + 1
    return -1


def parse_attributes(text: str) -> List[PrismaAttribute]:
    """`@id @default(autoincrement()) @db.VarChar(20)` -> attribute list."""
    attrs: List[PrismaAttribute] = []
    pos = 0
    text = text or ""
    while pos < len(text):
        match = _ATTR_NAME_RE.match(text, pos)
        if match is None:
            if text[pos].isspace():
                pos += 1
                continue
            raise ValueError(f"Unexpected token {text[pos:].split()[0]!r}")
        name = match.group(1)
        pos = match.end()
        args = ""
        if pos < len(text) and text[pos] == "(":
            end = _balanced(text, pos)
            if end < 0:
                raise ValueError(f"Unbalanced parentheses in @{name}")
            args = text[pos + 1 : end - 1].strip()
            pos = end
        attrs.append(PrismaAttribute(name=name, args=args))
    return attrs


def split_arguments(args: str) -> Tuple[List[str], Dict[str, str]]:
    """Split `"name", fields: [a, b]` into positional and named values (raw text)."""
    parts: List[str] = []
    depth = 0
    in_string = False
    current = ""
    for ch in args or "":
        if ch == '"':
            in_string = not in_string
        elif not in_string and ch in "([":
            depth += 1
        elif not in_string and ch in ")]":
            depth -= 1
        if ch == "," and depth == 0 and not in_string:
            parts.append(current.strip())
            current = ""
            continue
        current += ch
    if current.strip():
        parts.append(current.strip())

    positional: List[str] = []
    named: Dict[str, str] = {}
    for part in parts:
        key, sep, value = part.partition(":")
        if sep and re.fullmatch(r"\w+", key.strip()):
            named[key.strip()] = value.strip()
        else:
            positional.append(part)
    return positional, named


def unquote(value: Optional[str]) -> Optional[str]:
    if value and len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def parse_list(value: Optional[str]) -> List[str]:
    """`[authorId, tenantId]` -> ["authorId", "tenantId"]."""
    value = (value or "").strip()
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1]
    return [v.strip() for v in value.split(",") if v.strip()]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def parse_schema(text: str) -> PrismaSchema:
    schema = PrismaSchema()
    errors: List[PrismaSchemaError] = []

    block_kind: Optional[str] = None
    block = None
    block_line = 0
    docs: List[str] = []

    for lineno, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if stripped.startswith("///"):
            docs.append(stripped[3:].strip())
            continue
        line = strip_comment(stripped).strip()
        if not line:
            continue

        if block_kind is None:
            match = _BLOCK_RE.match(line)
            if match is None:
                errors.append(PrismaSchemaError(f"Unexpected content {line!r} outside of a block", lineno))
                docs = []
                continue
            block_kind, name = match.group(1), match.group(2)
            block_line = lineno
            documentation = "\n".join(docs)
            docs = []
            if block_kind == "model":
                block = PrismaModel(name=name, line=lineno, documentation=documentation)
            elif block_kind == "enum":
                block = PrismaEnum(name=name, line=lineno, documentation=documentation)
            else:
                block = None
                if block_kind in ("type", "view"):
                    schema.warnings.append(
                        PrismaSchemaError(f"{block_kind} {name} is not supported and was skipped", lineno)
                    )
            continue

        if line == "}":
            if isinstance(block, PrismaModel):
                schema.models.append(block)
            elif isinstance(block, PrismaEnum):
                if block.name in schema.enums:
                    errors.append(PrismaSchemaError(f"Enum {block.name} is defined more than once", block.line))
                else:
                    schema.enums[block.name] = block
            block_kind, block = None, None
            docs = []
            continue

        if block is None:
            continue  # datasource/generator/type/view body

        documentation = "\n".join(docs)
        docs = []
        if isinstance(block, PrismaEnum):
            _parse_enum_value(block, line, lineno, errors)
        else:
            _parse_model_line(block, line, lineno, documentation, errors)

    if block_kind is not None:
        errors.append(PrismaSchemaError(f"{block_kind} block is never closed", block_line))

    errors.extend(validate_schema(schema))
    if errors:
        raise PrismaSchemaParseError(sorted(errors, key=lambda e: (e.line or 0)))
    return schema


def _parse_enum_value(block: PrismaEnum, line: str, lineno: int, errors: List[PrismaSchemaError]) -> None:
    if line.startswith("@@"):
        return
    match = _ENUM_VALUE_RE.match(line)
    if match is None:
        errors.append(PrismaSchemaError(f"Invalid enum value {line!r} in enum {block.name}", lineno))
        return
    value = match.group(1)
    if value in block.values:
        errors.append(PrismaSchemaError(f"Duplicate value {value} in enum {block.name}", lineno))
        return
    block.values.append(value)


def _parse_model_line(
    block: PrismaModel,
    line: str,
    lineno: int,
    documentation: str,
    errors: List[PrismaSchemaError],
) -> None:
    if line.startswith("@@"):
        try:
            block.attributes.extend(parse_attributes(line))
        except ValueError as exc:
            errors.append(PrismaSchemaError(f"{block.name}: {exc}", lineno))
        return

    match = _FIELD_RE.match(line)
    if match is None:
        errors.append(PrismaSchemaError(f"Invalid field definition {line!r} in model {block.name}", lineno))
        return
    name, type_name, modifier, rest = match.groups()
    try:
        attributes = parse_attributes(rest or "")
    except ValueError as exc:
        errors.append(PrismaSchemaError(f"{block.name}.{name}: {exc}", lineno))
        return
    if block.get_field(name) is not None:
        errors.append(PrismaSchemaError(f"Duplicate field {name} in model {block.name}", lineno))
        return
    block.fields.append(
        PrismaField(
            name=name,
            type_name=type_name,
            line=lineno,
            optional=modifier == "?",
            is_list=modifier == "[]",
            attributes=attributes,
            documentation=documentation,
        )
    )


def validate_schema(schema: PrismaSchema) -> List[PrismaSchemaError]:
    """Cross-block checks: duplicate names, unknown types, missing models."""
    errors: List[PrismaSchemaError] = []
    seen: Dict[str, int] = {}
    for model in schema.models:
        if model.name in seen:
            errors.append(PrismaSchemaError(f"Model {model.name} is defined more than once", model.line))
        else:
            seen[model.name] = model.line
        if model.name in schema.enums:
            errors.append(PrismaSchemaError(f"{model.name} is defined as both a model and an enum", model.line))

    known = SCALAR_TYPES | set(seen) | set(schema.enums)
    for model in schema.models:
        for fld in model.fields:
            if fld.is_unsupported:
                continue
            if fld.type_name not in known:
                errors.append(
                    PrismaSchemaError(f"Type {fld.type_name} of field {model.name}.{fld.name} is not defined", fld.line)
                )
    if not schema.models:
        errors.append(PrismaSchemaError("The schema does not define any model"))
    return errors
