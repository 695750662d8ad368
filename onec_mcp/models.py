"""Request and response models exchanged with the 1C HTTP service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import MISSING, dataclass, field, fields
from typing import Any, TypeVar

T = TypeVar("T", bound="JsonModel")


def _json(key: str, *, omitempty: bool = False, model: type | None = None,
          default: Any = MISSING, default_factory: Any = MISSING) -> Any:
    metadata = {"json": key, "omitempty": omitempty, "model": model}
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, int, float, bool, list, dict, tuple)):
        return not value
    return False


class JsonModel:
    """Base for dataclasses that map to JSON objects with fixed key names."""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready dictionary, leaving out empty optional fields."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if f.metadata.get("omitempty") and _is_empty(value):
                continue
            if f.metadata.get("model") is not None and value is not None:
                if isinstance(value, list):
                    value = [item.to_dict() for item in value]
                else:
                    value = value.to_dict()
            result[f.metadata["json"]] = value
        return result

    @classmethod
    def from_dict(cls: type[T], data: Mapping[str, Any]) -> T:
        """Build an instance from a decoded JSON object; missing keys take defaults."""
        if not isinstance(data, Mapping):
            raise TypeError(f"{cls.__name__} expects a JSON object, got {type(data).__name__}")
        kwargs: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = f.metadata["json"]
            value = data.get(key)
            if value is None:
                continue
            model = f.metadata.get("model")
            if model is not None:
                if isinstance(value, list):
                    value = [model.from_dict(item) for item in value]
                else:
                    value = model.from_dict(value)
            kwargs[f.name] = value
        return cls(**kwargs)


@dataclass
class Attribute(JsonModel):
    """An attribute of a metadata object."""

    name: str = _json("name", default="")
    synonym: str = _json("synonym", default="")
    type: str = _json("type", default="")


@dataclass
class TabularPart(JsonModel):
    """A tabular part of a metadata object."""

    name: str = _json("name", default="")
    attributes: list[Attribute] = _json("attributes", model=Attribute, default_factory=list)


@dataclass
class ObjectStructure(JsonModel):
    """The structure of a metadata object."""

    name: str = _json("name", default="")
    synonym: str = _json("synonym", default="")
    attributes: list[Attribute] = _json("attributes", model=Attribute, default_factory=list)
    tabular_parts: list[TabularPart] = _json(
        "tabularParts", omitempty=True, model=TabularPart, default_factory=list)
    dimensions: list[Attribute] = _json(
        "dimensions", omitempty=True, model=Attribute, default_factory=list)
    resources: list[Attribute] = _json(
        "resources", omitempty=True, model=Attribute, default_factory=list)


@dataclass
class QueryRequest(JsonModel):
    """Request body for the query endpoint."""

    query: str = _json("query", default="")
    limit: int = _json("limit", default=0)
    parameters: dict[str, Any] = _json("parameters", omitempty=True, default_factory=dict)


@dataclass
class QueryResult(JsonModel):
    """Response of the query endpoint."""

    columns: list[str] = _json("columns", default_factory=list)
    rows: list[list[Any]] = _json("rows", default_factory=list)
    total: int = _json("total", default=0)
    truncated: bool = _json("truncated", default=False)


@dataclass
class VersionInfo(JsonModel):
    """Extension version response."""

    version: str = _json("version", default="")


@dataclass
class FormElement(JsonModel):
    """An element on a form."""

    name: str = _json("name", default="")
    type: str = _json("type", default="")
    title: str = _json("title", omitempty=True, default="")
    data_path: str = _json("dataPath", omitempty=True, default="")


@dataclass
class FormCommand(JsonModel):
    """A form command."""

    name: str = _json("name", default="")
    action: str = _json("action", default="")


@dataclass
class FormHandler(JsonModel):
    """An event handler on a form."""

    event: str = _json("event", default="")
    handler: str = _json("handler", default="")


@dataclass
class FormStructure(JsonModel):
    """The structure of a form."""

    name: str = _json("name", default="")
    title: str = _json("title", default="")
    elements: list[FormElement] = _json("elements", model=FormElement, default_factory=list)
    commands: list[FormCommand] = _json(
        "commands", omitempty=True, model=FormCommand, default_factory=list)
    handlers: list[FormHandler] = _json(
        "handlers", omitempty=True, model=FormHandler, default_factory=list)


@dataclass
class ValidateQueryRequest(JsonModel):
    """Request body for the validate-query endpoint."""

    query: str = _json("query", default="")


@dataclass
class ValidateQueryResult(JsonModel):
    """Response of the validate-query endpoint."""

    valid: bool = _json("valid", default=False)
    errors: list[str] = _json("errors", omitempty=True, default_factory=list)


@dataclass
class EventLogRequest(JsonModel):
    """Request body for the eventlog endpoint."""

    start_date: str = _json("start_date", omitempty=True, default="")
    end_date: str = _json("end_date", omitempty=True, default="")
    level: str = _json("level", omitempty=True, default="")
    user: str = _json("user", omitempty=True, default="")
    limit: int = _json("limit", omitempty=True, default=0)


@dataclass
class EventLogEntry(JsonModel):
    """A single event log record."""

    date: str = _json("date", default="")
    level: str = _json("level", default="")
    event: str = _json("event", default="")
    user: str = _json("user", default="")
    computer: str = _json("computer", omitempty=True, default="")
    metadata: str = _json("metadata", omitempty=True, default="")
    data: str = _json("data", omitempty=True, default="")
    comment: str = _json("comment", omitempty=True, default="")
    transaction: str = _json("transaction", omitempty=True, default="")


@dataclass
class EventLogResult(JsonModel):
    """Response of the eventlog endpoint."""

    events: list[EventLogEntry] = _json("events", model=EventLogEntry, default_factory=list)
    total: int = _json("total", default=0)


@dataclass
class ConfigurationInfo(JsonModel):
    """General information about the infobase and its configuration."""

    name: str = _json("name", default="")
    version: str = _json("version", default="")
    vendor: str = _json("vendor", default="")
    platform_version: str = _json("platform_version", default="")
    mode: str = _json("mode", default="")


@dataclass
class Counterparty(JsonModel):
    """A counterparty record."""

    ref: str = _json("ref", default="")
    code: str = _json("code", default="")
    name: str = _json("name", default="")
    inn: str = _json("inn", default="")
    kpp: str = _json("kpp", default="")
    counterparty_type: str = _json("counterparty_type", omitempty=True, default="")


@dataclass
class ReadCounterpartiesRequest(JsonModel):
    """Request body for the counterparties read endpoint."""

    search: str = _json("search", omitempty=True, default="")
    limit: int = _json("limit", omitempty=True, default=0)
    code: str = _json("code", omitempty=True, default="")
    ref: str = _json("ref", omitempty=True, default="")
    inn: str = _json("inn", omitempty=True, default="")
    kpp: str = _json("kpp", omitempty=True, default="")


@dataclass
class ReadCounterpartiesResult(JsonModel):
    """Response of the counterparties read endpoint."""

    counterparties: list[Counterparty] = _json(
        "counterparties", model=Counterparty, default_factory=list)
    total: int = _json("total", default=0)
    truncated: bool = _json("truncated", default=False)


@dataclass
class CreateCounterpartyRequest(JsonModel):
    """Request body for creating a counterparty."""

    name: str = _json("name", default="")
    inn: str = _json("inn", default="")
    kpp: str = _json("kpp", default="")
    counterparty_type: str = _json("counterparty_type", default="")


@dataclass
class CreateCounterpartyResult(JsonModel):
    """Response of the counterparty create endpoint."""

    success: bool = _json("success", default=False)
    counterparty: Counterparty = _json(
        "counterparty", model=Counterparty, default_factory=Counterparty)