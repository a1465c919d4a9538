from dataclasses import dataclass, field
from typing import Any

from dataset_transfer.analysis.json_kind import JsonKind, kind_of


@dataclass(slots=True)
class PropertySchema:
    """Accumulated structure of one field across every sampled record."""

    types: set[JsonKind] = field(default_factory=set)
    properties: dict[str, "PropertySchema"] = field(default_factory=dict)
    items: "PropertySchema | None" = None

    def merge(self, value: Any) -> None:
        kind = kind_of(value)
        self.types.add(kind)
        if kind is JsonKind.OBJECT:
            merge_properties(self.properties, value)
        elif kind is JsonKind.ARRAY and value:
            # one item schema shared by every element of every array instance
            if self.items is None:
                self.items = PropertySchema()
            for element in value:
                self.items.merge(element)

    def to_schema(self) -> dict[str, Any]:
        node: dict[str, Any] = {}
        tags = sorted(tag.value for tag in self.types)
        if len(tags) == 1:
            node["type"] = tags[0]
        elif tags:
            node["type"] = tags
        if self.properties:
            node["properties"] = properties_to_schema(self.properties)
        if self.items is not None:
            node["items"] = self.items.to_schema()
        return node


def merge_properties(target: dict[str, PropertySchema], obj: dict[str, Any]) -> None:
    for key, value in obj.items():
        prop = target.get(key)
        if prop is None:
            prop = target[key] = PropertySchema()
        prop.merge(value)


def properties_to_schema(props: dict[str, PropertySchema]) -> dict[str, Any]:
    return {name: props[name].to_schema() for name in sorted(props)}


class SchemaBuilder:
    """Infers a JSON-schema-like type tree from sample records."""

    def __init__(self) -> None:
        self._properties: dict[str, PropertySchema] = {}
        self.sample_count = 0

    def add(self, record: dict[str, Any]) -> None:
        merge_properties(self._properties, record)
        self.sample_count += 1

    def to_schema(self) -> dict[str, Any]:
        """Return `{}` when nothing was sampled, else the object schema."""
        if self.sample_count == 0:
            return {}
        return {"type": "object", "properties": properties_to_schema(self._properties)}
