"""Base schema class with JSON:API resource parsing."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Base class for schemas parsed from JSON:API documents."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore",
    )

    @classmethod
    def from_resource(cls, resource: dict[str, Any]) -> Self:
        """
        Factory method to create a schema instance from a JSON:API resource object.

        The resource ``id`` is merged into its ``attributes`` before validation.

        Args:
            resource: Mapping with ``id``, ``type`` and ``attributes`` keys

        Returns:
            Pydantic schema instance
        """
        attributes = dict(resource.get("attributes") or {})
        attributes["id"] = resource["id"]
        return cls.model_validate(attributes)

    @classmethod
    def from_resource_list(cls, resources: list[dict[str, Any]]) -> list[Self]:
        """
        Factory method to create schema instances from a list of resource objects.

        Args:
            resources: JSON:API ``data`` array

        Returns:
            List of Pydantic schema instances, in document order
        """
        return [cls.from_resource(resource) for resource in resources]
