"""Controller wire entities.

These mirror the JSON objects the controller API returns. Unknown
response fields (related links, summary_fields, timestamps) are ignored.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class ControllerModel(BaseModel):
    """Base for controller API objects."""

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    # Fields sent on create/update, in addition to name/description/variables
    payload_fields: ClassVar[tuple[str, ...]] = ()

    id: int | None = None
    name: str
    description: str | None = None
    variables: str | None = None

    def payload(self) -> dict[str, Any]:
        """Render the request body for create/update.

        The id travels in the URL, never in the body. Absent text fields
        are sent as the controller's blank value so a PUT clears them.
        """
        body: dict[str, Any] = {field: getattr(self, field) for field in self.payload_fields}
        body["name"] = self.name
        body["description"] = self.description or ""
        body["variables"] = self.variables or ""
        return body


class Inventory(ControllerModel):
    """An inventory, owned by an organization."""

    payload_fields: ClassVar[tuple[str, ...]] = ("organization",)

    organization: int | None = None


class Group(ControllerModel):
    """A group scoped to an inventory."""

    payload_fields: ClassVar[tuple[str, ...]] = ("inventory",)

    inventory: int | None = None


class Host(ControllerModel):
    """A host scoped to an inventory."""

    payload_fields: ClassVar[tuple[str, ...]] = ("inventory",)

    inventory: int | None = None


class Page(BaseModel):
    """One page of a controller list endpoint."""

    model_config = ConfigDict(extra="ignore")

    count: int = 0
    next: str | None = None
    previous: str | None = None
    results: list[dict[str, Any]] = Field(default_factory=list)

    def items_typed(self, model: type[ControllerModel]) -> list[Any]:
        return [model.model_validate(item) for item in self.results]
