"""Form validation for bug create/update payloads, checked before anything is sent."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from bug_board_interface.bug import VALIDATION_RULES, Priority, Severity, Status
from bug_board_interface.errors import BugValidationError

__all__ = ["BugDraft", "BugDraftUpdate", "validate_bug_data"]

_LABELS = {"title": "Title", "description": "Description", "createdBy": "Name"}


def _check_length(wire_name: str, value: str | None) -> str | None:
    if value is None:
        return value
    low, high = VALIDATION_RULES[wire_name]
    label = _LABELS[wire_name]
    if len(value) < low:
        raise PydanticCustomError("too_short", f"{label} must be at least {low} characters")
    if len(value) > high:
        raise PydanticCustomError("too_long", f"{label} must not exceed {high} characters")
    return value


class BugDraftUpdate(BaseModel):
    """Any editable subset of a bug. Present fields obey the same rules as on create."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    title: str | None = None
    description: str | None = None
    status: Status | None = None
    priority: Priority | None = None
    severity: Severity | None = None
    created_by: str | None = Field(default=None, alias="createdBy")

    @field_validator("title")
    @classmethod
    def _title_length(cls, value):
        return _check_length("title", value)

    @field_validator("description")
    @classmethod
    def _description_length(cls, value):
        return _check_length("description", value)

    @field_validator("created_by")
    @classmethod
    def _creator_length(cls, value):
        return _check_length("createdBy", value)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class BugDraft(BugDraftUpdate):
    """A complete bug as entered in the create form."""

    title: str
    description: str
    priority: Priority
    severity: Severity
    #set when the request is authenticated; lifts the createdBy requirement
    created_by_user: str | None = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _creator_present(self):
        if not self.created_by and not self.created_by_user:
            raise PydanticCustomError("creator_missing", "Name is required")
        return self


def _field_of(error: dict) -> str:
    loc = error.get("loc") or ()
    if not loc:
        #model-level checks only concern the creator
        return "createdBy"
    name = str(loc[0])
    return "createdBy" if name == "created_by" else name


def _message_of(field: str, error: dict) -> str:
    if field in ("priority", "severity") and error.get("type") in ("enum", "missing"):
        return f"Please select a valid {field}"
    if error.get("type") == "missing":
        return f"{_LABELS.get(field, field.capitalize())} is required"
    return error.get("msg", "Invalid value")


def validate_bug_data(data: dict[str, Any], *, partial: bool = False, created_by_user: str | None = None) -> dict:
    """Validate a create (or, with ``partial=True``, update) payload and return it trimmed and normalised.

    Raises:
        BugValidationError: With one ``{"field", "message"}`` entry per failing field.
    """
    try:
        if partial:
            model = BugDraftUpdate.model_validate(data)
        else:
            model = BugDraft.model_validate({**data, "created_by_user": created_by_user})
    except ValidationError as exc:
        errors = []
        for error in exc.errors():
            field = _field_of(error)
            errors.append({"field": field, "message": _message_of(field, error)})
        first = errors[0]["message"] if errors else "Validation failed"
        raise BugValidationError(f"Invalid bug data: {first}", errors=errors, server_message=None) from exc
    return model.to_payload()
