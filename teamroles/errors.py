from __future__ import annotations

from enum import Enum


class ValidationCode(str, Enum):
    EMPTY_NAME = "empty_name"
    DUPLICATE = "duplicate"
    EMPTY_PARTICIPANTS = "empty_participants"
    EMPTY_ROLES = "empty_roles"
    EMPTY_CONFIGURATION = "empty_configuration"


# (title, message) shown on the notification surface
_MESSAGES = {
    ValidationCode.EMPTY_NAME: ("Name required", "Please enter a name."),
    ValidationCode.DUPLICATE: ("Duplicate name", "That name already exists."),
    ValidationCode.EMPTY_PARTICIPANTS: ("No team members", "Add team members before shuffling."),
    ValidationCode.EMPTY_ROLES: ("No roles", "Add roles before shuffling."),
    ValidationCode.EMPTY_CONFIGURATION: ("Empty configuration", "Add team members and roles before saving."),
}


class TeamRolesError(Exception):
    pass


class ValidationError(TeamRolesError, ValueError):
    """
    Recoverable, user-facing validation failure. The operation that raised it
    has not changed any state.
    """

    def __init__(self, code: ValidationCode, message: str | None = None):
        self.code = ValidationCode(code)
        title, default_message = _MESSAGES[self.code]
        self.title = title
        self.message = message or default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code.value, "title": self.title, "message": self.message}


class StorageError(TeamRolesError):
    """The blob store could not be written; in-memory state was rolled back."""


class ConfigurationNotFound(TeamRolesError, LookupError):
    pass
