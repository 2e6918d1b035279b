"""
Principal: the authenticated actor whose permissions are checked.
"""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from skillharbor.features.auth.exceptions import SessionCorruption
from skillharbor.features.permissions.catalog import Permission, Role


class Principal(BaseModel):
    """
    Snapshot of an authenticated user.

    `permissions` is copied from the role registry when the principal is
    created at login. It is not re-derived from `role` afterwards, so a
    registry edit reaches a user only at their next login. Principals are
    immutable and get replaced wholesale on login and logout.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    name: str
    role: Role
    department: str
    permissions: tuple[Permission, ...]
    is_active: bool
    created_at: datetime
    last_login: datetime | None = None

    def to_snapshot(self) -> str:
        """Serialize to the flat JSON session snapshot (ISO-8601 timestamps)."""
        return self.model_dump_json()

    def to_claims(self) -> dict[str, Any]:
        """JSON-compatible dict form, used inside access tokens."""
        return self.model_dump(mode="json")

    @classmethod
    def from_snapshot(cls, raw: str | bytes) -> "Principal":
        """
        Parse a session snapshot in strict mode: no coercion between types, so
        "yes" is not a bool and an epoch number is not a timestamp.

        Raises:
            SessionCorruption: unparseable JSON, missing or mistyped fields,
                unknown fields, or role/permission values outside the catalog
        """
        try:
            return cls.model_validate_json(raw, strict=True)
        except (ValidationError, ValueError, TypeError) as e:
            raise SessionCorruption(str(e)) from e

    @classmethod
    def from_claims(cls, claims: Any) -> "Principal":
        """Parse the dict form produced by to_claims(); same checks as from_snapshot()."""
        try:
            return cls.model_validate(claims)
        except (ValidationError, ValueError, TypeError) as e:
            raise SessionCorruption(str(e)) from e
