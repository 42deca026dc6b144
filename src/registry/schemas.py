"""Registry schemas.

Defines the reference-data records for coaches and students.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class RegistryKind(str, Enum):
    """Which reference table an entry belongs to."""

    COACH = "coach"
    STUDENT = "student"


class RegistryEntry(BaseModel):
    """One coach or one student from the reference tables.

    The canonical name is the authoritative display form. Every other
    string (first name, full name, nicknames, parent names, email local
    part) is an alias that resolves back to this entry.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    canonical_name: str = Field(description="Authoritative display name")
    first_name: str | None = Field(default=None, description="Given name")
    last_name: str | None = Field(default=None, description="Family name")
    aliases: frozenset[str] = Field(
        default_factory=frozenset,
        description="Alternate spellings and nicknames",
    )
    parent_aliases: frozenset[str] = Field(
        default_factory=frozenset,
        description="Parent/guardian names that map to this student",
    )
    email: str | None = Field(default=None, description="Contact email")

    @field_validator("canonical_name")
    @classmethod
    def canonical_name_not_empty(cls, v: str) -> str:
        """Ensure canonical name is not empty or whitespace."""
        if not v.strip():
            raise ValueError("canonical_name cannot be empty")
        return v

    @field_validator("aliases", "parent_aliases", mode="before")
    @classmethod
    def drop_blank_aliases(cls, v):
        """Strip aliases and drop blanks before freezing."""
        if v is None:
            return frozenset()
        return frozenset(a.strip() for a in v if a and a.strip())

    @computed_field
    @property
    def email_local_part(self) -> str | None:
        """Part of the email before '@', lowercased."""
        if not self.email or "@" not in self.email:
            return None
        local = self.email.split("@", 1)[0].strip().lower()
        return local or None

    @property
    def full_name(self) -> str | None:
        """First and last name joined, when both are known."""
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return None

    def searchable_names(self) -> list[str]:
        """Names indexed for this entry, canonical name first.

        Parent aliases are excluded; the registry adds them separately
        so that they never shadow another entry's own names.
        """
        names = [self.canonical_name]
        for name in (self.first_name, self.full_name):
            if name:
                names.append(name)
        names.extend(sorted(self.aliases))
        return names
