"""
Pydantic schemas for numbers handed out by the assignment service.
"""

from pydantic import BaseModel, Field, field_validator

from call_forwarding.phone_numbers.formatting import to_display, to_e164


class AssignedNumber(BaseModel):
    """The assistant number currently bound to a managed user."""

    number: str = Field(..., min_length=1, description="Number in E.164 format")

    @field_validator("number")
    @classmethod
    def normalize_number(cls, v: str) -> str:
        return to_e164(v)

    @property
    def has_number(self) -> bool:
        return bool(self.number)

    @property
    def number_value(self) -> str:
        return self.number

    @property
    def display(self) -> str:
        return to_display(self.number)
