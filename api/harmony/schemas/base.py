from typing import ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """API models: camelCase on the wire, snake_case attributes in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UpdateModel(CamelModel):
    """Partial update body.

    Omitted fields are left alone.  An explicit ``null`` is only accepted for
    the fields listed in ``clearable`` (nullable columns); anything else would
    store a null in a required column.
    """

    clearable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        nulled = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.clearable
        )
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self
