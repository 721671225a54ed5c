"""Request bodies shared by several routers."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base for request bodies.

    Fields are snake_case in Python and camelCase on the wire; either spelling
    is accepted. Unknown keys (e.g. a client echoing ``shipmentId`` or ``role``
    back) are dropped.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def changes(self) -> dict:
        """Only the fields the client actually sent"""
        return self.model_dump(exclude_unset=True)
