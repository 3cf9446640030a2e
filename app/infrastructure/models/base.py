"""Base Pydantic model configuration for infrastructure models.

Wire models in this service use camelCase field names on the wire and
snake_case attributes in Python; this base carries that configuration.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class InfrastructureModel(BaseModel):
    """Base model for wire-facing models.

    Provides standard Pydantic configuration for:
    - camelCase aliases generated from snake_case attribute names
    - Construction by either attribute name or alias
    - Validation on assignment
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,  # Accept both field name and alias
        validate_assignment=True,  # Validate on assignment
        use_enum_values=False,
    )
