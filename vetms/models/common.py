# vetms/models/common.py

import math
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimals stay exact in Python and go out as JSON numbers.
Amount = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    """Request/response bodies exchanged with the UI in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def check_storable(value: Decimal) -> Decimal:
    """Reject decimals that stop being finite once stored as a float."""
    if not math.isfinite(float(value)):
        raise ValueError("number is out of range")
    return value
