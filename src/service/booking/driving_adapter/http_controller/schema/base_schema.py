from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


# Amounts travel as JSON numbers with two decimals
MoneyAmount = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used='json')
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
