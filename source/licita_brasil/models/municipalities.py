"""This module defines the models for IBGE municipality reference data."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RawMunicipality(BaseModel):
    """A municipality as returned by the IBGE localities API."""

    model_config = ConfigDict(extra="allow")

    id: int | str
    name: str = Field(..., alias="nome")


class Municipality(BaseModel):
    """A municipality offered as a search filter.

    Attributes:
        name: The municipality name.
        ibge_code: The 7-digit IBGE code, used as `codigoMunicipioIbge`.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    ibge_code: str
