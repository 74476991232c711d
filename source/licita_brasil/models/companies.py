"""This module defines the Pydantic models for company registry data.

The `Raw*` models mirror the payload of the public CNPJ registry
(publica.cnpj.ws); `Company` is the normalized profile returned by the API.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RawDescribed(BaseModel):
    """Any registry block that carries a `descricao` (and maybe a `subclasse`)."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    description: str | None = Field(None, alias="descricao")
    subclass: str | None = Field(None, alias="subclasse")


class RawNamed(BaseModel):
    """A registry block that carries a name and, for states, an acronym."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    name: str | None = Field(None, alias="nome")
    acronym: str | None = Field(None, alias="sigla")


class RawEstablishment(BaseModel):
    """The `estabelecimento` block of a CNPJ registry payload."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    trade_name: str | None = Field(None, alias="nome_fantasia")
    registration_status: str | None = Field(None, alias="situacao_cadastral")
    registration_status_date: str | None = Field(None, alias="data_situacao_cadastral")
    activity_start_date: str | None = Field(None, alias="data_inicio_atividade")
    main_activity: RawDescribed | None = Field(None, alias="atividade_principal")
    secondary_activities: list[RawDescribed] = Field(default_factory=list, alias="atividades_secundarias")
    street_type: str | None = Field(None, alias="tipo_logradouro")
    street: str | None = Field(None, alias="logradouro")
    number: str | None = Field(None, alias="numero")
    complement: str | None = Field(None, alias="complemento")
    district: str | None = Field(None, alias="bairro")
    city: RawNamed | None = Field(None, alias="cidade")
    state: RawNamed | None = Field(None, alias="estado")
    zip_code: str | None = Field(None, alias="cep")
    area_code: str | None = Field(None, alias="ddd1")
    phone: str | None = Field(None, alias="telefone1")
    email: str | None = None


class RawPartner(BaseModel):
    """One partner (sócio) of a company."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    name: str | None = Field(None, alias="nome")
    type: str | None = Field(None, alias="tipo")
    entry_date: str | None = Field(None, alias="data_entrada")
    qualification: RawDescribed | None = Field(None, alias="qualificacao_socio")


class RawSimples(BaseModel):
    """The Simples Nacional tax regime block."""

    model_config = ConfigDict(extra="allow")

    simples: str | None = None


class RawCompany(BaseModel):
    """A company as returned by the public CNPJ registry."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    legal_name: str | None = Field(None, alias="razao_social")
    share_capital: str | None = Field(None, alias="capital_social")
    size: RawDescribed | None = Field(None, alias="porte")
    legal_nature: RawDescribed | None = Field(None, alias="natureza_juridica")
    establishment: RawEstablishment | None = Field(None, alias="estabelecimento")
    partners: list[RawPartner] = Field(default_factory=list, alias="socios")
    simples: RawSimples | None = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Address(_CamelModel):
    """The registered address of a company."""

    street: str = ""
    number: str | None = None
    complement: str | None = None
    district: str | None = None
    municipality: str = ""
    state: str = ""
    zip_code: str | None = None


class Partner(_CamelModel):
    """A partner of a company."""

    name: str | None = None
    type: str | None = None
    entry_date: str | None = None
    qualification: str = ""


class Company(_CamelModel):
    """The normalized public profile of a company."""

    cnpj: str
    legal_name: str | None = None
    trade_name: str | None = None
    registration_status: str | None = None
    registration_status_date: str | None = None
    opening_date: str | None = None
    share_capital: str | None = None
    size: str | None = None
    legal_nature: str | None = None
    main_activity: str | None = None
    cnae: str | None = None
    secondary_activities: list[str] = Field(default_factory=list)
    address: Address = Field(default_factory=Address)
    phone: str | None = None
    email: str | None = None
    partners: list[Partner] = Field(default_factory=list)
    simples_nacional: bool = False

    @classmethod
    def from_raw(cls, cnpj: str, raw: RawCompany) -> "Company":
        """Builds the normalized profile from a registry payload.

        The trade name falls back to the legal name, and the phone is only
        filled when both the area code and the number are present.

        Args:
            cnpj: The cleaned CNPJ that was looked up.
            raw: The registry payload.

        Returns:
            The normalized company.
        """
        estab = raw.establishment or RawEstablishment()
        main_activity = estab.main_activity or RawDescribed()
        phone = f"({estab.area_code}) {estab.phone}" if estab.area_code and estab.phone else None

        return cls(
            cnpj=cnpj,
            legal_name=raw.legal_name,
            trade_name=estab.trade_name or raw.legal_name,
            registration_status=estab.registration_status,
            registration_status_date=estab.registration_status_date,
            opening_date=estab.activity_start_date,
            share_capital=raw.share_capital,
            size=raw.size.description if raw.size else None,
            legal_nature=raw.legal_nature.description if raw.legal_nature else None,
            main_activity=main_activity.description,
            cnae=main_activity.subclass,
            secondary_activities=[a.description for a in estab.secondary_activities if a.description],
            address=Address(
                street=f"{estab.street_type or ''} {estab.street or ''}".strip(),
                number=estab.number,
                complement=estab.complement,
                district=estab.district,
                municipality=(estab.city.name if estab.city else None) or "",
                state=(estab.state.acronym if estab.state else None) or "",
                zip_code=estab.zip_code,
            ),
            phone=phone,
            email=estab.email,
            partners=[
                Partner(
                    name=p.name,
                    type=p.type,
                    entry_date=p.entry_date,
                    qualification=(p.qualification.description if p.qualification else None) or "",
                )
                for p in raw.partners
            ],
            simples_nacional=bool(raw.simples and raw.simples.simples == "Sim"),
        )
