from typing import Annotated, ClassVar

from pydantic import Field

from credisphere.common import CamelModel, NonEmptyStr, UpdateModel

PartyName = Annotated[NonEmptyStr, Field(max_length=255)]
AccountNumber = Annotated[NonEmptyStr, Field(max_length=255)]
Address = Annotated[NonEmptyStr, Field(max_length=500)]
RequiredMobile = Annotated[NonEmptyStr, Field(max_length=20)]
OptionalMobile = Annotated[str, Field(max_length=20)]
Reference = Annotated[str, Field(max_length=255)]


class PartyCreate(CamelModel):
    party_name: PartyName
    account_number: AccountNumber
    address: Address
    mobile1: RequiredMobile
    mobile2: OptionalMobile | None = None
    reference: Reference | None = None
    reference_mobile1: OptionalMobile | None = None
    reference_mobile2: OptionalMobile | None = None


class PartyUpdate(UpdateModel):
    NULLABLE: ClassVar[frozenset[str]] = frozenset(
        {"mobile2", "reference", "reference_mobile1", "reference_mobile2"},
    )

    party_name: PartyName | None = None
    account_number: AccountNumber | None = None
    address: Address | None = None
    mobile1: RequiredMobile | None = None
    mobile2: OptionalMobile | None = None
    reference: Reference | None = None
    reference_mobile1: OptionalMobile | None = None
    reference_mobile2: OptionalMobile | None = None


class PartyResponse(CamelModel):
    id: int
    party_name: str
    account_number: str
    address: str
    mobile1: str
    mobile2: str | None = None
    reference: str | None = None
    reference_mobile1: str | None = None
    reference_mobile2: str | None = None
    created_at: str
    updated_at: str
