"""Rental agreement generator form."""
from __future__ import annotations

import re
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from dealdirect_client.application.exceptions import ValidationError

_TEN_DIGITS = re.compile(r"^\d{10}$")
_AADHAAR_LAST4 = re.compile(r"^\d{4}$")
MIN_PARTY_AGE = 18


class AgreementRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    landlord_name: str = ""
    landlord_age: int | None = None
    landlord_address: str = ""
    landlord_phone: str = ""
    landlord_aadhaar: str = ""

    tenant_name: str = ""
    tenant_age: int | None = None
    tenant_address: str = ""
    tenant_phone: str = ""
    tenant_aadhaar: str = ""

    property_address: str = ""
    state: str = ""
    city: str = ""
    property_type: str = "Residential"
    bhk_type: str = ""
    furnishing: str = "Unfurnished"
    carpet_area: float | None = None

    schedule_east: str = ""
    schedule_west: str = ""
    schedule_north: str = ""
    schedule_south: str = ""
    lock_in_months: int | None = None
    include_police_verification: bool = False
    include_force_majeure: bool = True
    include_indemnity: bool = True
    include_diplomatic_clause: bool = False

    rent_amount: float | None = None
    security_deposit: float | None = None
    maintenance_charges: float | None = None

    start_date: date | None = None
    duration_months: int = 11
    notice_period: int = 1
    rent_due_day: int = 5
    additional_terms: str = ""

    @model_validator(mode="after")
    def _check_parties(self) -> AgreementRequest:
        if not self.landlord_name.strip() or not self.tenant_name.strip():
            raise ValueError("Please fill in both Landlord and Tenant names")
        if not self.landlord_age or not self.tenant_age:
            raise ValueError("Please provide age for both parties")
        if self.landlord_age < MIN_PARTY_AGE or self.tenant_age < MIN_PARTY_AGE:
            raise ValueError("Both landlord and tenant must be at least 18 years old")
        if not self.landlord_address.strip() or not self.tenant_address.strip():
            raise ValueError("Please provide permanent address for both parties")
        for label, phone in (("landlord", self.landlord_phone), ("tenant", self.tenant_phone)):
            if phone and not _TEN_DIGITS.match(phone):
                raise ValueError(f"Please enter a valid 10-digit {label} phone number")
        for label, aadhaar in (("Landlord", self.landlord_aadhaar), ("Tenant", self.tenant_aadhaar)):
            if aadhaar and not _AADHAAR_LAST4.match(aadhaar):
                raise ValueError(f"{label} Aadhaar should be last 4 digits only")
        return self

    @model_validator(mode="after")
    def _check_property(self) -> AgreementRequest:
        if not self.property_address.strip() or not self.state or not self.city.strip():
            raise ValueError("Please fill in all property details")
        if self.carpet_area is not None and self.carpet_area <= 0:
            raise ValueError("Carpet area should be a positive number")
        if self.state.lower() == "karnataka":
            schedule = (self.schedule_east, self.schedule_west, self.schedule_north, self.schedule_south)
            if not all(side.strip() for side in schedule):
                raise ValueError(
                    "Please fill the Schedule of Property (East/West/North/South) for Karnataka."
                )
        return self

    @model_validator(mode="after")
    def _check_terms(self) -> AgreementRequest:
        if not self.rent_amount or not self.security_deposit or not self.start_date:
            raise ValueError("Please fill in all financial and date details")
        if self.rent_amount <= 0 or self.security_deposit <= 0:
            raise ValueError("Rent and deposit must be positive amounts")
        # Delhi agreements always carry the police verification clause.
        if self.state.lower() == "delhi":
            self.include_police_verification = True
        return self

    @classmethod
    def from_form(cls, data: dict[str, Any]) -> AgreementRequest:
        """Build from form data, surfacing the first problem as a ValidationError."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            cause = (first.get("ctx") or {}).get("error")
            raise ValidationError(str(cause) if cause else first["msg"]) from exc

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
