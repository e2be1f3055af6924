"""Steadfast request schemas."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import SteadfastCredentials


class CredentialsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field("", alias="apiKey")
    secret_key: str = Field("", alias="secretKey")

    def to_domain(self) -> SteadfastCredentials:
        return SteadfastCredentials(api_key=self.api_key, secret_key=self.secret_key)


class CourierDataModel(BaseModel):
    invoice: str = ""
    recipient_name: str = ""
    recipient_phone: str = ""
    recipient_address: str = ""
    cod_amount: Union[int, float, str, None] = 0
    note: str = ""


class OrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    credentials: Optional[CredentialsModel] = None
    courier_data: CourierDataModel = Field(..., alias="courierData")
    record: bool = Field(default=True, description="Record a local entry after a successful submission.")


class FraudCheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone: str = ""
    api_key: str = Field("", alias="apiKey")
    secret_key: str = Field("", alias="secretKey")
