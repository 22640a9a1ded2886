# backend/label_designer/models/records.py
"""
Bound data record (a shipment) that supplies live values for label fields.

Every attribute is optional; the binding resolver degrades gracefully when
a part is missing. Plain dicts with the same shape are accepted as well.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(extra="allow")


class Party(_Record):
    """Sender or receiver block."""

    name: str | None = Field(default=None, description="Name")
    company: str | None = Field(default=None, description="Company")
    address: str | None = Field(default=None, description="Postal address")
    phone: str | None = Field(default=None, description="Phone")
    email: str | None = Field(default=None, description="E-mail")


class PackageDimensions(_Record):
    length: float | None = Field(default=None, description="Length, cm")
    width: float | None = Field(default=None, description="Width, cm")
    height: float | None = Field(default=None, description="Height, cm")


class PackageInfo(_Record):
    weight: float | str | None = Field(default=None, description="Weight, kg")
    dimensions: PackageDimensions | None = Field(default=None, description="L x W x H, cm")
    description: str | None = Field(default=None, description="Contents")


class ShippingInfo(_Record):
    service_level: str | None = Field(default=None, description="Express, Standard, ...")
    estimated_delivery: date | str | None = Field(default=None, description="Expected date")


class ShipmentRecord(_Record):
    """One shipment bound to a label."""

    tracking_number: str | None = Field(default=None, description="Tracking number")
    status: str | None = Field(default=None, description="Shipment status")
    sender: Party | None = Field(default=None, description="Sender")
    receiver: Party | None = Field(default=None, description="Receiver")
    package: PackageInfo | None = Field(default=None, description="Package")
    shipping: ShippingInfo | None = Field(default=None, description="Shipping service")
