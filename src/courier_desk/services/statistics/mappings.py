"""Courier table for the aggregator feed.

Each row maps an internal slug to the display name used as a key in the
aggregator's ``Summaries`` object and to that courier's counter field names.
Adding a courier only requires a new row.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CourierMapping:
    slug: str
    display_name: str
    total_field: str
    success_field: str
    cancel_field: str


COURIER_MAPPINGS: tuple[CourierMapping, ...] = (
    CourierMapping(
        slug="pathao",
        display_name="Pathao",
        total_field="Total Delivery",
        success_field="Successful Delivery",
        cancel_field="Canceled Delivery",
    ),
    CourierMapping(
        slug="steadfast",
        display_name="Steadfast",
        total_field="Total Parcels",
        success_field="Delivered Parcels",
        cancel_field="Canceled Parcels",
    ),
    CourierMapping(
        slug="redx",
        display_name="RedX",
        total_field="Total Parcels",
        success_field="Delivered Parcels",
        cancel_field="Canceled Parcels",
    ),
    CourierMapping(
        slug="carrybee",
        display_name="Carrybee",
        total_field="Total Parcels",
        success_field="Delivered Parcels",
        cancel_field="Canceled Parcels",
    ),
)


def display_name_for(slug: str, mappings: tuple[CourierMapping, ...] = COURIER_MAPPINGS) -> str:
    for mapping in mappings:
        if mapping.slug == slug:
            return mapping.display_name
    return slug.title()
