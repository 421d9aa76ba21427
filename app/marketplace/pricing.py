"""
Booking price calculator.

Formula:
    subtotal = base_rate + distance_km × per_km_rate + load_fee
               + helpers_count × helper_rate
    total    = max(subtotal × complexity_multiplier, MINIMUM_CHARGE)

All money values are Decimal rounded half-up to 2 decimal places. The
multiplier depends on the move type; the per-km rate and load fee come
from the vehicle's suggested rates unless the caller overrides them.

Usage:
    from marketplace.pricing import quote_booking

    breakdown = quote_booking(
        distance_km=Decimal("12.5"),
        vehicle_type=VehicleType.MEDIUM_TRUCK,
        move_type=MoveType.OFFICE,
        helpers_count=2,
    )
    booking.quoted_total = breakdown.total
    booking.pricing = breakdown.to_dict()
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from marketplace.models import MoveType, VehicleType

TWO_PLACES = Decimal("0.01")

MINIMUM_CHARGE = Decimal("400.00")
BASE_FEE = Decimal("250.00")
HELPER_RATE = Decimal("150.00")

SUGGESTED_PER_KM_RATES: dict[str, Decimal] = {
    VehicleType.SMALL_VAN: Decimal("9.00"),
    VehicleType.MEDIUM_TRUCK: Decimal("18.00"),
    VehicleType.LARGE_TRUCK: Decimal("25.00"),
    VehicleType.OTHER: Decimal("12.00"),
}

SUGGESTED_LOAD_FEES: dict[str, Decimal] = {
    VehicleType.SMALL_VAN: Decimal("150.00"),
    VehicleType.MEDIUM_TRUCK: Decimal("200.00"),
    VehicleType.LARGE_TRUCK: Decimal("300.00"),
    VehicleType.OTHER: Decimal("150.00"),
}

COMPLEXITY_MULTIPLIERS: dict[str, Decimal] = {
    MoveType.APARTMENT: Decimal("1.0"),
    MoveType.OFFICE: Decimal("1.3"),
    MoveType.SINGLE_ITEM: Decimal("0.7"),
    MoveType.OTHER: Decimal("1.0"),
}


def round_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceBreakdown:
    """Itemised price for a booking."""

    base_rate: Decimal
    distance_km: Decimal
    per_km_rate: Decimal
    distance_cost: Decimal
    load_fee: Decimal
    helpers_count: int
    helpers_cost: Decimal
    subtotal: Decimal
    complexity_multiplier: Decimal
    total: Decimal
    minimum_applied: bool

    def to_dict(self) -> dict:
        """JSON-safe representation stored on Booking.pricing."""
        return {
            "base_rate": str(self.base_rate),
            "distance_km": str(self.distance_km),
            "per_km_rate": str(self.per_km_rate),
            "distance_cost": str(self.distance_cost),
            "load_fee": str(self.load_fee),
            "helpers_count": self.helpers_count,
            "helpers_cost": str(self.helpers_cost),
            "subtotal": str(self.subtotal),
            "complexity_multiplier": str(self.complexity_multiplier),
            "total": str(self.total),
            "minimum_applied": self.minimum_applied,
        }


def get_suggested_rates(vehicle_type: str) -> dict[str, Decimal]:
    """
    Suggested per-km rate and load fee for a vehicle type.

    Unknown vehicle types get the OTHER rates.
    """
    if vehicle_type not in SUGGESTED_PER_KM_RATES:
        vehicle_type = VehicleType.OTHER
    return {
        "per_km_rate": SUGGESTED_PER_KM_RATES[vehicle_type],
        "load_fee": SUGGESTED_LOAD_FEES[vehicle_type],
    }


def calculate_price(
    distance_km: Decimal,
    per_km_rate: Decimal,
    base_rate: Decimal = BASE_FEE,
    load_fee: Decimal = SUGGESTED_LOAD_FEES[VehicleType.OTHER],
    helpers_count: int = 0,
    helper_rate: Decimal = HELPER_RATE,
    move_type: str = MoveType.APARTMENT,
) -> PriceBreakdown:
    """
    Price a move.

    Raises:
        ValueError: If distance, rates or helper count are negative
    """
    distance_km = Decimal(distance_km)
    per_km_rate = Decimal(per_km_rate)
    if distance_km < 0 or per_km_rate < 0 or helpers_count < 0:
        raise ValueError("Distance, rates and helper count must not be negative")

    multiplier = COMPLEXITY_MULTIPLIERS.get(move_type, Decimal("1.0"))

    distance_cost = round_money(distance_km * per_km_rate)
    helpers_cost = round_money(Decimal(helpers_count) * Decimal(helper_rate))
    subtotal = round_money(
        Decimal(base_rate) + distance_cost + Decimal(load_fee) + helpers_cost
    )
    adjusted = round_money(subtotal * multiplier)
    minimum_applied = adjusted < MINIMUM_CHARGE
    total = MINIMUM_CHARGE if minimum_applied else adjusted

    return PriceBreakdown(
        base_rate=round_money(base_rate),
        distance_km=round_money(distance_km),
        per_km_rate=round_money(per_km_rate),
        distance_cost=distance_cost,
        load_fee=round_money(load_fee),
        helpers_count=helpers_count,
        helpers_cost=helpers_cost,
        subtotal=subtotal,
        complexity_multiplier=multiplier,
        total=total,
        minimum_applied=minimum_applied,
    )


def quote_booking(
    distance_km: Decimal,
    vehicle_type: str,
    move_type: str = MoveType.APARTMENT,
    helpers_count: int = 0,
) -> PriceBreakdown:
    """Price a move using the vehicle's suggested rates."""
    rates = get_suggested_rates(vehicle_type)
    return calculate_price(
        distance_km=distance_km,
        per_km_rate=rates["per_km_rate"],
        load_fee=rates["load_fee"],
        helpers_count=helpers_count,
        move_type=move_type,
    )
