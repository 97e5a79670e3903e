"""
Larder - Unit conversion.

A fixed conversion table keyed "{from}_to_{to}" on normalized unit names.
When only the inverse key exists the value is divided instead of
multiplied. Anything else is an explicit error: the unconverted value is
never returned as if it were converted.
"""

from dataclasses import dataclass

from larder.errors import ToolExecutionError
from larder.tools.normalize import clean_unit

CONVERSIONS: dict[str, float] = {
    # Volume to ml
    "cup_to_ml": 236.588,
    "tbsp_to_ml": 14.787,
    "tsp_to_ml": 4.929,
    "l_to_ml": 1000,
    "pint_to_ml": 473.176,
    "quart_to_ml": 946.353,
    "gallon_to_ml": 3785.41,
    # Weight to grams
    "oz_to_g": 28.35,
    "lb_to_g": 453.592,
    "kg_to_g": 1000,
}


@dataclass
class Conversion:
    """A converted amount with the amount it came from."""

    amount: float
    unit: str
    original_amount: float
    original_unit: str

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "unit": self.unit,
            "original": {"amount": self.original_amount, "unit": self.original_unit},
        }


class UnitHandler:
    """Conversion between cooking units."""

    @staticmethod
    def factor(from_unit: str, to_unit: str) -> float | None:
        """Multiplier from one unit to another, or None if unsupported."""
        src = clean_unit(from_unit)
        dst = clean_unit(to_unit)

        if src == dst:
            return 1.0

        direct = CONVERSIONS.get(f"{src}_to_{dst}")
        if direct is not None:
            return direct

        inverse = CONVERSIONS.get(f"{dst}_to_{src}")
        if inverse is not None:
            return 1 / inverse

        return None

    @classmethod
    def convert(cls, amount: float, from_unit: str, to_unit: str) -> Conversion:
        """
        Convert an amount between units.

        Raises:
            ToolExecutionError: If the conversion is not in the table
        """
        factor = cls.factor(from_unit, to_unit)
        if factor is None:
            raise ToolExecutionError(f"Conversion not supported: {from_unit} to {to_unit}")

        return Conversion(
            amount=amount * factor,
            unit=to_unit,
            original_amount=amount,
            original_unit=from_unit,
        )


def convert(amount: float, from_unit: str, to_unit: str) -> float:
    """Convert and return just the amount. See `UnitHandler.convert`."""
    return UnitHandler.convert(amount, from_unit, to_unit).amount
