"""Vehicle class for motorcycle identification."""

from typing import Optional


class Vehicle:
    """A client's motorcycle as registered at the shop."""

    def __init__(
        self,
        id: str,
        manufacturer: str,
        model: str,
        year: int,
        plate: str,
        color: Optional[str] = None,
    ):
        self.id = id
        self.manufacturer = manufacturer
        self.model = model
        self.year = year
        self.plate = plate
        self.color = color

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        return f"{self.year} {self.manufacturer} {self.model} ({self.plate})"
