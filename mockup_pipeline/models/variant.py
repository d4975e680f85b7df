"""Product variant model - a purchasable size/finish of a product."""

from dataclasses import dataclass
from typing import Any

from .print_area import PrintArea


@dataclass
class ProductVariant:
    """A catalog variant and its cached placeholder location."""

    id: int
    name: str
    product_id: int
    template_url: str
    print_area: PrintArea | None = None  # populated lazily by detection
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "product_id": self.product_id,
            "template_url": self.template_url,
            "print_area": self.print_area.to_dict() if self.print_area else None,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductVariant":
        print_area = data.get("print_area")
        return cls(
            id=int(data["id"]),
            name=data.get("name", ""),
            product_id=int(data.get("product_id") or data["id"]),
            template_url=data.get("template_url", ""),
            print_area=PrintArea.from_dict(print_area) if print_area else None,
            is_active=bool(data.get("is_active", True)),
        )
