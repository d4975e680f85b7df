"""Catalog stores for product variants."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from ..errors import VariantNotFound
from ..models import PrintArea, ProductVariant

logger = logging.getLogger(__name__)


class CatalogStore(Protocol):
    """Read/write access to product variant records."""

    def get_variant(self, variant_id: int) -> ProductVariant: ...

    def save_print_area(self, variant_id: int, print_area: PrintArea) -> None: ...

    def list_variants(self) -> list[ProductVariant]: ...


class InMemoryCatalogStore:
    """Dict-backed store, used by tests and one-off scripts."""

    def __init__(self, variants: list[ProductVariant] | None = None):
        self.variants: dict[int, ProductVariant] = {v.id: v for v in variants or []}

    def add(self, variant: ProductVariant):
        self.variants[variant.id] = variant

    def get_variant(self, variant_id: int) -> ProductVariant:
        if variant_id not in self.variants:
            raise VariantNotFound(f"Unknown variant: {variant_id}")
        return self.variants[variant_id]

    def save_print_area(self, variant_id: int, print_area: PrintArea) -> None:
        self.get_variant(variant_id).print_area = print_area

    def list_variants(self) -> list[ProductVariant]:
        return list(self.variants.values())


class JsonCatalogStore:
    """
    Variants kept in a JSON file: {"variants": [{...}, ...]}.

    Every call re-reads the file, so concurrent writers are last-writer-wins.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[int, ProductVariant]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text())
        return {v.id: v for v in (ProductVariant.from_dict(item) for item in data.get("variants", []))}

    def _dump(self, variants: dict[int, ProductVariant]):
        """Replace the catalog file atomically via a sibling temp file."""
        payload = {"variants": [v.to_dict() for v in variants.values()]}
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def add(self, variant: ProductVariant):
        variants = self._load()
        variants[variant.id] = variant
        self._dump(variants)

    def get_variant(self, variant_id: int) -> ProductVariant:
        variants = self._load()
        if variant_id not in variants:
            raise VariantNotFound(f"Unknown variant: {variant_id}")
        return variants[variant_id]

    def save_print_area(self, variant_id: int, print_area: PrintArea) -> None:
        variants = self._load()
        if variant_id not in variants:
            raise VariantNotFound(f"Unknown variant: {variant_id}")
        variants[variant_id].print_area = print_area
        self._dump(variants)
        logger.debug(f"Saved print area for variant {variant_id} to {self.path}")

    def list_variants(self) -> list[ProductVariant]:
        return list(self._load().values())
