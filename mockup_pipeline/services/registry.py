"""Template registry - variant templates and their cached print areas."""

import logging

from ..clients.images import ImageFetcher
from ..errors import DetectionError, FetchError
from ..models import PrintArea, ProductVariant
from .catalog import CatalogStore
from .detector import RegionDetector

logger = logging.getLogger(__name__)


class TemplateRegistry:
    """
    Map variants to (template URL, print area).

    Print areas are detected once per template and cached in the catalog.
    Detection is deterministic, so overwriting a cached value with a fresh
    detection of the same template is always safe.
    """

    def __init__(self, store: CatalogStore, fetcher: ImageFetcher, detector: RegionDetector | None = None):
        self.store = store
        self.fetcher = fetcher
        self.detector = detector or RegionDetector()

    def get_template(self, variant_id: int) -> tuple[str, PrintArea]:
        """Template URL and print area for a variant, detecting on first use."""
        variant = self.store.get_variant(variant_id)
        return variant.template_url, self.get_print_area(variant_id)

    def get_print_area(self, variant_id: int, refresh: bool = False) -> PrintArea:
        """
        Cached print area, or detect it from the template and cache it.

        Raises:
            DetectionError: template has no placeholder region
            FetchError: template could not be downloaded or decoded
        """
        variant = self.store.get_variant(variant_id)
        if variant.print_area and not refresh:
            return variant.print_area

        logger.info(f"Detecting print area for variant {variant_id} from {variant.template_url}")
        template = self.fetcher.fetch_image(variant.template_url)
        print_area = self.detector.detect(template)
        self.store.save_print_area(variant_id, print_area)
        return print_area

    def ensure_publishable(self, variant_id: int) -> ProductVariant:
        """
        Check a variant can be published.

        A variant whose template has no detectable placeholder must not go
        live; DetectionError is raised for catalog maintainers.
        """
        variant = self.store.get_variant(variant_id)
        if not variant.template_url:
            raise DetectionError(f"Variant {variant_id} has no template image")
        self.get_print_area(variant_id)
        return self.store.get_variant(variant_id)

    def refresh_all(self) -> dict[int, PrintArea | str]:
        """Re-detect every active variant. Returns print areas, or error text per variant."""
        results: dict[int, PrintArea | str] = {}
        for variant in self.store.list_variants():
            if not variant.is_active:
                continue
            try:
                results[variant.id] = self.get_print_area(variant.id, refresh=True)
            except (DetectionError, FetchError) as e:
                logger.warning(f"Variant {variant.id}: {e}")
                results[variant.id] = str(e)
        return results
