"""Printful mockup generator API client."""

import logging
import re
import time

import requests

from ..errors import ProviderError
from ..models import Mockup, TaskPoll

logger = logging.getLogger(__name__)

DEFAULT_PLACEMENT = "default"
DEFAULT_AREA_WIDTH = 1800
DEFAULT_AREA_HEIGHT = 2400
RATIO_MATCH_THRESHOLD = 0.05
RATE_LIMIT_WAIT = 60     # seconds, when the provider does not say
RATE_LIMIT_BUFFER = 10   # added to the provider's retry-after

_SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)[\"″]?\s*[x×]\s*(\d+(?:\.\d+)?)[\"″]?", re.IGNORECASE)
_RETRY_AFTER_PATTERN = re.compile(r"after (\d+) seconds")


def parse_size_ratio(name: str) -> float | None:
    """Width/height ratio from a variant name like '18″×24″'. None if absent."""
    match = _SIZE_PATTERN.search(name or "")
    if not match:
        return None
    width, height = float(match.group(1)), float(match.group(2))
    if not width or not height:
        return None
    return width / height


def pick_template(templates: list[dict], ratio: float | None) -> dict | None:
    """
    Pick the template whose print-area ratio best matches the variant.

    Uploaded files are rotated when orientations differ, so the rotated
    ratio is tried first; the straight ratio wins only if it is closer.
    """
    sized = [t for t in templates if t.get("print_area_width") and t.get("print_area_height")]
    if not templates:
        return None
    if ratio is None or not sized:
        return templates[0]

    def closest(target: float) -> tuple[dict, float]:
        best, best_diff = sized[0], float("inf")
        for tmpl in sized:
            diff = abs(tmpl["print_area_width"] / tmpl["print_area_height"] - target)
            if diff < best_diff:
                best, best_diff = tmpl, diff
        return best, best_diff

    best, diff = closest(1 / ratio)
    if diff > RATIO_MATCH_THRESHOLD:
        straight, straight_diff = closest(ratio)
        if straight_diff < diff:
            best, diff = straight, straight_diff
    if diff >= RATIO_MATCH_THRESHOLD:
        logger.info(f"No close template ratio match (diff {diff:.3f}), using closest: {best.get('template_id')}")
    return best


def _error_message(data: dict) -> str:
    """Printful errors look like {code, result: "Reason", error: str | {message}}."""
    error = data.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if data.get("result"):
        return str(data["result"])
    return str(data)


class PrintfulClient:
    """Low-level Printful mockup generator client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.printful.com",
        timeout: float = 30,
        max_retries: int = 5,
        sleep=time.sleep,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._sleep = sleep

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _get(self, path: str, params: dict | None = None) -> dict:
        """GET a Printful endpoint and return its `result`."""
        url = f"{self.base_url}{path}"
        try:
            response = requests.get(url, params=params, headers=self._get_headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise ProviderError(f"Printful request failed: {e}") from e

        data = self._json(response)
        if not response.ok:
            raise ProviderError(f"Printful error: {_error_message(data)}", status_code=response.status_code)
        return data.get("result") or {}

    @staticmethod
    def _json(response: requests.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {"error": response.text or f"HTTP {response.status_code}"}
        return data if isinstance(data, dict) else {"result": data}

    def _request_with_retry(self, url: str, payload: dict) -> requests.Response:
        """POST with a provider-directed wait on 429 errors."""
        response = None
        for attempt in range(self.max_retries):
            try:
                response = requests.post(url, json=payload, headers=self._get_headers(), timeout=self.timeout)
            except requests.RequestException as e:
                raise ProviderError(f"Printful request failed: {e}") from e

            if response.status_code != 429:
                return response

            wait_time = RATE_LIMIT_WAIT
            match = _RETRY_AFTER_PATTERN.search(str(self._json(response).get("result", "")))
            if match:
                wait_time = int(match.group(1)) + RATE_LIMIT_BUFFER
            logger.warning(f"Rate limited by Printful, waiting {wait_time}s (attempt {attempt + 1}/{self.max_retries})")
            self._sleep(wait_time)

        return response

    def get_variant(self, variant_id: int) -> dict:
        """Catalog variant info: {variant: {...}, product: {...}}."""
        return self._get(f"/products/variant/{variant_id}")

    def get_templates(self, product_id: int) -> list[dict]:
        """Mockup generator templates for a product."""
        return self._get(f"/mockup-generator/templates/{product_id}").get("templates") or []

    def _resolve_placement(self, variant_id: int) -> tuple[int, str, int, int]:
        """Return (product_id, placement, area_width, area_height) for a variant."""
        product_id = variant_id
        placement = DEFAULT_PLACEMENT
        area_width, area_height = DEFAULT_AREA_WIDTH, DEFAULT_AREA_HEIGHT

        try:
            variant = self.get_variant(variant_id).get("variant", {})
            product_id = variant.get("product_id") or variant_id
        except ProviderError as e:
            logger.warning(f"Failed to resolve product for variant {variant_id}: {e}")
            return product_id, placement, area_width, area_height

        try:
            templates = self.get_templates(product_id)
        except ProviderError as e:
            logger.warning(f"Failed to fetch templates for product {product_id}: {e}")
            return product_id, placement, area_width, area_height

        ratio = parse_size_ratio(variant.get("size") or variant.get("name") or "")
        template = pick_template(templates, ratio)
        if template:
            if template.get("placement"):
                placement = template["placement"]
            elif template.get("is_template_on_front") and "All-Over Print" in (variant.get("name") or ""):
                placement = "front"
            area_width = template.get("print_area_width") or area_width
            area_height = template.get("print_area_height") or area_height
            logger.debug(f"Variant {variant_id}: template {template.get('template_id')}, placement {placement}")

        return product_id, placement, area_width, area_height

    def create_task(self, variant_ids: list[int], design_url: str, format: str = "jpg") -> str:
        """
        Submit a mockup generation task.

        Args:
            variant_ids: Catalog variant ids to render (the first picks the product)
            design_url: Publicly reachable design image URL
            format: "jpg" or "png"

        Returns:
            The provider task key
        """
        if not variant_ids:
            raise ValueError("At least one variant id is required")

        product_id, placement, area_width, area_height = self._resolve_placement(variant_ids[0])
        files = [{
            "placement": placement,
            "image_url": design_url,
            "position": {
                "area_width": area_width,
                "area_height": area_height,
                "width": area_width,
                "height": area_height,
                "top": 0,
                "left": 0,
            },
        }]
        url = f"{self.base_url}/mockup-generator/create-task/{product_id}"

        switched_placement = False
        while True:
            response = self._request_with_retry(url, {"variant_ids": variant_ids, "format": format, "files": files})
            data = self._json(response)
            if response.ok:
                task_key = (data.get("result") or {}).get("task_key")
                if not task_key:
                    raise ProviderError(f"Unexpected Printful response: {data}", status_code=response.status_code)
                return task_key

            message = _error_message(data)
            # Some all-over-print products only accept the dtfabric placement.
            if (
                not switched_placement
                and "File type front is not allowed" in message
                and any(f["placement"] == "front" for f in files)
            ):
                logger.info("Placement 'front' rejected, retrying with 'front_dtfabric'")
                for f in files:
                    if f["placement"] == "front":
                        f["placement"] = "front_dtfabric"
                switched_placement = True
                continue

            raise ProviderError(f"Printful error: {message}", status_code=response.status_code)

    def poll_task(self, task_key: str) -> TaskPoll:
        """Poll a task. Returns the raw status with mockups or error."""
        result = self._get("/mockup-generator/task", params={"task_key": task_key})
        mockups = [
            Mockup(
                placement=m.get("placement", ""),
                url=m.get("mockup_url", ""),
                variant_ids=tuple(m.get("variant_ids") or ()),
            )
            for m in result.get("mockups") or []
        ]
        error = result.get("error")
        if error is not None and not isinstance(error, str):
            error = _error_message({"error": error})
        return TaskPoll(status=result.get("status", "unknown"), mockups=mockups, error=error or None)
