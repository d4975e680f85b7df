"""AWS Lambda handler for the mockup pipeline."""

import base64
import json

from ..clients import ImageFetcher, PrintfulClient
from ..config import CATALOG_PATH, HTTP_TIMEOUT, PRINTFUL_API_KEY, PRINTFUL_API_URL, default_polling
from ..errors import (
    DetectionError,
    FetchError,
    MockupTimeout,
    ProviderRejected,
    VariantNotFound,
)
from ..models import PrintArea
from ..services import (
    ComparisonService,
    JsonCatalogStore,
    MockupOrchestrator,
    RegionDetector,
    TemplateRegistry,
    default_color_key,
)

ACTIONS = ("detect", "generate", "compare")


def _response(status_code: int, body: dict) -> dict:
    return {"statusCode": status_code, "body": json.dumps(body)}


def _parse_body(event: dict) -> dict:
    # Handle SQS event format
    if "Records" in event:
        body = json.loads(event["Records"][0]["body"])
    else:
        body = json.loads(event.get("body") or "{}")
    if not isinstance(body, dict):
        raise TypeError(f"Request body must be a JSON object, got {type(body).__name__}")
    return body


def detect(body: dict, fetcher: ImageFetcher) -> dict:
    """Detect the print area of a template URL, or of a catalog variant."""
    detector = RegionDetector(default_color_key())
    if body.get("variant_id") is not None:
        registry = TemplateRegistry(JsonCatalogStore(CATALOG_PATH), fetcher, detector)
        variant_id = int(body["variant_id"])
        print_area = registry.get_print_area(variant_id, refresh=bool(body.get("refresh")))
        return {"variant_id": variant_id, "print_area": print_area.to_dict()}

    if not body.get("template_url"):
        raise ValueError("Missing 'template_url' or 'variant_id' field")
    print_area = detector.detect(fetcher.fetch_image(body["template_url"]))
    return {"template_url": body["template_url"], "print_area": print_area.to_dict()}


def generate(body: dict) -> dict:
    """Render the provider mockup for a variant and design."""
    if body.get("variant_id") is None or not body.get("design_url"):
        raise ValueError("Missing 'variant_id' or 'design_url' field")

    client = PrintfulClient(PRINTFUL_API_KEY, base_url=PRINTFUL_API_URL, timeout=HTTP_TIMEOUT)
    orchestrator = MockupOrchestrator(client, default_polling())
    variant_id = int(body["variant_id"])
    result = orchestrator.generate_mockup(variant_id, body["design_url"])
    return {
        "task_key": result.task_key,
        "attempts": result.attempts,
        "mockup_url": result.url_for(variant_id),
        "mockups": [{"placement": m.placement, "url": m.url} for m in result.mockups],
    }


def compare(body: dict, fetcher: ImageFetcher) -> dict:
    """Composite locally and compare with the provider mockup."""
    if not body.get("template_url") or not body.get("design_url") or not body.get("print_area"):
        raise ValueError("Missing 'template_url', 'design_url' or 'print_area' field")

    service = ComparisonService(fetcher, detector=RegionDetector(default_color_key()))
    report = service.compare(
        body["template_url"],
        body["design_url"],
        PrintArea.from_dict(body["print_area"]),
        provider_mockup_url=body.get("provider_mockup_url"),
    )
    analysis = report.analysis
    return {
        "difference": report.difference,
        "template_size": list(analysis.template_size),
        "detected_print_area": analysis.detected.to_dict() if analysis.detected else None,
        "orientation_match": analysis.orientation_match,
        "stages": [{"name": s.name, "description": s.description} for s in report.stages],
        "sheet_png": base64.b64encode(service.render(report)).decode("ascii"),
    }


def handler(event, context):
    """
    AWS Lambda handler - triggered by SQS or HTTP.

    Input payload:
    {
        "action": "detect" | "generate" | "compare",
        "template_url": "...",          # detect, compare
        "variant_id": 4012,             # detect (catalog), generate
        "design_url": "...",            # generate, compare
        "print_area": {"x": .., "y": .., "width": .., "height": ..},  # compare
        "provider_mockup_url": "..."    # compare, optional
    }

    Mockup failures are reported in the response and never raised, so a
    checkout calling this is never blocked by a cosmetic preview.
    """
    try:
        body = _parse_body(event)
    except (json.JSONDecodeError, KeyError, IndexError, TypeError):
        return _response(400, {"error": "Invalid request body"})

    action = body.get("action", "detect")
    if action not in ACTIONS:
        return _response(400, {"error": f"Unknown action '{action}'. Valid: {list(ACTIONS)}"})

    fetcher = ImageFetcher(timeout=HTTP_TIMEOUT)
    print(f"Processing {action} request", flush=True)

    try:
        if action == "detect":
            result = detect(body, fetcher)
        elif action == "generate":
            result = generate(body)
        else:
            result = compare(body, fetcher)
        return _response(200, result)

    except ValueError as e:
        return _response(400, {"error": str(e)})
    except VariantNotFound as e:
        return _response(404, {"error": str(e)})
    except DetectionError as e:
        return _response(422, {"error": str(e), "kind": "placeholder_not_found"})
    except ProviderRejected as e:
        return _response(422, {"error": e.detail, "kind": "provider_rejected"})
    except FetchError as e:
        return _response(502, {"error": str(e), "kind": "fetch_failed"})
    except MockupTimeout as e:
        return _response(504, {"error": str(e), "kind": "timeout"})
    except Exception as e:
        print(f"ERROR: {e}", flush=True)
        return _response(500, {"error": str(e)})


# Local testing
if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m mockup_pipeline.handlers.worker <action> '<json payload>'")
        print()
        print("Actions:")
        print("  detect   - {\"template_url\": ...} or {\"variant_id\": ..., \"refresh\": true}")
        print("  generate - {\"variant_id\": ..., \"design_url\": ...}")
        print("  compare  - {\"template_url\": ..., \"design_url\": ..., \"print_area\": {...},")
        print("              \"provider_mockup_url\": ...}")
        print()
        print("Example:")
        print('  python -m mockup_pipeline.handlers.worker detect \'{"template_url": "https://example.com/frame.png"}\'')
        sys.exit(1)

    test_input = {"action": sys.argv[1]}
    if len(sys.argv) > 2:
        test_input.update(json.loads(sys.argv[2]))

    print("Running with input:")
    print(json.dumps(test_input, indent=2))
    print()

    result = handler({"body": json.dumps(test_input)}, None)
    body = json.loads(result["body"])
    if "sheet_png" in body:
        with open("comparison.png", "wb") as f:
            f.write(base64.b64decode(body.pop("sheet_png")))
        print("Wrote comparison.png")
    print(f"\nResult ({result['statusCode']}):")
    print(json.dumps(body, indent=2))
