"""
Run one Lighthouse DOM analysis from the CLI.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace

from app.audit.errors import AllStrategiesFailedError, InvalidTargetUrlError
from app.config import get_audit_settings
from app.schemas.dom_analysis import DomAnalysisResponse
from app.services.dom_analysis_service import DomAnalysisService


def main() -> int:
    parser = argparse.ArgumentParser(description="Audit one page and print its crawlability score.")
    parser.add_argument("url", help="Page URL to audit.")
    parser.add_argument(
        "--no-fallback",
        dest="no_fallback",
        action="store_true",
        help="Fail instead of falling back to the library audit when the CLI fails.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    settings = get_audit_settings()
    if args.no_fallback:
        settings = replace(settings, library_fallback_enabled=False)

    service = DomAnalysisService(settings=settings)
    try:
        result = asyncio.run(service.analyze(args.url))
    except InvalidTargetUrlError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except AllStrategiesFailedError as exc:
        print(json.dumps({"success": False, "url": exc.url, "error": str(exc)}, indent=2))
        return 1

    response = DomAnalysisResponse.from_result(result, service=settings.service_name)
    print(response.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
