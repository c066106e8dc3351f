#!/usr/bin/env python3
"""Grade a local document image without running the API.

Runs Tesseract on the image, computes pixel statistics and prints the same
JSON report /api/grade would return.

Examples:
  python -m grade_api.tools.grade_file scan.jpg
  python -m grade_api.tools.grade_file scan.jpg --compare remote_ocr.txt --lang deu
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import json
import os
import sys

from grade_api.ocr import InvalidImageError, configure_tesseract, run_tesseract
from grade_api.pipeline import grade_image


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser()
    p.add_argument("image", help="Path to a document image (png, jpeg, webp, tiff)")
    p.add_argument("--compare", default="", help="Text file holding a second OCR transcription to cross-check against")
    p.add_argument("--lang", default="eng", help="Tesseract language (default: eng)")
    p.add_argument(
        "--tesseract-path",
        default=os.getenv("TESSERACT_PATH", ""),
        help="Explicit tesseract binary (default: $TESSERACT_PATH, else PATH lookup)",
    )
    args = p.parse_args(argv)

    try:
        with open(args.image, "rb") as f:
            image_bytes = f.read()
        second_text = None
        if args.compare:
            with open(args.compare, "r", encoding="utf-8") as f:
                second_text = f.read()
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    configure_tesseract(args.tesseract_path)
    engine = functools.partial(run_tesseract, lang=args.lang)
    try:
        report = asyncio.run(grade_image(image_bytes, second_text=second_text, engine=engine))
    except InvalidImageError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
