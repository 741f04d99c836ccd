#!/usr/bin/env python3
"""
Upload a local document to a running knowledge base API.

Usage:
    python scripts/upload_file.py sample.pdf
    python scripts/upload_file.py notes.docx --lecturer "Dr. Smith" --keywords "trees, recursion"
    python scripts/upload_file.py data.csv --url http://localhost:8080

API_URL from .env.local / environment is used when --url is not given.
"""

import argparse
import json
import mimetypes
import os
import sys
from pathlib import Path

import requests
from dotenv import load_dotenv

project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env.local")

DEFAULT_API_URL = "http://localhost:8080"


def upload_file(
    path: Path,
    api_url: str,
    lecturer: str = "",
    uploaded_by: str = "",
    source_document: str = "",
    keywords: str = "",
    timeout: float = 120,
) -> requests.Response:
    """POST a file to /upload with the optional form fields"""
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    with open(path, "rb") as f:
        return requests.post(
            f"{api_url.rstrip('/')}/upload",
            files={"file": (path.name, f, content_type)},
            data={
                "lecturer": lecturer,
                "uploaded_by": uploaded_by,
                "source_document": source_document,
                "keywords": keywords,
            },
            timeout=timeout,
        )


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Upload a document to the knowledge base")
    parser.add_argument("file", type=Path, help="PDF, DOCX, CSV or TXT file")
    parser.add_argument("--url", default=os.getenv("API_URL", DEFAULT_API_URL), help="API base URL")
    parser.add_argument("--lecturer", default="")
    parser.add_argument("--uploaded-by", default=os.getenv("USER", ""))
    parser.add_argument("--source-document", default="")
    parser.add_argument("--keywords", default="")
    args = parser.parse_args(argv)

    if not args.file.is_file():
        print(f"File not found: {args.file}", file=sys.stderr)
        return 1

    response = upload_file(
        args.file,
        args.url,
        lecturer=args.lecturer,
        uploaded_by=args.uploaded_by,
        source_document=args.source_document,
        keywords=args.keywords,
    )

    try:
        body = response.json()
    except ValueError:
        body = {"raw": response.text}

    print(f"HTTP {response.status_code}")
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0 if response.ok else 1


if __name__ == "__main__":
    sys.exit(main())
