"""Export the betbridge REST facade's OpenAPI schema."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path

from fastapi.encoders import jsonable_encoder

from betbridge.api.server import app

DEFAULT_OUTPUT = Path("api_spec/openapi.json")


def export(output: Path) -> Path:
    schema = app.openapi()
    public_base = os.getenv("PUBLIC_API_BASE_URL")
    if public_base:
        schema["servers"] = [{"url": public_base.rstrip("/")}]
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(jsonable_encoder(schema), indent=2))
    return output


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)
    args = parser.parse_args()
    written = export(args.output)
    print(f"OpenAPI schema written to {written}")


if __name__ == "__main__":  # pragma: no cover
    main()
