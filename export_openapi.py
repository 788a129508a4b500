import json
import sys
from pathlib import Path

from simple_service.main import app

DEFAULT_OUT_PATH = Path("openapi") / "simple-ip-service.openapi.json"


def main() -> None:
    """Write the service's OpenAPI schema, including the Azure AD OAuth2 scheme, to disk."""
    out_path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_OUT_PATH
    schema = app.openapi()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(schema, indent=2))
    print(f"Wrote {app.title} {app.version} schema to {out_path}")  # noqa: T201


if __name__ == "__main__":
    main()
