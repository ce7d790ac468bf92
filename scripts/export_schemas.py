"""Export JSON schemas for the public models and the generative output contract."""

import json
import sys
from pathlib import Path

from backend.app.llm.enhancer import itinerary_response_schema
from backend.app.models import Itinerary, TripQuery


def main(schemas_dir: Path = Path("docs/schemas")) -> list[Path]:
    """Export schemas to docs/schemas/ (or the given directory)."""
    schemas_dir.mkdir(parents=True, exist_ok=True)

    schemas = {
        "Itinerary": Itinerary.model_json_schema(),
        "TripQuery": TripQuery.model_json_schema(),
        # Strict schema sent to the generative backend
        "GeneratedItineraryList": itinerary_response_schema(),
    }

    written: list[Path] = []
    for name, schema in schemas.items():
        path = schemas_dir / f"{name}.schema.json"
        with open(path, "w") as f:
            json.dump(schema, f, indent=2)
        print(f"Exported {name} schema to {path}")
        written.append(path)

    return written


if __name__ == "__main__":
    main(Path(sys.argv[1]) if len(sys.argv) > 1 else Path("docs/schemas"))
