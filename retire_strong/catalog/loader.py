"""Movement catalog loader.

Loads the versioned YAML catalog once at process start. Any schema violation,
duplicate id or dangling regression/progression reference raises
CatalogError so startup aborts instead of serving plans from bad data.
"""

from functools import lru_cache
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from retire_strong.catalog.models import MovementCatalog, MovementDefinition
from retire_strong.core.errors import CatalogError

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "movements.yaml"


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise CatalogError(path, "file not found")
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(path, f"invalid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise CatalogError(path, "top level must be a mapping with 'version' and 'movements'")
    return raw


def _parse_movements(path: Path, entries: object) -> tuple[MovementDefinition, ...]:
    if not isinstance(entries, list) or not entries:
        raise CatalogError(path, "'movements' must be a non-empty list")

    movements: list[MovementDefinition] = []
    for index, entry in enumerate(entries):
        try:
            movements.append(MovementDefinition.model_validate(entry))
        except ValidationError as e:
            movement_id = entry.get("id", f"#{index}") if isinstance(entry, dict) else f"#{index}"
            raise CatalogError(path, f"movement {movement_id} failed validation: {e}") from e
    return tuple(movements)


def _check_references(path: Path, movements: tuple[MovementDefinition, ...]) -> None:
    seen: set[str] = set()
    for movement in movements:
        if movement.id in seen:
            raise CatalogError(path, f"duplicate movement id: {movement.id}")
        seen.add(movement.id)

    for movement in movements:
        for linked_id in (*movement.regressions, *movement.progressions):
            if linked_id not in seen:
                raise CatalogError(path, f"movement {movement.id} references unknown movement {linked_id}")
            if linked_id == movement.id:
                raise CatalogError(path, f"movement {movement.id} references itself")


def load_catalog(path: Path | str) -> MovementCatalog:
    """Load and validate a movement catalog file.

    Args:
        path: Path to the catalog YAML file

    Returns:
        Validated, read-only MovementCatalog

    Raises:
        CatalogError: If the file is missing or any entry violates the schema
    """
    catalog_path = Path(path)
    raw = _read_yaml(catalog_path)
    movements = _parse_movements(catalog_path, raw.get("movements"))
    _check_references(catalog_path, movements)

    catalog = MovementCatalog(movements, version=str(raw.get("version", "unversioned")))
    logger.info(
        "Movement catalog loaded",
        path=str(catalog_path),
        version=catalog.version,
        movement_count=len(catalog),
    )
    return catalog


@lru_cache(maxsize=1)
def get_default_catalog() -> MovementCatalog:
    """Load the packaged catalog once per process."""
    return load_catalog(DEFAULT_CATALOG_PATH)
