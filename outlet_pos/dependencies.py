from fastapi import Path

from outlet_pos.core.exceptions import ValidationError
from outlet_pos.database.session import get_db
from outlet_pos.services.inventory_service import validate_outlet


def outlet_path(outlet: str = Path(..., description="Outlet key, e.g. harigala")) -> str:
    return validate_outlet(outlet.strip().lower())


def ensure_same_outlet(path_outlet: str, body_outlet) -> None:
    if body_outlet is not None and body_outlet != path_outlet:
        raise ValidationError("Outlet in body does not match the URL", outlet=body_outlet)


__all__ = ["ensure_same_outlet", "get_db", "outlet_path"]
