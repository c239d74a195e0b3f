from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional

@dataclass
class ProductMetadata:
    title: str = ""
    description: str = ""
    image_url: str = ""
    price: Optional[float] = None
    currency: str = ""
    site_name: str = ""

    def is_set(self, field: str) -> bool:
        value = getattr(self, field)
        if field == "price":
            return value is not None
        return bool(value)

    def fill(self, field: str, value: Any) -> bool:
        """
        Sets `field` only when it is still empty and `value` is usable.

        Every extraction strategy writes through here, so the first strategy
        to produce a value for a field wins. Prices must be > 0; strings are
        stripped and must be non-empty. Returns True when the field was set.
        """
        if self.is_set(field):
            return False
        if field == "price":
            if value is None or isinstance(value, bool):
                return False
            try:
                value = float(value)
            except (TypeError, ValueError):
                return False
            if value <= 0:
                return False
        else:
            if not isinstance(value, str):
                return False
            value = value.strip()
            if not value:
                return False
        setattr(self, field, value)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


FIELD_NAMES = tuple(f.name for f in fields(ProductMetadata))
