from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from bs4 import BeautifulSoup

from .models import FIELD_NAMES, ProductMetadata

logger = logging.getLogger(__name__)

# (soup, page_url) -> candidate value or None
StepFn = Callable[[BeautifulSoup, str], Any]


@dataclass(frozen=True)
class FieldStep:
    field: str
    name: str
    fn: StepFn

    def __post_init__(self):
        if self.field not in FIELD_NAMES:
            raise ValueError(f"unknown field {self.field!r} for step {self.name!r}")


def run_steps(steps: Iterable[FieldStep], soup: BeautifulSoup, url: str,
              meta: ProductMetadata) -> ProductMetadata:
    """Runs steps in order, skipping any whose field is already filled."""
    for step in steps:
        if meta.is_set(step.field):
            continue
        value = step.fn(soup, url)
        if meta.fill(step.field, value):
            logger.debug(f"{step.field} <- {step.name}: {value!r}")
    return meta


def constant(value: Any) -> StepFn:
    return lambda soup, url: value
