"""
Typed category labels and derived category columns for holdings.

A category carries an explicit ordinal used for sorting, separate from the text
shown in comparison tables.

@author: pacsim maintainers
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import numpy as np
import pandas as pd

from pacsim.helpers.pac.constants import (
    AREA_BAND,
    AREA_BAND_EDGES,
    ELIGIBLE_AREA,
    MISSING_CATEGORY_TEXT,
    SIZE_CLASS,
    SMALL_HOLDING,
    SMALL_SIZE_CLASS_ORDINALS,
    YOUNG_FARMER_PAYMENT,
    YOUNG_FARMER_UNIT_PAYMENT,
    YOUNG_FARMERS,
)

_ORDINAL_PREFIX_RE = re.compile(r"^(\d+)")
_ORDINAL_LABEL_RE = re.compile(r"^(\d{2}) - (.*)$", re.DOTALL)


@dataclass(frozen=True)
class CategoryLabel:
    text: str
    ordinal: int | None = None

    @property
    def sort_key(self) -> tuple[int, int, str]:
        if self.ordinal is None:
            return (1, 0, self.text)
        return (0, self.ordinal, self.text)

    def __str__(self) -> str:
        return self.text


def parse_category_label(value: object) -> CategoryLabel:
    """Turn a raw category value into a typed label.

    ``"03 - 20 to < 30 ha"`` becomes ordinal 3 with text ``"20 to < 30 ha"``; a label
    such as ``"11 Ile-de-France"``, ``"1 - Micro"`` or the integer ``2`` keeps its text but
    still sorts by its leading integer code.
    Missing values map to a dedicated label sorted last.
    """
    if isinstance(value, CategoryLabel):
        return value
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return CategoryLabel(MISSING_CATEGORY_TEXT)
    text = str(value)
    labelled = _ORDINAL_LABEL_RE.match(text)
    if labelled:
        return CategoryLabel(labelled.group(2), int(labelled.group(1)))
    prefixed = _ORDINAL_PREFIX_RE.match(text)
    if prefixed:
        return CategoryLabel(text, int(prefixed.group(1)))
    return CategoryLabel(text)


def area_band_labels(edges: tuple[float, ...] = AREA_BAND_EDGES) -> list[CategoryLabel]:
    """Labels for half-open [lower, upper) bands plus a final open band."""
    labels = [CategoryLabel(f"< {edges[1]:g} ha", 1)]
    for ordinal, (lower, upper) in enumerate(zip(edges[1:], edges[2:]), start=2):
        labels.append(CategoryLabel(f"{lower:g} to < {upper:g} ha", ordinal))
    labels.append(CategoryLabel(f"≥ {edges[-1]:g} ha", len(edges)))
    return labels


def derive_area_band_column(
    chunk: pd.DataFrame,
    area_column: str = ELIGIBLE_AREA,
    band_column: str = AREA_BAND,
) -> pd.DataFrame:
    """Add an eligible-area band column holding CategoryLabel values."""
    labels = area_band_labels()
    areas = chunk[area_column].astype(float).to_numpy()
    interior_edges = np.asarray(AREA_BAND_EDGES[1:], dtype=float)
    positions = np.searchsorted(interior_edges, areas, side="right")
    chunk[band_column] = [
        CategoryLabel(MISSING_CATEGORY_TEXT) if np.isnan(area) else labels[position]
        for area, position in zip(areas, positions)
    ]
    return chunk


def derive_small_holding_column(
    chunk: pd.DataFrame,
    size_class_column: str = SIZE_CLASS,
    small_ordinals: tuple[int, ...] = SMALL_SIZE_CLASS_ORDINALS,
) -> pd.DataFrame:
    """Flag holdings whose size class ordinal is among the small classes."""
    ordinals = chunk[size_class_column].map(lambda value: parse_category_label(value).ordinal)
    chunk[SMALL_HOLDING] = ordinals.isin(small_ordinals)
    return chunk


def derive_young_farmers_column(
    chunk: pd.DataFrame,
    payment_column: str = YOUNG_FARMER_PAYMENT,
    unit_payment: float = YOUNG_FARMER_UNIT_PAYMENT,
) -> pd.DataFrame:
    """Estimate the number of young farmers from the young-farmer payment received."""
    payments = chunk[payment_column].astype(float).fillna(0.0)
    chunk[YOUNG_FARMERS] = np.round(payments / unit_payment).astype(int)
    return chunk
