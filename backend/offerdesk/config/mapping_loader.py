"""
Utilities for loading spreadsheet column-token configuration.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "column_mappings.yaml"

# Ordered token preferences per canonical field; the first token that matches
# any header cell wins.
DEFAULT_COLUMN_TOKENS: Dict[str, List[str]] = {
    "description": ["description", "item", "product", "name"],
    "quantity": ["quantity", "qty"],
    "unit": ["unit", "uom"],
    "price": ["price", "unit price", "unit_price"],
    "sku": ["sku", "code", "part"],
}


@lru_cache()
def load_mapping_config() -> Dict[str, Any]:
    if not CONFIG_PATH.exists():
        return {}
    with open(CONFIG_PATH, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def get_offer_column_tokens() -> Dict[str, List[str]]:
    """Default token lists, with any per-field override from the YAML file."""
    overrides = load_mapping_config().get("offer_columns") or {}
    tokens: Dict[str, List[str]] = {}
    for field, defaults in DEFAULT_COLUMN_TOKENS.items():
        configured = overrides.get(field)
        if configured:
            tokens[field] = [str(token).lower().strip() for token in configured]
        else:
            tokens[field] = list(defaults)
    return tokens
