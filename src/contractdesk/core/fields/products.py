"""Product catalog matching."""

import re
from typing import List, Optional, Tuple

from contractdesk.core.config import PipelineConfig
from contractdesk.models.fields import FieldValue


def _mentions(text: str, alias: str) -> bool:
    return re.search(rf"(?<![\w&]){re.escape(alias)}(?![\w&])", text, re.IGNORECASE) is not None


def match_products(text: str, config: PipelineConfig) -> List[str]:
    """Catalog names whose aliases appear in ``text``, in catalog order."""
    return [
        product.name
        for product in config.products
        if any(_mentions(text, alias) for alias in (product.name, *product.aliases))
    ]


def extract_products(
    text: str, config: PipelineConfig
) -> Tuple[Optional[FieldValue[List[str]]], Optional[FieldValue[str]]]:
    """(product set, parent product). More than one product gives the 'Multiple' parent."""
    products = match_products(text, config)
    if not products:
        return None, None
    parent = config.multiple_products_label if len(products) > 1 else products[0]
    return FieldValue(products, 0.8, "catalog_alias"), FieldValue(parent, 0.8, "catalog_alias")
