"""
Geographic join
===============

Attach per-country results to the features of a GeoJSON boundary file.

Matching is an exact string comparison on a feature property (default
`name_long`). Features without a match keep `data=None`, which renderers
show as "no data".
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping
import json
import logging
from .models import JoinedFeature

logger = logging.getLogger(__name__)

def load_geojson(path: str) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)

def join_features(geojson: Mapping[str, Any], data_by_country: Mapping[str, Any],
                  name_field: str = "name_long") -> List[JoinedFeature]:
    out: List[JoinedFeature] = []
    matched = 0
    for feature in geojson.get("features", []):
        props = dict(feature.get("properties") or {})
        name = str(props.get(name_field, ""))
        data = data_by_country.get(name)
        if data is not None:
            matched += 1
        else:
            logger.debug("No data match for: %s", name)
        out.append(JoinedFeature(name=name, properties=props, data=data))
    logger.info("Country matches: %d / %d", matched, len(out))
    return out
