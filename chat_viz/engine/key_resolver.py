"""Pick category/value/series keys from hints, classification and fallbacks."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from chat_viz.config.viz_config import Settings, get_settings
from chat_viz.engine.errors import UnresolvableKeys
from chat_viz.engine.field_classifier import FieldClassification
from chat_viz.models.descriptor import ChartKind, VisualizationDescriptor


@dataclass(frozen=True)
class ResolvedKeys:
    category_key: str
    value_key: str
    secondary_value_key: Optional[str] = None
    series_keys: Tuple[str, ...] = ()


def _first_present(candidates: Iterable[Optional[str]], fields: Sequence[str], *, exclude: Sequence[str] = ()) -> Optional[str]:
    for name in candidates:
        if name and name in fields and name not in exclude:
            return name
    return None


def _resolve_category_key(
    classification: FieldClassification,
    descriptor: VisualizationDescriptor,
    settings: Settings,
    *,
    preferred: Optional[str] = None,
) -> str:
    fields = classification.fields
    key = (
        _first_present([preferred, descriptor.category_field], fields)
        or _first_present(settings.category_fallback_fields, fields)
        or _first_present(classification.categorical, fields)
        or _first_present(fields, fields)
    )
    if key is None:
        raise UnresolvableKeys("record has no fields to use as category axis")
    return key


def _resolve_value_key(
    classification: FieldClassification,
    descriptor: VisualizationDescriptor,
    settings: Settings,
    category_key: str,
) -> str:
    fields = classification.fields
    exclude = (category_key,)
    # A one-field record uses the same field for both roles.
    return (
        _first_present([descriptor.value_field], fields, exclude=exclude)
        or _first_present(settings.value_fallback_fields, fields, exclude=exclude)
        or _first_present(classification.numeric, fields, exclude=exclude)
        or _first_present(fields, fields, exclude=exclude)
        or category_key
    )


def _resolve_scatter_axes(
    classification: FieldClassification,
    descriptor: VisualizationDescriptor,
) -> Tuple[str, str]:
    fields = classification.fields
    x_key = (
        _first_present([descriptor.category_field], fields)
        or _first_present(classification.numeric, fields)
        or fields[0]
    )
    y_key = (
        _first_present([descriptor.value_field], fields)
        or _first_present(classification.numeric, fields, exclude=(x_key,))
        or x_key
    )
    return x_key, y_key


def _resolve_scatter_label(
    classification: FieldClassification,
    settings: Settings,
    x_key: str,
    y_key: str,
) -> str:
    """Point label field; only a one-field record labels points with the x field."""
    fields = classification.fields
    taken = (x_key, y_key)
    return (
        _first_present(settings.category_fallback_fields, fields, exclude=taken)
        or _first_present(classification.categorical, fields, exclude=taken)
        or _first_present(fields, fields, exclude=(x_key,))
        or x_key
    )


def resolve_keys(
    classification: FieldClassification,
    records: List[Dict[str, Any]],
    descriptor: VisualizationDescriptor,
    *,
    kind: ChartKind,
    series_keys: Sequence[str] = (),
    grouped_category_key: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ResolvedKeys:
    settings = settings or get_settings()
    if not classification.fields:
        raise UnresolvableKeys("record has no fields", record_count=len(records))

    if kind == ChartKind.SCATTER:
        x_key, y_key = _resolve_scatter_axes(classification, descriptor)
        label_key = _resolve_scatter_label(classification, settings, x_key, y_key)
        return ResolvedKeys(category_key=label_key, value_key=x_key, secondary_value_key=y_key)

    category_key = _resolve_category_key(
        classification,
        descriptor,
        settings,
        preferred=grouped_category_key,
    )

    if kind == ChartKind.GROUPED_BAR:
        series = tuple(series_keys) or tuple(
            name for name in classification.numeric if name != category_key
        )
        if not series:
            raise UnresolvableKeys("grouped bar has no value series", category_key=category_key)
        return ResolvedKeys(category_key=category_key, value_key=series[0], series_keys=series)

    value_key = _resolve_value_key(classification, descriptor, settings, category_key)
    return ResolvedKeys(category_key=category_key, value_key=value_key)
