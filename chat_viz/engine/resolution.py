"""Visualization resolution pipeline.

descriptor -> normalize -> classify -> resolve keys -> palette -> dispatch.
`resolve_visualization` contains every resolution error inside the returned
result so one broken chart never takes the message thread down with it.
"""
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, List, Optional, Tuple

from chat_viz.config.viz_config import Settings, get_settings
from chat_viz.engine.dispatcher import dispatch_chart
from chat_viz.engine.errors import MissingKeyInRecord, UnsupportedKind, VisualizationError
from chat_viz.engine.field_classifier import classify_fields
from chat_viz.engine.key_resolver import ResolvedKeys, resolve_keys
from chat_viz.engine.normalizer import SHAPE_GROUPED, NormalizedShape, normalize_records
from chat_viz.engine.palette import generate_palette
from chat_viz.models.chart_spec import ChartRenderResult, ResolvedChartSpec
from chat_viz.models.descriptor import ChartKind, VisualizationDescriptor, is_empty_visualization
from chat_viz.utils.logging import log_event, new_request_id


@dataclass(frozen=True)
class _Resolution:
    descriptor: VisualizationDescriptor
    kind: ChartKind
    keys: ResolvedKeys
    spec: ResolvedChartSpec
    issues: Tuple[VisualizationError, ...]


def _effective_kind(descriptor: VisualizationDescriptor, normalized: NormalizedShape) -> ChartKind:
    kind = descriptor.kind
    if normalized.shape == SHAPE_GROUPED and kind in (ChartKind.CATEGORY_BAR, ChartKind.GROUPED_BAR):
        return ChartKind.GROUPED_BAR
    return kind


def _palette_size(kind: ChartKind, records: List[Dict[str, Any]], keys: ResolvedKeys) -> int:
    if kind == ChartKind.PIE:
        return max(1, len(records))
    if kind == ChartKind.GROUPED_BAR:
        return max(1, len(keys.series_keys))
    return 1


def _conform_records(
    records: List[Dict[str, Any]],
    keys: ResolvedKeys,
) -> Tuple[List[Dict[str, Any]], Tuple[VisualizationError, ...]]:
    """Give every record the first record's field set; report missing resolved keys."""
    fields = list(records[0].keys())
    required = [keys.category_key, keys.value_key, keys.secondary_value_key, *keys.series_keys]
    required_keys = {key for key in required if key}
    conformed: List[Dict[str, Any]] = []
    issues: List[VisualizationError] = []
    for index, record in enumerate(records):
        for key in fields:
            if key in required_keys and key not in record:
                issues.append(MissingKeyInRecord(key, index))
        conformed.append({key: record.get(key) for key in fields})
    for issue in issues:
        log_event("resolve.missing_key", issue.to_dict(), level="warning")
    return conformed, tuple(issues)


def _resolve(descriptor: VisualizationDescriptor, settings: Settings) -> _Resolution:
    normalized = normalize_records(descriptor)
    kind = _effective_kind(descriptor, normalized)
    classification = classify_fields(normalized.records[0])
    keys = resolve_keys(
        classification,
        normalized.records,
        descriptor,
        kind=kind,
        series_keys=normalized.series_keys,
        grouped_category_key=normalized.category_key,
        settings=settings,
    )
    records, missing = _conform_records(normalized.records, keys)
    palette = generate_palette(_palette_size(kind, records, keys))
    spec = ResolvedChartSpec(
        kind=kind.value,
        shape=normalized.shape,
        category_key=keys.category_key,
        value_key=keys.value_key,
        secondary_value_key=keys.secondary_value_key,
        series_keys=list(keys.series_keys),
        normalized_records=records,
        palette=palette,
        category_label=descriptor.category_label,
        value_label=descriptor.value_label,
    )
    return _Resolution(
        descriptor=descriptor,
        kind=kind,
        keys=keys,
        spec=spec,
        issues=normalized.issues + missing,
    )


def build_resolved_spec(payload: Any, *, settings: Optional[Settings] = None) -> ResolvedChartSpec:
    """Resolve one descriptor; resolution errors propagate to the caller."""
    descriptor = VisualizationDescriptor.from_payload(payload)
    return _resolve(descriptor, settings or get_settings()).spec


def resolve_visualization(
    payload: Any,
    *,
    settings: Optional[Settings] = None,
    request_id: Optional[str] = None,
    include_figure: Optional[bool] = None,
) -> ChartRenderResult:
    settings = settings or get_settings()
    request_id = request_id or new_request_id()
    if include_figure is None:
        include_figure = settings.include_figure

    if is_empty_visualization(payload):
        return ChartRenderResult(status="none", request_id=request_id)

    started = perf_counter()
    try:
        descriptor = VisualizationDescriptor.from_payload(payload)
        resolution = _resolve(descriptor, settings)
    except VisualizationError as exc:
        log_event(
            "resolve.failed",
            {"request_id": request_id, **exc.to_dict()},
            level="warning",
        )
        return ChartRenderResult(
            status="placeholder",
            request_id=request_id,
            notice=exc.notice,
            error=exc.to_dict(),
        )

    warnings = [issue.to_dict() for issue in resolution.issues]
    spec = resolution.spec
    chart = dispatch_chart(
        resolution.kind,
        resolution.keys,
        spec.normalized_records,
        spec.palette,
        category_label=spec.category_label,
        value_label=spec.value_label,
        raw_kind=descriptor.raw_kind,
    )
    if isinstance(chart, UnsupportedKind):
        log_event("resolve.unsupported_kind", {"request_id": request_id, "kind": chart.kind}, level="warning")
        return ChartRenderResult(
            status="unsupported",
            request_id=request_id,
            resolved=spec,
            notice=chart.notice,
            error=chart.to_dict(),
            warnings=warnings,
        )

    figure_json = None
    if include_figure:
        from chat_viz.render.plotly_renderer import render_figure

        figure_json = render_figure(chart)

    log_event(
        "resolve.done",
        {
            "request_id": request_id,
            "kind": spec.kind,
            "shape": spec.shape,
            "record_count": len(spec.normalized_records),
            "category_key": spec.category_key,
            "value_key": spec.value_key,
            "warning_count": len(warnings),
            "latency_ms": round((perf_counter() - started) * 1000, 2),
        },
    )
    return ChartRenderResult(
        status="ok",
        request_id=request_id,
        chart=chart,
        resolved=spec,
        warnings=warnings,
        figure_json=figure_json,
    )
