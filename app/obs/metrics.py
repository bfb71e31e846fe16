"""In-process counters and latency histograms.

Covers inbound requests (recorded by the middleware) and outbound calls to
the travel-data provider (recorded by the Amadeus client). Single-process only.
"""

from typing import Dict, Any, Optional, Tuple, List
import threading


_LOCK = threading.Lock()

LabelsKey = Tuple[Tuple[str, str], ...]

_COUNTERS: Dict[Tuple[str, LabelsKey], int] = {}

# Upstream hotel searches are slow; keep room above 10s.
_DEFAULT_BINS: List[int] = [50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000]
# name -> {labels_key: {"counts": [...], "sum_ms": float}}
_HISTOGRAMS: Dict[str, Dict[LabelsKey, Dict[str, Any]]] = {}


def _labels_key(labels: Optional[Dict[str, str]]) -> LabelsKey:
    if not labels:
        return tuple()
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def inc_counter(metric: str, labels: Optional[Dict[str, str]] = None) -> None:
    key = (metric, _labels_key(labels))
    with _LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0) + 1


def counter_value(metric: str, labels: Optional[Dict[str, str]] = None) -> int:
    with _LOCK:
        return _COUNTERS.get((metric, _labels_key(labels)), 0)


def record_timing(metric: str, value_ms: float, labels: Optional[Dict[str, str]] = None) -> None:
    if value_ms is None:
        return
    lk = _labels_key(labels)
    idx = len(_DEFAULT_BINS)
    for i, b in enumerate(_DEFAULT_BINS):
        if value_ms <= b:
            idx = i
            break
    with _LOCK:
        series = _HISTOGRAMS.setdefault(metric, {})
        entry = series.get(lk)
        if entry is None:
            entry = {"counts": [0] * (len(_DEFAULT_BINS) + 1), "sum_ms": 0.0}
            series[lk] = entry
        entry["counts"][idx] += 1
        entry["sum_ms"] += float(value_ms)


def reset_metrics() -> None:
    with _LOCK:
        _COUNTERS.clear()
        _HISTOGRAMS.clear()


def get_metrics_snapshot() -> Dict[str, Any]:
    with _LOCK:
        counters = [
            {"name": name, "labels": dict(labels), "value": value}
            for (name, labels), value in _COUNTERS.items()
        ]
        histograms = [
            {
                "name": name,
                "labels": dict(labels),
                "bins_ms": list(_DEFAULT_BINS),
                "counts": list(entry["counts"]),
                "sum_ms": entry["sum_ms"],
            }
            for name, series in _HISTOGRAMS.items()
            for labels, entry in series.items()
        ]
    return {"counters": counters, "histograms": histograms}
