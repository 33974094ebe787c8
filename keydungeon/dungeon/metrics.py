from typing import Dict


def init_metrics() -> Dict[str, int | float | bool | dict]:
    return {
        'layers_requested': 0,
        'layers_grown': 0,
        'rooms_requested': 0,
        'rooms_placed': 0,
        'frontier_exhaustions': 0,
        'locks_added': 0,
        'keys_placed': 0,
        'key_fallbacks': 0,
        'open_connections': 0,
        'shortcut_connections': 0,
        'boss_fallback': False,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }


def bump(metrics: Dict, key: str, amount: int = 1) -> None:
    """Increment ``key`` when metrics collection is enabled (empty dict => disabled)."""
    if metrics:
        metrics[key] = metrics.get(key, 0) + amount
