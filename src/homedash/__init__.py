__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy re-exports for convenience."""
    _exports = {
        "ClassificationResult": "homedash.nlu.types",
        "Dashboard": "homedash.dashboard",
        "DashboardState": "homedash.state",
        "DispatchKind": "homedash.dispatch",
        "DispatchOutcome": "homedash.dispatch",
        "dispatch": "homedash.dispatch",
        "load_config": "homedash.config",
        "resolve_intent": "homedash.dispatch",
        "toggled": "homedash.devices",
    }
    if name in _exports:
        import importlib

        return getattr(importlib.import_module(_exports[name]), name)
    raise AttributeError(f"module 'homedash' has no attribute {name!r}")
