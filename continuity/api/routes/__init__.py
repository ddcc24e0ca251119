from . import activities, dashboard, resources, risks, strategies, suggestions

__all__ = [
    "activities",
    "dashboard",
    "resources",
    "risks",
    "strategies",
    "suggestions",
]
