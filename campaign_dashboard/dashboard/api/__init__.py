# Metrics API Module
#
# Flask blueprint exposing the metrics engine to the dashboard front end

from .metrics_routes import metrics_bp

__all__ = [
    'metrics_bp'
]
