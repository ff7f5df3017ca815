# Dashboard Module
# 
# Campaign metrics engine behind the marketing dashboard: metric registry,
# per-campaign derivation, BRL/USD normalization, aggregation and formatting.

from .api.metrics_routes import metrics_bp
from .services.campaign_metrics_service import CampaignMetricsService

__all__ = [
    'metrics_bp',
    'CampaignMetricsService'
]
