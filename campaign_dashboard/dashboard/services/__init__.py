# Dashboard Services Module
# 
# Contains business logic services for dashboard functionality

from .campaign_metrics_service import CampaignMetricsService

__all__ = [
    'CampaignMetricsService'
]
