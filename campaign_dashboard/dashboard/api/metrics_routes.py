# Metrics API Routes
#
# JSON endpoints the dashboard front end calls for campaign metrics,
# aggregates and the USD -> BRL exchange rate.

from flask import Blueprint, jsonify, request
import logging

from ..calculators import UnsupportedCurrency
from ..metrics.registry import UnknownMetric, all_definitions
from ..services.campaign_metrics_service import CampaignMetricsService

# Import timezone utilities for consistent timezone handling
from ...utils.timezone_utils import now_utc

logger = logging.getLogger(__name__)

metrics_bp = Blueprint('metrics', __name__, url_prefix='/api/metrics')

# Initialize the metrics service (shares the process-wide rate provider)
metrics_service = CampaignMetricsService()


class BadRequest(ValueError):
    """Malformed request payload"""
    pass


def _json_payload():
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        raise BadRequest('No data provided in request')
    return data


def _campaign_list(data):
    campaigns = data.get('campaigns')
    if not isinstance(campaigns, list) or not all(isinstance(c, dict) for c in campaigns):
        raise BadRequest('campaigns must be a list of campaign objects')
    return campaigns


def _client_error(e):
    return jsonify({
        'success': False,
        'error': str(e)
    }), 400


def _server_error(context, e):
    logger.error(f"Error {context}: {str(e)}", exc_info=True)
    return jsonify({
        'success': False,
        'error': str(e)
    }), 500


@metrics_bp.route('/registry', methods=['GET'])
def get_registry():
    """List every metric the dashboard can show, in display order"""
    return jsonify({
        'success': True,
        'metrics': [definition.to_dict() for definition in all_definitions()]
    })


@metrics_bp.route('/derive', methods=['POST'])
def derive_campaign_metrics():
    """
    Derive every metric for one campaign

    Expected JSON payload:
    {
        "campaign": {"id": "2", "currency": "BRL", "custo": 519.55, ...},
        "display_currency": "USD",
        "precision": 2
    }
    """
    try:
        data = _json_payload()
        campaign = data.get('campaign')
        if not isinstance(campaign, dict):
            raise BadRequest('campaign is required')

        result = metrics_service.campaign_metrics(
            campaign,
            display_currency=data.get('display_currency'),
            precision=data.get('precision')
        )
        return jsonify({
            'success': True,
            'data': result
        })

    except (BadRequest, UnsupportedCurrency, UnknownMetric, ValueError) as e:
        return _client_error(e)
    except Exception as e:
        return _server_error('deriving campaign metrics', e)


@metrics_bp.route('/aggregate', methods=['POST'])
def aggregate_metric():
    """
    Aggregate one metric across campaigns

    Expected JSON payload:
    {
        "campaigns": [...],
        "metric": "custo",
        "mode": "sum" | "simple_average",
        "display_currency": "USD",
        "active_only": false
    }
    """
    try:
        data = _json_payload()
        campaigns = _campaign_list(data)
        metric_key = data.get('metric')
        if not metric_key:
            raise BadRequest('metric is required')

        result = metrics_service.aggregate(
            campaigns,
            metric_key,
            mode=data.get('mode', 'sum'),
            display_currency=data.get('display_currency'),
            active_only=bool(data.get('active_only', False)),
            precision=data.get('precision')
        )
        return jsonify({
            'success': True,
            'data': result
        })

    except (BadRequest, UnsupportedCurrency, UnknownMetric, ValueError) as e:
        return _client_error(e)
    except Exception as e:
        return _server_error('aggregating metric', e)


@metrics_bp.route('/summary', methods=['POST'])
def get_dashboard_summary():
    """
    Headline KPI cards for a campaign selection

    Expected JSON payload:
    {
        "campaigns": [...],
        "display_currency": "BRL",
        "active_only": true
    }
    """
    try:
        data = _json_payload()
        campaigns = _campaign_list(data)

        result = metrics_service.dashboard_summary(
            campaigns,
            display_currency=data.get('display_currency'),
            active_only=bool(data.get('active_only', False))
        )
        return jsonify({
            'success': True,
            'data': result
        })

    except (BadRequest, UnsupportedCurrency, ValueError) as e:
        return _client_error(e)
    except Exception as e:
        return _server_error('building dashboard summary', e)


@metrics_bp.route('/exchange-rate', methods=['GET'])
def get_exchange_rate():
    """Current cached USD -> BRL rate (never triggers a fetch)"""
    return jsonify({
        'success': True,
        'exchange_rate': metrics_service.exchange_rate_info()
    })


@metrics_bp.route('/exchange-rate/refresh', methods=['POST'])
def refresh_exchange_rate():
    """
    Manually refresh the exchange rate.

    A failed fetch is not an error for the dashboard: the previous rate stays
    in use and the response carries a warning.
    """
    try:
        _, error = metrics_service.refresh_exchange_rate()
        response = {
            'success': True,
            'refreshed': error is None,
            'exchange_rate': metrics_service.exchange_rate_info(),
            'timestamp': now_utc().isoformat()
        }
        if error:
            response['warning'] = error
        return jsonify(response)

    except Exception as e:
        return _server_error('refreshing exchange rate', e)
