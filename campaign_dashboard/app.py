import os
from flask import Flask, jsonify
from flask_cors import CORS
import logging

# Import configuration
from campaign_dashboard.config import config

# Import timezone utilities for consistent timezone handling
from campaign_dashboard.utils.timezone_utils import now_utc

# Import metrics blueprint
from campaign_dashboard.dashboard.api.metrics_routes import metrics_bp

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = config.SECRET_KEY

# Register metrics blueprint
app.register_blueprint(metrics_bp)

# Enable CORS for the dashboard front end
allowed_origins = config.ALLOWED_ORIGINS.copy()

# Add Railway domain if running on Railway
railway_public_domain = os.environ.get('RAILWAY_PUBLIC_DOMAIN')
if railway_public_domain:
    allowed_origins.append(f'https://{railway_public_domain}')

CORS(app, origins=allowed_origins,
     allow_headers=['Content-Type', 'Authorization'],
     methods=['GET', 'POST', 'OPTIONS'])


@app.route('/health', methods=['GET'])
def health():
    """Liveness check"""
    return jsonify({
        'status': 'healthy',
        'service': 'campaign-dashboard',
        'timestamp': now_utc().isoformat()
    })


if __name__ == '__main__':
    logger.info(f"Starting campaign dashboard API on {config.HOST}:{config.PORT}")
    app.run(
        debug=False if config.is_production else config.FLASK_DEBUG,
        host=config.HOST,
        port=config.PORT
    )
