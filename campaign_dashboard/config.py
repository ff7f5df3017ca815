#!/usr/bin/env python3
"""
Configuration module for the Campaign Metrics Dashboard
Reads from environment variables with fallbacks to .env file
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
project_root = Path(__file__).resolve().parent.parent
env_file = project_root / '.env'
load_dotenv(env_file)

# Also try to load from the package directory as fallback
env_path = Path(__file__).parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

class Config:
    """Configuration class that reads from environment variables"""
    
    # Flask Configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')
    FLASK_DEBUG = os.getenv('FLASK_DEBUG', 'false').lower() == 'true'
    
    # Server Configuration
    HOST = os.getenv('HOST', '0.0.0.0' if os.getenv('FLASK_ENV') == 'production' else 'localhost')
    PORT = int(os.getenv('PORT', '5001'))
    
    # Allowed Origins for CORS
    ALLOWED_ORIGINS = os.getenv('ALLOWED_ORIGINS', 'http://localhost:3000,http://localhost:5001').split(',')
    
    # Exchange Rate Configuration (USD -> BRL)
    EXCHANGE_RATE_API_URL = os.getenv('EXCHANGE_RATE_API_URL', 'https://economia.awesomeapi.com.br/json/last/USD-BRL')
    EXCHANGE_RATE_TIMEOUT = float(os.getenv('EXCHANGE_RATE_TIMEOUT', '10'))
    FALLBACK_EXCHANGE_RATE = float(os.getenv('FALLBACK_EXCHANGE_RATE', '5.50'))
    LAZY_RATE_REFRESH = os.getenv('LAZY_RATE_REFRESH', 'true').lower() == 'true'
    
    # Display Configuration
    DISPLAY_CURRENCY = os.getenv('DISPLAY_CURRENCY', 'USD').upper()
    PERCENTAGE_PRECISION = int(os.getenv('PERCENTAGE_PRECISION', '2'))
    
    # Timezone Configuration
    DEFAULT_TIMEZONE = os.getenv('DEFAULT_TIMEZONE', 'UTC')
    DISPLAY_TIMEZONE = os.getenv('DISPLAY_TIMEZONE', 'America/Sao_Paulo')
    
    @property
    def is_production(self):
        """Check if running in production environment"""
        return self.FLASK_ENV == 'production'
    
    @property
    def is_development(self):
        return self.FLASK_ENV == 'development'

# Create singleton instance
config = Config()
