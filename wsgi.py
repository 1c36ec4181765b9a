"""
WSGI entry point for deployment.
"""
import sys
import os

# Add project directory to path
path = os.path.dirname(os.path.abspath(__file__))
if path not in sys.path:
    sys.path.insert(0, path)

from eventroutes import create_app
from eventroutes.config import ProductionConfig

# Create application instance
application = create_app(ProductionConfig)
