"""
Plants API Module
=================

Plant identification and care conversation, organized by concern:
- identify.py: Image analysis (photo -> PlantInfo) and session reseeding
- chat.py: Session inspection/reset, chat exchanges, stateless advice
"""

from flask import Blueprint
from flora.utils.http import error_response

# Create blueprint here to avoid circular imports
plants_api = Blueprint("plants_api", __name__)

# Error handlers
@plants_api.errorhandler(404)
def not_found(error):
    """Handle 404 errors"""
    return error_response("Resource not found", 404)

@plants_api.errorhandler(405)
def method_not_allowed(error):
    """Handle 405 errors"""
    return error_response("Method not allowed", 405)

# Import submodules to register routes (must be after blueprint creation)
from . import chat, identify  # noqa: E402,F401

__all__ = ['plants_api']
