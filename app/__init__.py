"""SCIM User Store Flask Application Package.

To use the Flask app:
    from app.flask_app import create_app

To use the resource engine without Flask:
    from app.core.provisioning_service import UserResourceHandler, HandlerConfig
"""
# Note: flask_app is not imported by default so scripts can use app.core
# without loading Flask
