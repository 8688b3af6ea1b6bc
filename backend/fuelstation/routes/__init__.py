from .auth import auth_bp
from .base_route import base_bp
from .route_table import build_dashboard_blueprint

def register_routes(app, dashboard_handlers=None):
    app.register_blueprint(base_bp)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(build_dashboard_blueprint(dashboard_handlers), url_prefix='/api/dashboard')
