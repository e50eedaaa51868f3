"""Application factory for EstateDesk."""
from __future__ import annotations

from flask import Flask, render_template

from .config import Config
from .extensions import db, login_manager
from .logging_service import log_manager


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, template_folder="templates")
    app.config.from_object(config_class)

    db.init_app(app)
    login_manager.init_app(app)
    log_manager.init_app(app)

    from .auth import bp as auth_bp
    from .auth.services import load_current_user
    from .dashboard import bp as dashboard_bp
    from .properties import bp as properties_bp
    from .prospects import bp as prospects_bp
    from .sales import bp as sales_bp
    from .listings import bp as listings_bp
    from .geocoding import bp as geocoding_bp
    from .geocoding.services import init_geocoder
    from .settings import bp as settings_bp
    from .activity import bp as activity_bp

    with app.app_context():
        db.create_all()

    init_geocoder(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(properties_bp, url_prefix="/properties")
    app.register_blueprint(prospects_bp, url_prefix="/prospects")
    app.register_blueprint(sales_bp, url_prefix="/sold-properties")
    app.register_blueprint(listings_bp)
    app.register_blueprint(geocoding_bp, url_prefix="/geocode")
    app.register_blueprint(settings_bp, url_prefix="/settings")
    app.register_blueprint(activity_bp, url_prefix="/logs")

    for component in (
        "Auth",
        "Dashboard",
        "Properties",
        "Prospects",
        "Sales",
        "Listings",
        "Geocoding",
        "Settings",
        "Activity",
    ):
        log_manager.register_component(component)

    app.before_request(load_current_user)

    @app.errorhandler(404)
    def not_found(error):
        return render_template("errors/404.html", title="EstateDesk — Not found"), 404

    @app.context_processor
    def inject_globals() -> dict[str, object]:
        """Inject shared template variables."""
        return {"environment": app.config.get("ENVIRONMENT", "development")}

    return app
