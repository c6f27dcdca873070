# markup_dashboard/__init__.py
import logging
from flask import Flask, redirect, url_for
from dotenv import load_dotenv
from marshmallow import ValidationError
from .extensions import db, MarkupError, handle_validation_error, handle_markup_error
from .routes.markups import bp as markups_bp
from .services import recalculation

def create_app(config_object="config.Config"):
    load_dotenv()
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)
    with app.app_context():
        db.create_all()

    recalculation.init_app(app)

    app.register_blueprint(markups_bp, url_prefix="/markups")
    app.register_error_handler(ValidationError, handle_validation_error)
    app.register_error_handler(MarkupError, handle_markup_error)

    @app.get("/")
    def index():
        return redirect(url_for("markups.list_markups", business_id="default"))

    return app
