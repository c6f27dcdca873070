# markup_dashboard/extensions.py
from flask_sqlalchemy import SQLAlchemy
from marshmallow import ValidationError
from flask import jsonify

db = SQLAlchemy()
# plain marshmallow is enough; schemas live in markup_dashboard/schemas.py


class MarkupError(Exception):
    """Base error for the markup engine."""


class SharedDataLoadError(MarkupError):
    """The cost collections or revenue history of a business could not be read."""


def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), 400


def handle_markup_error(err: MarkupError):
    return jsonify({"error": str(err)}), 503
