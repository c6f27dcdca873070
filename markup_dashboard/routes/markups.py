# markup_dashboard/routes/markups.py
import math
from flask import Blueprint, request, jsonify, current_app
from ..models import CalculatedMarkup
from ..schemas import CalculatedMarkupSchema
from ..services.auth import require_api_key
from ..services.markup import suggest_price
from ..services.recalculation import (
    MarkupRecalculator, load_breakdown, recalculate_markups, schedule_recalculation,
)

bp = Blueprint("markups", __name__)

@bp.post("/<business_id>/recalculate")
@require_api_key
def recalculate(business_id):
    """
    Recompute every pricing block of the business now.
    A run already in progress makes this a no-op (skipped_by_guard=true).
    """
    summary = recalculate_markups(business_id)
    return jsonify(summary.to_dict())

@bp.post("/<business_id>/session-start")
@require_api_key
def session_start(business_id):
    # debounced: other session data settles before the run
    schedule_recalculation(current_app._get_current_object(), business_id)
    return jsonify({"scheduled": True}), 202

@bp.get("/<business_id>")
def list_markups(business_id):
    rows = CalculatedMarkup.query.filter_by(business_id=business_id).order_by(CalculatedMarkup.name).all()
    return jsonify({"results": CalculatedMarkupSchema(many=True).dump(rows)})

@bp.get("/<business_id>/breakdown/<slug>")
def breakdown(business_id, slug):
    data = load_breakdown(business_id, slug)
    if data is None:
        return jsonify({"error": "Unknown markup"}), 404
    return jsonify(data)

@bp.get("/<business_id>/blocks/<block_id>/preview")
def preview(business_id, block_id):
    result = MarkupRecalculator(business_id).preview(block_id)
    if result is None:
        return jsonify({"error": "Block or selection not found"}), 404
    return jsonify({
        "name": result.block["name"],
        "average_revenue": result.average_revenue,
        "total_percent": result.total_percent,
        "averaging_period": result.averaging_period,
        **result.breakdown_blob(),
    })

@bp.get("/<business_id>/price")
def price(business_id):
    name = (request.args.get("name") or "").strip()
    try:
        cost = float(request.args.get("cost", ""))
    except ValueError:
        return jsonify({"error": "cost must be a number"}), 400
    if not math.isfinite(cost):
        return jsonify({"error": "cost must be a finite number"}), 400
    if cost < 0:
        return jsonify({"error": "cost must be >= 0"}), 400

    row = CalculatedMarkup.query.filter_by(business_id=business_id, name=name).first()
    if row is None:
        return jsonify({"error": "Unknown markup"}), 404
    return jsonify({
        "name": row.name,
        "cost": cost,
        "markup_multiplier": row.markup_multiplier,
        "price": suggest_price(cost, row.markup_multiplier),
        "effective_price": suggest_price(cost, row.effective_multiplier),
    })
