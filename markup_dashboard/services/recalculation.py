"""
Markup recalculation for every pricing block of a business.

One run reads the cost collections and the revenue history once, then walks the
blocks in list order. Each block gets its selection, an average revenue for its
period, a cost breakdown and a multiplier; the result replaces the block's
CalculatedMarkup row and is projected into the `markup_<slug>` blob and into
the block entry of `pricing_blocks`, all in one transaction.
"""
import copy
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Dict, List, Optional

from flask import current_app
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db, SharedDataLoadError
from ..models import CalculatedMarkup
from ..schemas import PricingBlockSchema, RevenueRecordSchema
from .costs import CostBreakdown, aggregate_costs
from .markup import calc_markup, safe_multiplier, spread_fixed_value
from .revenue import RevenueRecord, average_revenue, is_all_time
from .store import (
    PRICING_BLOCKS_KEY, REVENUE_HISTORY_KEY, ConfigurationStore,
    breakdown_key, load_cost_collections, selection_key, slugify,
)

logger = logging.getLogger(__name__)

SUB_RECIPE_BLOCK_ID = "subreceita-fixo"
GUARD_EXTENSION = "markup_run_guard"


class RunGuard:
    """At most one recalculation per business at a time; extra triggers are dropped."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._timers: Dict[str, threading.Timer] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, business_id: str) -> threading.Lock:
        with self._registry_lock:
            return self._locks.setdefault(business_id, threading.Lock())

    def is_running(self, business_id: str) -> bool:
        return self._lock_for(business_id).locked()

    @contextmanager
    def hold(self, business_id: str):
        lock = self._lock_for(business_id)
        acquired = lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                lock.release()

    def replace_timer(self, business_id: str, timer: threading.Timer) -> None:
        with self._registry_lock:
            pending = self._timers.get(business_id)
            if pending is not None:
                pending.cancel()
            self._timers[business_id] = timer


def init_app(app):
    app.extensions[GUARD_EXTENSION] = RunGuard()


def run_guard() -> RunGuard:
    return current_app.extensions[GUARD_EXTENSION]


@dataclass
class RecalculationSummary:
    business_id: str
    skipped_by_guard: bool = False
    processed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


@dataclass
class Snapshot:
    fixed_expenses: list
    payroll: list
    sales_charges: list
    revenue: List[RevenueRecord]


@dataclass
class BlockMarkup:
    block: dict
    period: Optional[str]       # as stored on the block
    averaging_period: str
    average_revenue: float
    breakdown: CostBreakdown
    total_percent: float
    markup_multiplier: float
    effective_multiplier: float

    def figures(self) -> dict:
        """The computed values shared by the markup row and both configuration blobs."""
        b = self.breakdown
        return {
            "fixed_cost_percent": b.fixed_cost_percent,
            "taxes_percent": b.taxes_percent,
            "payment_fees_percent": b.payment_fees_percent,
            "commissions_percent": b.commissions_percent,
            "other_percent": b.other_percent,
            "flat_currency_total": b.flat_currency_total,
            "markup_multiplier": self.markup_multiplier,
            "effective_multiplier": self.effective_multiplier,
        }

    def breakdown_blob(self) -> dict:
        return dict(self.figures(), period=self.period)

    def to_row(self, business_id: str) -> CalculatedMarkup:
        name = self.block["name"]
        return CalculatedMarkup(
            business_id=business_id,
            name=name,
            kind="sub_receita" if "sub" in name.lower() else "normal",
            period=self.period,
            desired_profit_percent=self.block["desired_profit_percent"],
            sales_charges_percent=self.breakdown.sales_charges_percent,
            selected_fixed_expenses=self.breakdown.selected_fixed_expenses,
            selected_payroll=self.breakdown.selected_payroll,
            selected_sales_charges=self.breakdown.selected_sales_charges,
            active=True,
            **self.figures(),
        )


def block_label(raw, position: int) -> str:
    if isinstance(raw, dict):
        return raw.get("name") or raw.get("id") or f"#{position}"
    return f"#{position}"


def averaging_period(block: dict, default: str) -> str:
    """Window used for the revenue average; the block keeps its own stored period."""
    if block["id"] == SUB_RECIPE_BLOCK_ID:
        return "all"
    period = block.get("period") or default
    return "all" if is_all_time(period) else period


class MarkupRecalculator:
    def __init__(self, business_id: str, today: Optional[date] = None):
        cfg = current_app.config
        self.business_id = business_id
        self.today = today or date.today()
        self.store = ConfigurationStore(business_id)
        self.fallback = cfg["MARKUP_FALLBACK_MULTIPLIER"]
        self.categories = cfg["CHARGE_CATEGORIES"]
        self.default_hours = cfg["DEFAULT_MONTHLY_HOURS"]
        self.default_period = cfg["DEFAULT_PERIOD"]

    # ---------- loading ----------
    def load_blocks(self) -> List[dict]:
        blocks = self.store.load(PRICING_BLOCKS_KEY, [])
        return copy.deepcopy(blocks) if isinstance(blocks, list) else []

    def load_snapshot(self) -> Snapshot:
        try:
            fixed, payroll, charges = load_cost_collections(self.business_id)
            raw = self.store.load(REVENUE_HISTORY_KEY, [])
            records = RevenueRecordSchema(many=True).load(raw if isinstance(raw, list) else [])
        except (SQLAlchemyError, ValidationError) as e:
            raise SharedDataLoadError(f"Could not load cost data for business {self.business_id}: {e}") from e
        revenue = [RevenueRecord(month=r["month"], amount=r["amount"], id=r.get("id")) for r in records]
        return Snapshot(fixed, payroll, charges, revenue)

    def load_selection(self, block_id: str):
        selection = self.store.load(selection_key(block_id))
        return selection if isinstance(selection, (dict, list)) else None

    # ---------- computing ----------
    def compute(self, block: dict, selection, snapshot: Snapshot) -> BlockMarkup:
        window = averaging_period(block, self.default_period)
        revenue = average_revenue(snapshot.revenue, window, self.today)
        breakdown = aggregate_costs(
            snapshot.fixed_expenses, snapshot.payroll, snapshot.sales_charges,
            selection, revenue, self.categories, self.default_hours,
        )
        result = calc_markup(
            breakdown.fixed_cost_percent / 100,
            breakdown.taxes_percent / 100,
            breakdown.payment_fees_percent / 100,
            breakdown.commissions_percent / 100,
            breakdown.other_percent / 100,
            block["desired_profit_percent"] / 100,
        )
        multiplier = safe_multiplier(result.multiplier, self.fallback)
        if multiplier != result.multiplier:
            logger.warning(
                f"Block '{block['name']}' adds up to {result.total_percent:.2%}; using fallback multiplier {multiplier}"
            )
        ticket = block.get("average_ticket")
        effective = spread_fixed_value(
            multiplier, breakdown.flat_currency_total, ticket if ticket and ticket > 0 else None
        )
        return BlockMarkup(
            block=block,
            period=block.get("period"),
            averaging_period=window,
            average_revenue=revenue,
            breakdown=breakdown,
            total_percent=result.total_percent,
            markup_multiplier=multiplier,
            effective_multiplier=effective,
        )

    def preview(self, block_id: str) -> Optional[BlockMarkup]:
        """Compute one block without writing anything. None if the block or its selection is missing."""
        raw = next((b for b in self.load_blocks() if isinstance(b, dict) and b.get("id") == block_id), None)
        if raw is None:
            return None
        block = PricingBlockSchema().load(raw)
        selection = self.load_selection(block_id)
        if selection is None:
            return None
        return self.compute(block, selection, self.load_snapshot())

    # ---------- persisting ----------
    def persist(self, result: BlockMarkup) -> None:
        name = result.block["name"]
        CalculatedMarkup.query.filter_by(business_id=self.business_id, name=name).delete()
        db.session.add(result.to_row(self.business_id))

        self.store.save(breakdown_key(name), result.breakdown_blob())

        blocks = self.load_blocks()
        for entry in blocks:
            if isinstance(entry, dict) and entry.get("name") == name:
                entry.update(result.figures())
                self.store.save(PRICING_BLOCKS_KEY, blocks)
                break
        db.session.commit()

    # ---------- running ----------
    def run(self) -> RecalculationSummary:
        with run_guard().hold(self.business_id) as acquired:
            if not acquired:
                logger.info(f"Markup recalculation already running for {self.business_id}; trigger ignored")
                return RecalculationSummary(self.business_id, skipped_by_guard=True)
            return self._run()

    def _run(self) -> RecalculationSummary:
        summary = RecalculationSummary(self.business_id)
        blocks = self.load_blocks()
        if not blocks:
            logger.info(f"No pricing blocks for {self.business_id}")
            return summary

        snapshot = self.load_snapshot()
        logger.info(
            f"Recalculating {len(blocks)} blocks for {self.business_id} "
            f"({len(snapshot.revenue)} revenue records)"
        )
        for position, raw in enumerate(blocks):
            label = block_label(raw, position)
            try:
                block = PricingBlockSchema().load(raw)
                selection = self.load_selection(block["id"])
                if selection is None:
                    logger.warning(f"No selection saved for block '{label}'; skipping")
                    summary.skipped.append(label)
                    continue
                self.persist(self.compute(block, selection, snapshot))
                summary.processed.append(label)
            except Exception:
                db.session.rollback()
                logger.exception(f"Failed to recalculate block '{label}'")
                summary.failed.append(label)
        logger.info(
            f"Markups for {self.business_id}: {len(summary.processed)} saved, "
            f"{len(summary.skipped)} skipped, {len(summary.failed)} failed"
        )
        return summary


def recalculate_markups(business_id: str, today: Optional[date] = None) -> RecalculationSummary:
    return MarkupRecalculator(business_id, today=today).run()


def schedule_recalculation(app, business_id: str, delay: Optional[float] = None) -> threading.Timer:
    """
    Run the recalculation after `delay` seconds on a background timer.
    Scheduling again before the timer fires replaces the pending run.
    """
    if delay is None:
        delay = app.config["MARKUP_RECALC_DELAY"]

    def _run():
        with app.app_context():
            try:
                recalculate_markups(business_id)
            except SharedDataLoadError:
                logger.exception(f"Background markup recalculation aborted for {business_id}")

    timer = threading.Timer(delay, _run)
    timer.daemon = True
    app.extensions[GUARD_EXTENSION].replace_timer(business_id, timer)
    timer.start()
    return timer


def load_breakdown(business_id: str, slug: str) -> Optional[dict]:
    """Breakdown blob for a block slug, falling back to the stored markup row."""
    blob = ConfigurationStore(business_id).load(f"markup_{slug}")
    if blob is not None:
        return blob
    for row in CalculatedMarkup.query.filter_by(business_id=business_id).all():
        if slugify(row.name) == slug:
            return {
                "period": row.period,
                "fixed_cost_percent": row.fixed_cost_percent,
                "taxes_percent": row.taxes_percent,
                "payment_fees_percent": row.payment_fees_percent,
                "commissions_percent": row.commissions_percent,
                "other_percent": row.other_percent,
                "flat_currency_total": row.flat_currency_total,
                "markup_multiplier": row.markup_multiplier,
                "effective_multiplier": row.effective_multiplier,
            }
    return None
