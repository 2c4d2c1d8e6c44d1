"""Tests for rule models — defaults and snapshot conversion."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from app.models.fx_rule import FxRule
from app.models.pricing_rule import PricingRule
from app.pricing_engine.snapshots import FxRuleSnapshot, PricingRuleSnapshot


class TestPricingRule:

    def test_defaults(self):
        rule = PricingRule(tx_type="TRANSFER", from_currency="EUR", to_currency="XOF")
        assert isinstance(rule.id, uuid.UUID)
        assert rule.active is True
        assert rule.priority == 0
        assert rule.countries == []
        assert rule.fee_mode == "NONE"
        assert rule.fx_mode == "MARKET"
        assert rule.version == 1

    def test_to_snapshot(self, pricing_rule_row):
        pricing_rule_row.countries = ["CI", "SN"]
        pricing_rule_row.amount_max = Decimal("5000")
        snapshot = pricing_rule_row.to_snapshot()

        assert isinstance(snapshot, PricingRuleSnapshot)
        assert snapshot.id == "11111111-1111-1111-1111-111111111111"
        assert snapshot.countries == ("CI", "SN")
        assert snapshot.amount_range.min == Decimal("0")
        assert snapshot.amount_range.max == Decimal("5000")
        assert snapshot.fee.mode == "PERCENT"
        assert snapshot.fee.percent == Decimal("2")
        assert snapshot.fx.override_rate == Decimal("655")
        assert snapshot.version == 3

    def test_snapshot_is_detached(self, pricing_rule_row):
        snapshot = pricing_rule_row.to_snapshot()
        pricing_rule_row.priority = 99
        pricing_rule_row.fee_percent = Decimal("9")
        assert snapshot.priority == 10
        assert snapshot.fee.percent == Decimal("2")

    def test_currencies_upper_cased(self):
        rule = PricingRule(tx_type="transfer", from_currency="eur", to_currency="xof")
        snapshot = rule.to_snapshot()
        assert (snapshot.tx_type, snapshot.from_currency, snapshot.to_currency) == (
            "TRANSFER", "EUR", "XOF",
        )


class TestFxRule:

    def test_defaults(self):
        rule = FxRule(name="Default", from_currency="EUR", to_currency="XOF")
        assert rule.mode == "PASS_THROUGH"
        assert rule.provider == ""
        assert rule.percent == Decimal("0")

    def test_to_snapshot_normalizes_scope(self):
        updated = datetime(2026, 5, 1, tzinfo=timezone.utc)
        rule = FxRule(
            name="Orange CI",
            from_currency="eur",
            to_currency="xof",
            tx_type=" transfer ",
            provider=" Orange ",
            country="CI",
            mode="DELTA_ABS",
            delta_abs=Decimal("1.5"),
            updated_at=updated,
        )
        snapshot = rule.to_snapshot()

        assert isinstance(snapshot, FxRuleSnapshot)
        assert snapshot.tx_type == "TRANSFER"
        assert snapshot.provider == "orange"
        assert snapshot.from_currency == "EUR"
        assert snapshot.delta_abs == Decimal("1.5")
        assert snapshot.updated_at == updated
