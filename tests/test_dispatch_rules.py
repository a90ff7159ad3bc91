"""Tests for propcare.rules.dispatch: both decision ladders"""

from propcare.models import Issue, LandlordSettings, PriceEstimate
from propcare.rules.dispatch import (
    default_landlord_settings,
    evaluate,
    evaluate_landlord_rules,
)


def _estimate(mid, confidence=80):
    return PriceEstimate(
        low_price_pence=round(mid * 0.8),
        high_price_pence=round(mid * 1.2),
        mid_price_pence=mid,
        confidence=confidence,
    )


def _issue(category="plumbing", urgency="medium"):
    return {"issue_category": category, "urgency": urgency}


# =========================================================================
# evaluate: fixed ladder
# =========================================================================


class TestEvaluate:

    def test_emergency_urgency(self):
        decision = evaluate(_issue("cosmetic", "emergency"), _estimate(10000))
        assert decision.action == "auto_dispatch"
        assert decision.urgency_override is True

    def test_emergency_category(self):
        decision = evaluate(_issue("water_leak", "high"), _estimate(10000))
        assert decision.action == "auto_dispatch"
        assert decision.urgency_override is True
        assert "water_leak" in decision.reason

    def test_low_confidence(self):
        decision = evaluate(_issue(), _estimate(10000, confidence=50))
        assert decision.action == "request_approval"
        assert "confidence" in decision.reason

    def test_high_price(self):
        decision = evaluate(_issue(), _estimate(35000))
        assert decision.action == "request_approval"
        assert "£350" in decision.reason

    def test_cheap_and_confident(self):
        decision = evaluate(_issue(), _estimate(15000, confidence=70))
        assert decision.action == "auto_dispatch"
        assert decision.urgency_override is False

    def test_mid_band_defaults_to_approval(self):
        decision = evaluate(_issue(), _estimate(20000, confidence=90))
        assert decision.action == "request_approval"
        assert decision.reason.startswith("Default policy")

    def test_confidence_between_sixty_and_seventy(self):
        decision = evaluate(_issue(), _estimate(10000, confidence=65))
        assert decision.action == "request_approval"
        assert decision.reason.startswith("Default policy")

    # Rule precedence for every colliding pair

    def test_emergency_urgency_beats_low_confidence(self):
        assert evaluate(_issue("general", "emergency"), _estimate(10000, confidence=10)).action == "auto_dispatch"

    def test_emergency_urgency_beats_high_price(self):
        assert evaluate(_issue("general", "emergency"), _estimate(90000)).action == "auto_dispatch"

    def test_emergency_category_beats_low_confidence(self):
        assert evaluate(_issue("security", "low"), _estimate(10000, confidence=10)).action == "auto_dispatch"

    def test_emergency_category_beats_high_price(self):
        assert evaluate(_issue("plumbing_emergency", "low"), _estimate(90000)).action == "auto_dispatch"

    def test_emergency_urgency_reason_wins_over_category(self):
        decision = evaluate(_issue("water_leak", "emergency"), _estimate(10000))
        assert decision.reason.startswith("Emergency issue")

    def test_low_confidence_beats_cheap(self):
        assert evaluate(_issue(), _estimate(5000, confidence=40)).action == "request_approval"

    def test_accepts_issue_objects(self):
        issue = Issue(id="i1", tenant_id="t1", property_id="p1", landlord_lead_id="ll1",
                      conversation_id="c1", issue_category="electrical_emergency", urgency="high")
        assert evaluate(issue, _estimate(90000, confidence=10)).action == "auto_dispatch"


# =========================================================================
# evaluate_landlord_rules: landlord-configured ladder
# =========================================================================


class TestEvaluateLandlordRules:

    def test_defaults_when_no_settings(self):
        decision = evaluate_landlord_rules(_issue("plumbing", "medium"), _estimate(10000))
        assert decision.action == "auto_dispatch"
        assert "Safe category" in decision.reason

    def test_emergency_auto_dispatch(self):
        decision = evaluate_landlord_rules(_issue("cosmetic", "emergency"), _estimate(90000))
        assert decision.action == "auto_dispatch"

    def test_emergency_with_auto_dispatch_disabled_escalates(self):
        settings = LandlordSettings(landlord_lead_id="ll1", emergency_auto_dispatch=False)
        decision = evaluate_landlord_rules(_issue("general", "emergency"), _estimate(10000), settings)
        assert decision.action == "escalate_admin"
        assert decision.urgency_override is True

    def test_heating_is_emergency_category(self):
        decision = evaluate_landlord_rules(_issue("heating", "medium"), _estimate(90000))
        assert decision.action == "auto_dispatch"
        assert decision.urgency_override is True

    def test_emergency_category_falls_through_when_disabled(self):
        settings = LandlordSettings(landlord_lead_id="ll1", emergency_auto_dispatch=False)
        decision = evaluate_landlord_rules(_issue("heating", "medium"), _estimate(90000), settings)
        assert decision.action == "request_approval"

    def test_always_require_approval_category(self):
        settings = LandlordSettings(landlord_lead_id="ll1", always_require_approval_categories=["plumbing"])
        decision = evaluate_landlord_rules(_issue("plumbing", "low"), _estimate(5000), settings)
        assert decision.action == "request_approval"
        assert "always requires" in decision.reason

    def test_above_approval_threshold(self):
        decision = evaluate_landlord_rules(_issue("plumbing", "low"), _estimate(60000))
        assert decision.action == "request_approval"
        assert "exceeds approval threshold" in decision.reason

    def test_budget_would_be_exceeded(self):
        settings = LandlordSettings(
            landlord_lead_id="ll1", monthly_budget_pence=20000, current_month_spend_pence=15000
        )
        decision = evaluate_landlord_rules(_issue("plumbing", "low"), _estimate(10000), settings)
        assert decision.action == "request_approval"
        assert "monthly budget" in decision.reason

    def test_budget_alert_does_not_block(self):
        settings = LandlordSettings(
            landlord_lead_id="ll1", monthly_budget_pence=20000, current_month_spend_pence=8000
        )
        decision = evaluate_landlord_rules(_issue("plumbing", "low"), _estimate(9000), settings)
        assert decision.action == "auto_dispatch"

    def test_safe_category_with_high_confidence(self):
        settings = LandlordSettings(landlord_lead_id="ll1", auto_approve_categories=[])
        decision = evaluate_landlord_rules(_issue("locksmith", "low"), _estimate(10000, confidence=75), settings)
        assert decision.action == "auto_dispatch"
        assert "Safe category" in decision.reason

    def test_safe_category_low_confidence_needs_approval(self):
        settings = LandlordSettings(landlord_lead_id="ll1", auto_approve_categories=[])
        decision = evaluate_landlord_rules(_issue("locksmith", "low"), _estimate(10000, confidence=50), settings)
        assert decision.action == "request_approval"

    def test_auto_approve_notification_flag(self):
        settings = LandlordSettings(landlord_lead_id="ll1", notify_on_auto_approve=False)
        decision = evaluate_landlord_rules(_issue("plumbing", "low"), _estimate(10000), settings)
        assert decision.notify_landlord is False

    def test_default_settings_values(self):
        settings = default_landlord_settings("ll9")
        assert settings.landlord_lead_id == "ll9"
        assert settings.auto_approve_under_pence == 15000
        assert settings.require_approval_above_pence == 50000
        assert settings.emergency_auto_dispatch is True

    def test_category_approval_beats_budget_and_threshold(self):
        settings = LandlordSettings(
            landlord_lead_id="ll1",
            always_require_approval_categories=["plumbing"],
            monthly_budget_pence=1000,
        )
        decision = evaluate_landlord_rules(_issue("plumbing", "low"), _estimate(90000), settings)
        assert "always requires" in decision.reason

    def test_auto_approve_category_under_threshold(self):
        settings = LandlordSettings(landlord_lead_id="ll1", auto_approve_categories=["appliance"])
        decision = evaluate_landlord_rules(_issue("appliance", "low"), _estimate(12000, confidence=40), settings)
        assert decision.action == "auto_dispatch"
        assert 'approved category "appliance"' in decision.reason
