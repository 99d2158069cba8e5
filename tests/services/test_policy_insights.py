"""Tests for the policy insight aggregator."""
from app.schemas.funding import RequestCategory
from app.services.policy.insights import (
    build_grey_area_suggestion,
    build_policy_insights,
    format_reason,
    percent,
    upsert_reason,
)
from app.services.policy.past_decisions import DecisionLog, calculate_rate


def test_calculate_rate_zero_when_no_decisions():
    assert calculate_rate(0, 0) == 0.0
    assert calculate_rate(2, 1) == 2 / 3


def test_format_reason_with_and_without_code():
    assert format_reason("Late.", "FIN-004") == "[FIN-004] Late."
    assert format_reason("Late.", None) == "Late."


def test_upsert_reason_dedups_and_caps():
    reasons: list[str] = []
    for r in ["a", "b", "a", "c", "d"]:
        reasons = upsert_reason(reasons, r)
    assert reasons == ["a", "b", "c"]


def test_percent_rounds_half_up():
    assert percent(2 / 3) == 67
    assert percent(0.125) == 13
    assert percent(0.5) == 50


def test_insights_from_shipped_log(knowledge_base, decision_log):
    summary = build_policy_insights(knowledge_base, decision_log)
    by_category = {c.category: c for c in summary.categories}

    # Other has no historical decisions and is never reported
    assert RequestCategory.OTHER not in by_category
    assert len(summary.categories) == 8

    travel = by_category[RequestCategory.CONFERENCE_TRAVEL]
    assert (travel.approvals, travel.denials) == (2, 1)
    assert travel.approvalRate == 2 / 3
    assert travel.topReasons == [
        "[FIN-004] Policy requires 30-day notice; external funding not exhausted."
    ]

    assert by_category[RequestCategory.STUDENT_EXPERIENCE].topReasons == []
    assert by_category[RequestCategory.RESEARCH_EQUIPMENT].approvalRate == 0.0


def test_categories_sorted_by_name(knowledge_base, decision_log):
    names = [c.category.value for c in build_policy_insights(knowledge_base, decision_log).categories]
    assert names == sorted(names)
    assert names[0] == "Classroom & Instructional Technology"
    assert names[-1] == "Teaching Materials, Software, & Subscriptions"


def test_grey_areas_only_for_rates_strictly_inside_band(knowledge_base, decision_log):
    """0% and 100% categories are not grey areas; 67% is, even though it rates Likely."""
    summary = build_policy_insights(knowledge_base, decision_log)
    grey = {g.category for g in summary.frequentGreyAreas}
    assert grey == {
        RequestCategory.CLASSROOM_TECHNOLOGY,
        RequestCategory.CONFERENCE_TRAVEL,
        RequestCategory.FACILITIES,
        RequestCategory.STUDENT_WORKER_SUPPORT,
        RequestCategory.TEACHING_MATERIALS,
    }


def test_grey_area_text(knowledge_base, decision_log):
    summary = build_policy_insights(knowledge_base, decision_log)
    travel = next(
        g for g in summary.frequentGreyAreas if g.category == RequestCategory.CONFERENCE_TRAVEL
    )
    assert travel.summary == "Approval rate 67% indicates inconsistent application of policy."
    assert travel.suggestion == (
        "Review FIN-004 guidance (https://uvapolicy.virginia.edu/policy/FIN-004) to clarify "
        "approval standards for Conference Travel & Presentations."
    )


def test_suggestion_falls_back_to_denial_reason(knowledge_base):
    """Other has no policy reference, so its primary denial details are used."""
    assert build_grey_area_suggestion(RequestCategory.OTHER, knowledge_base) == (
        "Approvers need a clear link to instructional or student success outcomes."
    )


def test_suggestion_generic_for_unknown_category(knowledge_base):
    assert build_grey_area_suggestion("Unlisted", knowledge_base) == (
        "Clarify criteria and documentation requirements."
    )


def test_top_reasons_capped_at_three_in_first_seen_order(knowledge_base, make_decision):
    cat = RequestCategory.OTHER
    log = DecisionLog([
        make_decision(cat, "Denied", "First."),
        make_decision(cat, "Denied", "Second.", policyCode="X-1"),
        make_decision(cat, "Denied", "First."),
        make_decision(cat, "Approved", "Fine."),
        make_decision(cat, "Denied", "Third."),
        make_decision(cat, "Denied", "Fourth."),
    ])
    [insight] = build_policy_insights(knowledge_base, log).categories
    assert insight.topReasons == ["First.", "[X-1] Second.", "Third."]
    assert (insight.approvals, insight.denials) == (1, 5)


def test_same_reason_with_different_code_is_distinct(knowledge_base, make_decision):
    cat = RequestCategory.OTHER
    log = DecisionLog([
        make_decision(cat, "Denied", "Late."),
        make_decision(cat, "Denied", "Late.", policyCode="FIN-004"),
    ])
    [insight] = build_policy_insights(knowledge_base, log).categories
    assert insight.topReasons == ["Late.", "[FIN-004] Late."]


def test_empty_log_gives_empty_summary(knowledge_base, empty_log):
    summary = build_policy_insights(knowledge_base, empty_log)
    assert summary.categories == []
    assert summary.frequentGreyAreas == []


def test_insights_are_idempotent(knowledge_base, decision_log):
    first = build_policy_insights(knowledge_base, decision_log)
    second = build_policy_insights(knowledge_base, decision_log)
    assert first.model_dump_json() == second.model_dump_json()


def test_defaults_load_shipped_fixtures():
    assert build_policy_insights() == build_policy_insights()
    assert len(build_policy_insights().categories) == 8
