"""Tests for the rule-based recommendation scorer."""
from app.schemas.funding import RequestCategory
from app.services.policy.past_decisions import DecisionLog
from app.services.recommend.rules import (
    DEFAULT_APPROVAL_RATE,
    HeuristicScorer,
    alignment_score,
    apply_policy_code,
    build_denial_hint,
    classify_viability,
    has_keyword_hit,
)


def _scorer(knowledge_base, decision_log):
    return HeuristicScorer(knowledge_base, decision_log)


def test_alignment_score_steps_down_and_floors():
    assert [alignment_score(i) for i in range(3)] == [90, 85, 80]
    assert alignment_score(10) == 40
    assert alignment_score(25) == 40


def test_classify_viability_thresholds():
    assert classify_viability(0.65) == "Likely"
    assert classify_viability(1.0) == "Likely"
    assert classify_viability(0.64) == "Needs Review"
    assert classify_viability(0.4) == "Needs Review"
    assert classify_viability(0.39) == "Risky"
    assert classify_viability(0.0) == "Risky"


def test_keyword_match_is_case_insensitive_substring():
    assert has_keyword_hit(RequestCategory.CONFERENCE_TRAVEL, "Booked a HOTEL near the venue")
    assert has_keyword_hit(RequestCategory.CONFERENCE_TRAVEL, "submitted last minute")
    # substring match: "ta" inside "data"
    assert has_keyword_hit(RequestCategory.STUDENT_WORKER_SUPPORT, "Need data entry help")
    assert not has_keyword_hit(RequestCategory.OTHER, "Whiteboard markers")


def test_apply_policy_code_uses_primary_reference(knowledge_base):
    note = apply_policy_code("Needs data.", RequestCategory.CLASSROOM_TECHNOLOGY, knowledge_base)
    assert note == "[FIN-038] Needs data. (https://uvapolicy.virginia.edu/policy/FIN-038)"


def test_apply_policy_code_without_reference_returns_note(knowledge_base):
    assert apply_policy_code("Plain.", RequestCategory.OTHER, knowledge_base) == "Plain."
    assert apply_policy_code(None, RequestCategory.OTHER, knowledge_base) is None


def test_denial_hint_format(knowledge_base):
    hint = build_denial_hint(RequestCategory.OTHER, knowledge_base)
    assert hint == (
        "Similar Other requests were denied: Insufficient details: Approvers need a clear "
        "link to instructional or student success outcomes.."
    )
    assert build_denial_hint("Unlisted", knowledge_base) is None


def test_empty_batch(knowledge_base, decision_log, summary):
    result = _scorer(knowledge_base, decision_log).score(summary, [])
    assert result.rankedRequests == []
    assert result.policyGreyAreas == []
    assert len(result.recommendations) == 3


def test_rank_follows_input_order_not_score(knowledge_base, decision_log, summary, make_request):
    """Rank is the input position; it is never re-sorted by viability or score."""
    requests = [
        make_request(RequestCategory.RESEARCH_EQUIPMENT, "Microscope for teaching"),
        make_request(RequestCategory.STUDENT_EXPERIENCE, "Printing for advising handouts"),
    ]
    result = _scorer(knowledge_base, decision_log).score(summary, requests)
    assert [r.id for r in result.rankedRequests] == [req.id for req in requests]
    assert [r.priorityRank for r in result.rankedRequests] == [1, 2]
    assert [r.viability for r in result.rankedRequests] == ["Risky", "Likely"]


def test_large_batch_ranks_and_scores(knowledge_base, decision_log, summary, make_request):
    requests = [make_request(RequestCategory.OTHER, "Whiteboard markers") for _ in range(12)]
    ranked = _scorer(knowledge_base, decision_log).score(summary, requests).rankedRequests
    assert len(ranked) == 12
    assert [r.priorityRank for r in ranked] == list(range(1, 13))
    scores = [r.alignmentScore for r in ranked]
    assert scores == sorted(scores, reverse=True)
    assert min(scores) == 40
    assert ranked[10].alignmentScore == 40


def test_likely_request_gets_annotated_denial_note(knowledge_base, decision_log, summary, make_request):
    req = make_request(RequestCategory.STUDENT_EXPERIENCE, "Printing for advising handouts")
    [ranked] = _scorer(knowledge_base, decision_log).score(summary, [req]).rankedRequests
    url = "https://uvafinance.virginia.edu/budget-management/budgeting"
    assert ranked.viability == "Likely"
    assert ranked.policyNote == (
        "[Budgeting Guidance] Non-mission programming: Events must directly support "
        f"academic success or advising outcomes. ({url})"
    )
    assert ranked.pastDenialHint.startswith(
        "[Budgeting Guidance] Similar Student Experience, Events, & Programming requests were denied:"
    )
    assert ranked.pastDenialHint.endswith(f"({url})")


def test_keyword_downgrades_likely(knowledge_base, decision_log, summary, make_request):
    req = make_request(RequestCategory.STUDENT_EXPERIENCE, "Catering for the welcome reception")
    [ranked] = _scorer(knowledge_base, decision_log).score(summary, [req]).rankedRequests
    assert ranked.viability == "Needs Review"
    assert knowledge_base.build_precheck_message(RequestCategory.STUDENT_EXPERIENCE) in ranked.policyNote
    assert ranked.policyNote.startswith("[Budgeting Guidance] ")


def test_keyword_does_not_change_risky(knowledge_base, decision_log, summary, make_request):
    req = make_request(RequestCategory.RESEARCH_EQUIPMENT, "VR headsets for the lab")
    [ranked] = _scorer(knowledge_base, decision_log).score(summary, [req]).rankedRequests
    assert ranked.viability == "Risky"
    assert "Past requests in Research & Lab Equipment" in ranked.policyNote


def test_conference_travel_scenario(knowledge_base, summary, make_request, make_decision):
    """1 approved / 1 denied travel → Needs Review; 'last minute' swaps the note, no downgrade."""
    cat = RequestCategory.CONFERENCE_TRAVEL
    log = DecisionLog([make_decision(cat, "Approved"), make_decision(cat, "Denied")])
    plain = make_request(cat, "Registration fee for AEA annual meeting")
    rushed = make_request(cat, "Last minute registration for AEA annual meeting")

    result = _scorer(knowledge_base, log).score(summary, [plain, rushed])
    first, second = result.rankedRequests

    assert first.viability == "Needs Review"
    assert "External funding available" in first.policyNote
    assert second.viability == "Needs Review"
    assert knowledge_base.build_precheck_message(cat) in second.policyNote
    assert len(result.policyGreyAreas) == 1


def test_shipped_travel_log_downgrades_on_keyword(knowledge_base, decision_log, summary, make_request):
    """Shipped travel history is 2/3 approved: Likely unless a keyword hits."""
    cat = RequestCategory.CONFERENCE_TRAVEL
    plain = make_request(cat, "Registration fee for AEA annual meeting")
    flight = make_request(cat, "Flight to present at AEA")

    result = _scorer(knowledge_base, decision_log).score(summary, [plain, flight])
    assert [r.viability for r in result.rankedRequests] == ["Likely", "Needs Review"]
    # the Likely request does not flag a grey area; the downgraded one does
    [grey] = result.policyGreyAreas
    assert grey.category == cat
    assert grey.summary == "Approval rate 67% indicates inconsistent application of policy."


def test_category_without_history_defaults(knowledge_base, decision_log, summary, make_request):
    """Other has no history → rate 0.6 → Needs Review and a grey area."""
    req = make_request(RequestCategory.OTHER, "Whiteboard markers")
    scorer = _scorer(knowledge_base, decision_log)
    assert scorer.category_approval_rate(RequestCategory.OTHER) == DEFAULT_APPROVAL_RATE

    result = scorer.score(summary, [req])
    [ranked] = result.rankedRequests
    assert ranked.viability == "Needs Review"
    assert ranked.policyNote == (
        "Insufficient details: Approvers need a clear link to instructional "
        "or student success outcomes."
    )
    [grey] = result.policyGreyAreas
    assert grey.summary == "Approval rate 60% indicates inconsistent application of policy."
    assert grey.suggestion == (
        "Approvers need a clear link to instructional or student success outcomes."
    )


def test_zero_rate_is_not_grey_area(knowledge_base, decision_log, summary, make_request):
    req = make_request(RequestCategory.PROFESSIONAL_DEVELOPMENT, "Leadership coaching")
    result = _scorer(knowledge_base, decision_log).score(summary, [req])
    assert result.rankedRequests[0].viability == "Risky"
    assert result.policyGreyAreas == []


def test_grey_areas_dedup_by_category(knowledge_base, decision_log, summary, make_request):
    cat = RequestCategory.TEACHING_MATERIALS
    requests = [
        make_request(cat, "Digital textbook access codes"),
        make_request(RequestCategory.CLASSROOM_TECHNOLOGY, "New projector"),
        make_request(cat, "Simulation software for ECON 2020"),
        make_request(cat, "Case study packets"),
    ]
    result = _scorer(knowledge_base, decision_log).score(summary, requests)
    assert [g.category for g in result.policyGreyAreas] == [
        cat,
        RequestCategory.CLASSROOM_TECHNOLOGY,
    ]


def test_static_recommendations_independent_of_input(knowledge_base, decision_log, summary, make_request):
    scorer = _scorer(knowledge_base, decision_log)
    empty = scorer.score(summary, [])
    busy = scorer.score(summary, [make_request(RequestCategory.OTHER, "Markers")])
    assert empty.recommendations == busy.recommendations
    assert [r.category for r in empty.recommendations] == [
        RequestCategory.STUDENT_WORKER_SUPPORT,
        RequestCategory.CLASSROOM_TECHNOLOGY,
        RequestCategory.FACILITIES,
    ]


def test_reasoning_marks_rank_as_submission_order(knowledge_base, decision_log, summary, make_request):
    req = make_request(RequestCategory.OTHER, "Whiteboard markers")
    [ranked] = _scorer(knowledge_base, decision_log).score(summary, [req]).rankedRequests
    assert ranked.reasoning.startswith("Placeholder ranking")
    assert "submission order" in ranked.reasoning
