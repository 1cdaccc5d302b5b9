"""Built-in rule set — the standard follow-up policy for both pipelines."""

from typing import List

from action_engine.models.rule import EntityType, Rule, Urgency, UrgencyEscalation

_APPLICANT_RULES = [
    dict(
        id="applicant_interview_not_scheduled",
        name="24-hour interview standard",
        condition_type="time_since_creation",
        condition_config={"phase": "intake", "min_days": 1, "task_not_done": "calendar_invite"},
        urgency=Urgency.WARNING,
        urgency_escalation=UrgencyEscalation(min_days=2, urgency=Urgency.CRITICAL),
        icon="🕐",
        title_template="Interview not yet scheduled",
        detail_template="Day {{days_since_created}}: goal is application to interview within 24 hours.",
        action_template="Schedule virtual interview now",
    ),
    dict(
        id="applicant_offer_unsigned",
        name="Offer letter chase",
        condition_type="task_stale",
        condition_config={
            "done_task_id": "offer_letter_sent",
            "pending_task_id": "offer_hold",
            "phase": "interview",
            "min_days": 2,
        },
        urgency=Urgency.WARNING,
        icon="📝",
        title_template="Offer letter unsigned - Day {{days_in_phase}}",
        detail_template="Policy: retract offer if not accepted within 3 business days.",
        action_template="Call + text follow-up",
    ),
    dict(
        id="applicant_onboarding_sprint",
        name="7-day onboarding sprint",
        condition_type="sprint_deadline",
        condition_config={"phase": "onboarding", "warning_day": 3, "critical_day": 5, "expired_day": 7},
        urgency=Urgency.WARNING,
        icon="⏰",
        title_template="Onboarding docs incomplete - Day {{sprint_day}}",
        detail_template="{{sprint_remaining}} days remaining in the 7-day sprint.",
        action_template="Follow up: \"Do you have any questions?\"",
    ),
    dict(
        id="applicant_onboarding_expired",
        name="Onboarding sprint expired",
        condition_type="phase_time",
        condition_config={"phase": "onboarding", "min_days": 7},
        urgency=Urgency.CRITICAL,
        icon="🚨",
        title_template="7-Day Sprint EXPIRED",
        detail_template="Day {{days_in_phase}} of onboarding: policy is to retract offer.",
        action_template="Retract offer or escalate to management",
    ),
    dict(
        id="applicant_verification_stall",
        name="Verification stall",
        condition_type="phase_time",
        condition_config={"phase": "verification", "min_days": 3},
        urgency=Urgency.WARNING,
        urgency_escalation=UrgencyEscalation(min_days=5, urgency=Urgency.CRITICAL),
        icon="✅",
        title_template="Verification pending - Day {{days_in_phase}}",
        detail_template="Check: I-9 validation, registry status, training enrollment.",
        action_template="Complete remaining verification items",
    ),
    dict(
        id="applicant_orientation_invite",
        name="Orientation not scheduled",
        condition_type="task_incomplete",
        condition_config={"task_id": "invite_sent", "phase": "orientation", "min_days": 1},
        urgency=Urgency.WARNING,
        icon="🎓",
        title_template="Orientation invite not sent",
        detail_template="{{name}} is ready: schedule for the next orientation.",
        action_template="Send calendar invite with instructions",
    ),
    dict(
        id="applicant_hca_expired",
        name="HCA registration expired",
        condition_type="date_expiring",
        condition_config={"field": "hca_expiration", "days_until": -1},
        urgency=Urgency.CRITICAL,
        icon="⚠️",
        title_template="HCA registration EXPIRED",
        detail_template="Expired {{days_until_expiry}} days ago. Cannot be deployed.",
        action_template="Contact {{name}} to renew HCA immediately",
    ),
    dict(
        id="applicant_hca_expiring_30",
        name="HCA expiring within 30 days",
        condition_type="date_expiring",
        condition_config={"field": "hca_expiration", "days_warning": 30},
        urgency=Urgency.WARNING,
        icon="📅",
        title_template="HCA expiring in {{days_until_expiry}} days",
        detail_template="Expires {{expiry_date}}. Begin renewal process.",
        action_template="Send HCA renewal reminder",
    ),
    dict(
        id="applicant_hca_expiring_90",
        name="HCA expiring within 90 days",
        condition_type="date_expiring",
        condition_config={"field": "hca_expiration", "days_warning": 90, "days_exclude_under": 30},
        urgency=Urgency.INFO,
        icon="📅",
        title_template="HCA expiring in {{days_until_expiry}} days",
        detail_template="Expires {{expiry_date}}. Plan ahead for renewal.",
        action_template="Note for upcoming renewal",
    ),
    dict(
        id="applicant_phone_screen_stall",
        name="No phone screen",
        condition_type="task_incomplete",
        condition_config={"task_id": "phone_screen", "phase": "intake", "min_days": 4},
        urgency=Urgency.WARNING,
        icon="📞",
        title_template="No phone screen after {{days_in_phase}} days",
        detail_template="Candidate may be lost. Consider final outreach attempt.",
        action_template="Day 5 final attempt or close out",
    ),
]

_LEAD_RULES = [
    dict(
        id="lead_speed_to_lead",
        name="Speed to lead",
        condition_type="time_since_creation",
        condition_config={
            "phase": "new_lead",
            "min_minutes": 30,
            "task_not_done": "initial_call_attempted",
        },
        urgency=Urgency.CRITICAL,
        icon="⚡",
        title_template="New lead waiting {{minutes_since_created}} minutes",
        detail_template="No initial call attempted. Goal: contact within 30 minutes.",
        action_template="Call {{name}} now",
    ),
    dict(
        id="lead_no_contact",
        name="No contact",
        condition_type="phase_time",
        condition_config={"phase": "initial_contact", "min_days": 3},
        urgency=Urgency.WARNING,
        icon="📞",
        title_template="Day {{days_in_phase}} in Initial Contact",
        detail_template="Still no live contact with decision-maker.",
        action_template="Try a different channel or time of day",
    ),
    dict(
        id="lead_assessment_overdue",
        name="Assessment overdue",
        condition_type="phase_time",
        condition_config={"phase": "assessment", "min_days": 8},
        urgency=Urgency.WARNING,
        icon="🏠",
        title_template="Assessment open {{days_in_phase}} days",
        detail_template="Home visit may be delayed or needs rescheduling.",
        action_template="Confirm or reschedule the assessment",
    ),
    dict(
        id="lead_proposal_followup",
        name="Proposal follow-up",
        condition_type="task_incomplete",
        condition_config={"task_id": "proposal_followup", "phase": "proposal", "min_days": 4},
        urgency=Urgency.WARNING,
        icon="📄",
        title_template="Proposal sent {{days_in_phase}} days ago",
        detail_template="Follow-up call not completed.",
        action_template="Call to walk through the proposal",
    ),
    dict(
        id="lead_stale",
        name="Stale lead",
        condition_type="phase_time",
        condition_config={
            "phase": "_any_active",
            "min_days": 15,
            "exclude_phases": ["won", "lost", "nurture"],
        },
        urgency=Urgency.WARNING,
        icon="🧊",
        title_template="{{days_in_phase}} days in {{phase_name}}",
        detail_template="Lead may be going cold.",
        action_template="Follow up or move to nurture",
    ),
    dict(
        id="lead_nurture_check",
        name="Nurture check-in",
        condition_type="last_note_stale",
        condition_config={"phase": "nurture", "min_days": 31},
        urgency=Urgency.INFO,
        icon="🌱",
        title_template="{{days_since_last_note}} days since last activity",
        detail_template="Time for a nurture check-in.",
        action_template="Send a check-in message",
    ),
]


def default_rules() -> List[Rule]:
    """Fresh copies of the built-in rules, in evaluation order."""
    rules = []
    order = 0
    for entity_type, templates in (
        (EntityType.APPLICANT, _APPLICANT_RULES),
        (EntityType.LEAD, _LEAD_RULES),
    ):
        for fields in templates:
            order += 10
            rules.append(Rule(entity_type=entity_type, sort_order=order, **fields))
    return rules
