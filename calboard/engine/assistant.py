"""Assistant operations built on the generation gateway.

Each operation validates the shape of model output before trusting it. A
gateway fallback, unparseable JSON, or an ill-shaped payload all lead to the
same deterministic fallback, derived from the operation's input (event
titles, counts) rather than a constant string. Nothing here raises on
generation failure.
"""

import json
import logging
from typing import Any, Dict, List, Sequence

from calboard.integrations.llm_client import GenerationGateway
from calboard.models.event import Event
from calboard.models.generated import GeneratedTask, WeekSummary, DailyPlan
from calboard.models.task import TaskPriority
from calboard.models.constants import WEEK_SUMMARY_EVENT_LIMIT, FALLBACK_HIGHLIGHT_COUNT

logger = logging.getLogger(__name__)


TASKS_PROMPT_TEMPLATE = """Generate 3-5 actionable tasks for this calendar event.

Event: "{title}"
Description: {description}
Location: {location}
Date: {date}
Time: {start} - {end}

Return JSON in this exact format:
{{
  "tasks": [
    {{ "title": "Task description", "priority": "high" }}
  ]
}}

Priority must be "high", "medium", or "low"."""

WEEK_SUMMARY_PROMPT_TEMPLATE = """You are analyzing someone's weekly calendar. Provide an insightful, natural summary.

Events this week:
{events_list}

Total events: {total}

Analyze the week and provide:
1. A warm, conversational summary (2-3 sentences) highlighting the week's theme, busiest days, and work-life balance
2. Top 3 most important highlights or things to focus on

Return JSON in this exact format:
{{
  "summary": "Your insightful summary here...",
  "highlights": ["Most important item", "Second priority", "Third focus area"]
}}"""

DAILY_PLAN_PROMPT_TEMPLATE = """You are a personal productivity assistant helping someone plan their day.

Today's Schedule:
{events_list}

Morning events: {morning}
Afternoon events: {afternoon}
Evening events: {evening}

Create a daily plan that:
1. Gives an encouraging overview (2-3 sentences) about the day's flow and energy management
2. Suggests 3-5 specific actionable tasks or reminders to help them succeed today

Consider:
- Prep time before important meetings
- Travel time if locations change
- Energy management (busy periods vs breathing room)
- Work-life balance

Return JSON in this exact format:
{{
  "plan": "Your encouraging daily overview here...",
  "tasks": ["Actionable task 1", "Actionable task 2", "Actionable task 3"]
}}"""

EMAIL_PROMPT_TEMPLATE = """Draft a professional email for this event:

Event: "{title}"
Description: {description}
Location: {location}
Date: {date}
Time: {start}

Write a clear, professional email. Return only the email text."""

EMPTY_WEEK_SUMMARY = "No events this week. Great time to focus on deep work."
EMPTY_DAY_PLAN = "No events today. Perfect day for focused work."
EMPTY_DAY_TASKS = ["Review goals", "Work on high-priority items", "Plan tomorrow"]


def _fmt_date(event: Event) -> str:
    return event.start_time.strftime("%a, %b %d, %Y")


def _fmt_time(value) -> str:
    return value.strftime("%H:%M")


def _parse_json_object(raw: str) -> Dict[str, Any]:
    """Parse model output as a JSON object, tolerating markdown code fences.

    Raises:
        ValueError: If the text is not a JSON object
    """
    content = raw.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    parsed = json.loads(content.strip())
    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object")
    return parsed


def _string_items(values: Any) -> List[str]:
    """Keep non-empty strings (or objects with a title) from a JSON array."""
    if not isinstance(values, list):
        return []
    items: List[str] = []
    for value in values:
        if isinstance(value, dict):
            value = value.get("title")
        if isinstance(value, str) and value.strip():
            items.append(value.strip())
    return items


# ---------------------------------------------------------------------------
# Task suggestions
# ---------------------------------------------------------------------------

def fallback_tasks(event: Event) -> List[GeneratedTask]:
    return [
        GeneratedTask(title=f"Prepare for: {event.title}", priority=TaskPriority.MEDIUM),
        GeneratedTask(title="Review agenda and materials", priority=TaskPriority.HIGH),
        GeneratedTask(title="Follow up after the event", priority=TaskPriority.LOW),
    ]


def _parse_tasks(raw: str) -> List[GeneratedTask]:
    parsed = _parse_json_object(raw)
    items = parsed.get("tasks")
    if not isinstance(items, list):
        raise ValueError("'tasks' must be a list")

    tasks: List[GeneratedTask] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            continue
        priority = str(item.get("priority", "")).lower()
        if priority not in {p.value for p in TaskPriority}:
            priority = TaskPriority.MEDIUM.value
        tasks.append(GeneratedTask(title=title.strip(), priority=priority))

    if not tasks:
        raise ValueError("No usable tasks in response")
    return tasks


def suggest_tasks(event: Event, gateway: GenerationGateway) -> List[GeneratedTask]:
    """Suggest 3-5 preparation/follow-up tasks for an event."""
    prompt = TASKS_PROMPT_TEMPLATE.format(
        title=event.title,
        description=event.description or "No description provided",
        location=event.location or "No location specified",
        date=_fmt_date(event),
        start=_fmt_time(event.start_time),
        end=_fmt_time(event.end_time),
    )

    result = gateway.complete(prompt, expect_json=True)
    if result.is_fallback:
        return fallback_tasks(event)

    try:
        return _parse_tasks(result.text)
    except (ValueError, TypeError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning(f"Unusable task suggestions for event {event.id}: {e}")
        return fallback_tasks(event)


# ---------------------------------------------------------------------------
# Week summary
# ---------------------------------------------------------------------------

def _fallback_highlights(events: Sequence[Event]) -> List[str]:
    return [e.title for e in events[:FALLBACK_HIGHLIGHT_COUNT]]


def _count_summary(events: Sequence[Event]) -> str:
    return f"You have {len(events)} events scheduled this week."


def fallback_week_summary(events: Sequence[Event]) -> WeekSummary:
    return WeekSummary(
        summary=_count_summary(events),
        highlights=_fallback_highlights(events),
        total_events=len(events),
    )


def summarize_week(events: Sequence[Event], gateway: GenerationGateway) -> WeekSummary:
    """Summarize a week's events with up to three highlights."""
    if not events:
        return WeekSummary(summary=EMPTY_WEEK_SUMMARY, highlights=[], total_events=0)

    lines = []
    for e in list(events)[:WEEK_SUMMARY_EVENT_LIMIT]:
        line = f"- {e.title} ({e.category}) - {e.start_time.strftime('%a, %b %d')} at {_fmt_time(e.start_time)}"
        if e.location:
            line += f" @ {e.location}"
        lines.append(line)

    prompt = WEEK_SUMMARY_PROMPT_TEMPLATE.format(events_list="\n".join(lines), total=len(events))

    result = gateway.complete(prompt, expect_json=True)
    if result.is_fallback:
        return fallback_week_summary(events)

    try:
        parsed = _parse_json_object(result.text)
    except ValueError as e:
        logger.warning(f"Unusable week summary response: {e}")
        return fallback_week_summary(events)

    summary = parsed.get("summary")
    highlights = _string_items(parsed.get("highlights"))
    return WeekSummary(
        summary=summary.strip() if isinstance(summary, str) and summary.strip() else _count_summary(events),
        highlights=highlights or _fallback_highlights(events),
        total_events=len(events),
    )


# ---------------------------------------------------------------------------
# Daily plan
# ---------------------------------------------------------------------------

def _prepare_for(events: Sequence[Event]) -> List[str]:
    return [f"Prepare for: {e.title}" for e in events]


def _count_plan(events: Sequence[Event]) -> str:
    return f"You have {len(events)} events scheduled today."


def fallback_daily_plan(events: Sequence[Event]) -> DailyPlan:
    return DailyPlan(plan=_count_plan(events), tasks=_prepare_for(events))


def plan_day(events: Sequence[Event], gateway: GenerationGateway) -> DailyPlan:
    """Build an encouraging plan and a short task list for today's events."""
    if not events:
        return DailyPlan(plan=EMPTY_DAY_PLAN, tasks=list(EMPTY_DAY_TASKS))

    morning = [e for e in events if e.start_time.hour < 12]
    afternoon = [e for e in events if 12 <= e.start_time.hour < 17]
    evening = [e for e in events if e.start_time.hour >= 17]

    lines = []
    for e in events:
        minutes = round((e.end_time - e.start_time).total_seconds() / 60)
        line = f"- {_fmt_time(e.start_time)}: {e.title} ({minutes}min, {e.category})"
        if e.location:
            line += f" @ {e.location}"
        lines.append(line)

    prompt = DAILY_PLAN_PROMPT_TEMPLATE.format(
        events_list="\n".join(lines),
        morning=len(morning),
        afternoon=len(afternoon),
        evening=len(evening),
    )

    result = gateway.complete(prompt, expect_json=True)
    if result.is_fallback:
        return fallback_daily_plan(events)

    try:
        parsed = _parse_json_object(result.text)
    except ValueError as e:
        logger.warning(f"Unusable daily plan response: {e}")
        return fallback_daily_plan(events)

    plan = parsed.get("plan")
    tasks = _string_items(parsed.get("tasks"))
    return DailyPlan(
        plan=plan.strip() if isinstance(plan, str) and plan.strip() else _count_plan(events),
        tasks=tasks or _prepare_for(list(events)[:FALLBACK_HIGHLIGHT_COUNT]),
    )


# ---------------------------------------------------------------------------
# Email draft
# ---------------------------------------------------------------------------

def fallback_email(event: Event) -> str:
    lines = [
        f"Subject: {event.title}",
        "",
        "Hello,",
        "",
        f"This is a note about \"{event.title}\" on {_fmt_date(event)} at {_fmt_time(event.start_time)}.",
    ]
    if event.location:
        lines.append(f"Location: {event.location}")
    if event.description:
        lines.append(f"Details: {event.description}")
    lines.extend(["", "Best regards,"])
    return "\n".join(lines)


def draft_email(event: Event, gateway: GenerationGateway) -> str:
    """Draft a plain-text email about an event."""
    prompt = EMAIL_PROMPT_TEMPLATE.format(
        title=event.title,
        description=event.description or "No description provided",
        location=event.location or "No location specified",
        date=_fmt_date(event),
        start=_fmt_time(event.start_time),
    )

    result = gateway.complete(prompt, expect_json=False)
    if result.is_fallback or not result.text.strip():
        return fallback_email(event)
    return result.text.strip()
