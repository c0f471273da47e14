# scheduler/analyzer.py
"""
Rule-based reading of a free-text scheduling request.

Not an NLP component: each field is produced by a small ordered rule table,
and the first rule that yields a value wins. Every extractor is a plain
function of (text[, today]) so it can be tested on its own.

  date        'tomorrow' -> +1 day, 'next week' -> +7 days, 'today'/none -> today
  title       text before the first date keyword, leading filler removed
  time        'at 3pm', 'at 10:30 am', 'at 14:00'
  duration    '30 min', '2 hours', '1.5 hrs' (default 60 minutes)
  fatigue     'tired', 'exhausted', 'worn out', ...
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import date as _date, datetime as _dt, time as _time, timedelta
from typing import Any, Callable, List, Optional, Pattern, Sequence

from schemas import SchedulingIntent

from .config import SchedulerConfig
from .timeutil import UTC, ensure_utc, local_date


@dataclass(frozen=True)
class Rule:
    name: str
    pattern: Pattern
    extract: Callable[..., Any]   # (match, *context) -> value or None


def _apply(rules: Sequence[Rule], text: str, *context) -> Any:
    for rule in rules:
        m = rule.pattern.search(text)
        if not m:
            continue
        value = rule.extract(m, *context)
        if value is not None:
            return value
    return None


# ------------------------ date ------------------------
DATE_RULES: List[Rule] = [
    Rule("tomorrow", re.compile(r"\btomorrow\b", re.I), lambda m, today: today + timedelta(days=1)),
    Rule("next week", re.compile(r"\bnext\s+week\b", re.I), lambda m, today: today + timedelta(days=7)),
    Rule("today", re.compile(r"\btoday\b", re.I), lambda m, today: today),
]


def extract_date(text: str, today: _date) -> _date:
    return _apply(DATE_RULES, text or "", today) or today


# ------------------------ title ------------------------
FILLER_PREFIX = re.compile(
    r"^(?:"
    r"(?:schedule|create|add|set\s+up|book|plan|take|arrange)\s+(?:an?\s+|some\s+)?"
    r"|i\s+need\s+to\s+|i\s+have\s+to\s+|i\s+want\s+to\s+|need\s+to\s+|have\s+to\s+"
    r")",
    re.I,
)


def _strip_trailing_punct(s: str) -> str:
    return re.sub(r"[.,;:!?]+$", "", s).strip()


def extract_title(text: str) -> str:
    """
    'Schedule a team sync tomorrow at 3pm' -> 'team sync'
    Cut at the earliest date keyword (when it is not the very first word),
    then drop one leading filler phrase.
    """
    title = (text or "").strip()
    cuts = [m.start() for rule in DATE_RULES for m in [rule.pattern.search(title)] if m and m.start() > 0]
    if cuts:
        title = title[:min(cuts)].strip()
    title = FILLER_PREFIX.sub("", title, count=1).strip()
    title = _strip_trailing_punct(title)
    return title or _strip_trailing_punct((text or "").strip())


# ------------------------ preferred time ------------------------
def _clock_from_match(m: re.Match) -> Optional[str]:
    hh = int(m.group(1))
    mm = int(m.group(2) or 0)
    mer = (m.group(3) or "").lower()
    if mm > 59:
        return None
    if mer:
        if not 1 <= hh <= 12:
            return None
        if mer == "pm" and hh != 12:
            hh += 12
        if mer == "am" and hh == 12:
            hh = 0
    elif hh > 23:
        return None
    return _time(hh, mm).strftime("%H:%M")


TIME_RULES: List[Rule] = [
    Rule(
        "at-clock",
        re.compile(r"\bat\s+(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\b", re.I),
        lambda m: _clock_from_match(m),
    ),
]


def extract_preferred_time(text: str) -> Optional[str]:
    """First 'at <h>[:<mm>][am|pm]' as 24h 'HH:MM', or None."""
    return _apply(TIME_RULES, text or "")


# ------------------------ duration ------------------------
def _minutes_from_match(m: re.Match) -> Optional[int]:
    value = float(m.group(1))
    unit = m.group(2).lower()
    minutes = value * 60 if unit.startswith(("hour", "hr")) else value
    minutes = int(round(minutes))
    return minutes if minutes > 0 else None


DURATION_RULES: List[Rule] = [
    Rule(
        "number-unit",
        re.compile(r"(\d+(?:\.\d+)?)\s*(hour|hr|minute|min)", re.I),
        lambda m: _minutes_from_match(m),
    ),
]


def extract_duration(text: str, default: int = 60) -> int:
    return _apply(DURATION_RULES, text or "") or default


# ------------------------ fatigue ------------------------
FATIGUE_KEYWORDS = (
    "tired", "exhausted", "worn out", "drained", "fatigued", "burned out", "need rest",
)


def detect_fatigue(text: str) -> bool:
    tl = (text or "").lower()
    return any(k in tl for k in FATIGUE_KEYWORDS)


# ------------------------ entry point ------------------------
def analyze_request(
    text: str,
    now: Optional[_dt] = None,
    config: Optional[SchedulerConfig] = None,
) -> SchedulingIntent:
    """
    Turn a request like "I'm exhausted, book a 30 min review tomorrow at 4pm"
    into a SchedulingIntent. "Today" is the local date of `now` in the
    configured offset.
    """
    if not text or not text.strip():
        raise ValueError("request text is empty")
    config = config or SchedulerConfig()
    now = ensure_utc(now) if now is not None else _dt.now(UTC)
    today = local_date(now, config.utc_offset_minutes)

    preferred = extract_preferred_time(text)
    return SchedulingIntent(
        title=extract_title(text),
        date=extract_date(text, today),
        preferred_time=preferred,
        duration_minutes=extract_duration(text, config.default_duration_minutes),
        is_fatigued=detect_fatigue(text),
        reasoning=(
            f"User specified a specific time: {preferred}"
            if preferred
            else "No specific time mentioned - will need to find best available slot"
        ),
    )
