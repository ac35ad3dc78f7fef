"""
Leaderboard aggregation.

Two paths:
- aggregate(): raw score events -> one row per participant (max score), ranked
  locally with a stable descending sort.
- render_remote(): rows already ranked by the backend are projected onto the
  selected metric; no local re-sort.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import ValidationError

from growseed.infrastructure.observability.logging import get_logger
from growseed.models.api.remote_models import RemoteLeaderboard
from growseed.models.domain.growth_domain import round_percent
from growseed.models.domain.leaderboard_domain import (
    LeaderboardEntry,
    LeaderboardRecord,
    RenderedLeaderboardRow,
    SortKey,
)
from growseed.services.errors import FormatFailure

logger = get_logger(__name__)


def aggregate(
    raw_records: Iterable[LeaderboardRecord], sort_key: SortKey
) -> list[LeaderboardEntry]:
    """
    Deduplicate by participant name and rank by score.

    Callers choose which metric fills `score` before calling; sort_key only
    labels that choice, higher is better for every key. Ties keep first-seen
    order and still get distinct consecutive ranks.
    """
    best: dict[str, float] = {}
    seen = 0
    for record in raw_records:
        seen += 1
        name = record.participant_name
        if name not in best or record.score > best[name]:
            best[name] = record.score

    # dict preserves first-seen order and sorted() is stable
    ordered = sorted(best.items(), key=lambda item: item[1], reverse=True)

    entries = [
        LeaderboardEntry(rank=index, participant_name=name, score=score)
        for index, (name, score) in enumerate(ordered, start=1)
    ]
    logger.debug(
        "Leaderboard aggregated",
        sort_key=SortKey(sort_key).value,
        records_in=seen,
        entries_out=len(entries),
    )
    return entries


def extract_scores(events: Any) -> list[LeaderboardRecord]:
    """
    Pull score records out of raw event-store events.

    Only events whose payload has a string `name` and a numeric `score` are
    kept; everything else in the topic is ignored.
    """
    if not isinstance(events, list):
        raise FormatFailure("Unexpected leaderboard events format: expected a list")

    records = []
    for event in events:
        if not isinstance(event, dict):
            continue
        payload = event.get("payload")
        if not isinstance(payload, dict):
            continue
        score = payload.get("score")
        name = payload.get("name")
        if isinstance(score, bool) or not isinstance(score, int | float):
            continue
        if not isinstance(name, str):
            continue
        records.append(LeaderboardRecord(participant_name=name, score=score))
    return records


def format_duration(seconds: float) -> str:
    """Format seconds as '1h 2m 3s', '2m 3s' or '3s'."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def _format_hours_minutes(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 3600}h {(total % 3600) // 60}m"


def render_remote(data: Any, sort_key: SortKey) -> list[RenderedLeaderboardRow]:
    """
    Project server-ranked rows onto the selected metric.

    Raises:
        FormatFailure: If the payload is not a leaderboard object
    """
    if not isinstance(data, dict):
        raise FormatFailure("Unexpected leaderboard response format")

    try:
        board = RemoteLeaderboard.model_validate(data)
    except ValidationError as e:
        raise FormatFailure(f"Unexpected leaderboard response format: {e}") from e

    key = SortKey(sort_key)
    rows = []
    for row in board.leaderboard:
        if key is SortKey.CURRENT:
            score = row.growth_percent
            text = f"{round_percent(score)}%"
        elif key is SortKey.MAX:
            score = row.max_growth_achieved
            text = f"{round_percent(score)}%"
        else:
            score = row.total_productive_time
            text = _format_hours_minutes(score)
        rows.append(
            RenderedLeaderboardRow(
                rank=row.rank, display_name=row.display_name, score=score, score_text=text
            )
        )
    return rows


def entries_to_dicts(entries: Sequence[LeaderboardEntry]) -> list[dict]:
    """Display-ready rows for the HTTP surface."""
    return [
        {
            "rank": entry.rank,
            "participant_name": entry.participant_name,
            "score": entry.score,
            "score_text": format_duration(entry.score),
        }
        for entry in entries
    ]
