"""
Hours rollups over time entries the caller is already allowed to see.
Recomputed on every call; running entries count as zero until stopped.
"""
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from models import Profile, Project, TimeEntry


@dataclass
class TimeSummary:
    user_id: str
    project_id: int
    user_name: str
    project_name: str
    total_hours: float = 0.0


def display_name(profile: Profile | None, user_id: str) -> str:
    """Profile display name; the raw user id when the profile is not visible."""
    if profile is None:
        return user_id
    return profile.display_name


def summarize(
    entries: Iterable[TimeEntry],
    profiles: Mapping[str, Profile],
    projects: Mapping[int, Project],
) -> list[TimeSummary]:
    """Group entries by (user, project) and sum duration_minutes / 60 into hours."""
    summary: dict[tuple[str, int], TimeSummary] = {}
    for entry in entries:
        key = (entry.user_id, entry.project_id)
        row = summary.get(key)
        if row is None:
            project = projects.get(entry.project_id)
            row = summary[key] = TimeSummary(
                user_id=entry.user_id,
                project_id=entry.project_id,
                user_name=display_name(profiles.get(entry.user_id), entry.user_id),
                project_name=project.name if project else f"#{entry.project_id}",
            )
        row.total_hours += (entry.duration_minutes or 0) / 60
    result = list(summary.values())
    result.sort(key=lambda r: (r.user_name, r.project_name))
    return result


def hours_by_user(rows: Iterable[TimeSummary]) -> dict[str, float]:
    totals: dict[str, float] = defaultdict(float)
    for row in rows:
        totals[row.user_name] += row.total_hours
    return dict(totals)


def hours_by_project(rows: Iterable[TimeSummary]) -> dict[str, float]:
    totals: dict[str, float] = defaultdict(float)
    for row in rows:
        totals[row.project_name] += row.total_hours
    return dict(totals)
