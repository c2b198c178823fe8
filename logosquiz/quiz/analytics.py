"""
Creator-facing aggregations over a quiz's submissions.
"""
from typing import Optional

from logosquiz.quiz.participants import ANONYMOUS, format_participant_display


def time_rank_key(time_spent_seconds: Optional[int]) -> tuple:
    """
    Sort key for the time tie-break.

    Recorded durations come first, fastest first; a submission with no
    recorded time ranks after every recorded one.
    """
    if time_spent_seconds is None:
        return (1, 0)
    return (0, time_spent_seconds)


def rank_submissions(submissions) -> list:
    """Order submissions by percentage descending, then by time spent."""
    return sorted(
        submissions,
        key=lambda sub: (-sub.percentage, time_rank_key(sub.time_spent_seconds)),
    )


def calculate_average_score(submissions) -> float:
    if not submissions:
        return 0.0
    return sum(sub.percentage for sub in submissions) / len(submissions)


def calculate_average_time(submissions) -> float:
    """Average time over submissions that recorded one; 0 when none did."""
    timed = [sub.time_spent_seconds for sub in submissions if sub.time_spent_seconds is not None]
    if not timed:
        return 0.0
    return sum(timed) / len(timed)


def aggregate_ip_attempts(submissions) -> list:
    """
    Group submissions by IP address.

    Submissions without an IP are left out. Each row lists the distinct
    display names seen from that IP, anonymous ones excluded, and rows are
    ordered by attempt count descending.
    """
    by_ip = {}
    for sub in submissions:
        if not sub.ip_address:
            continue
        entry = by_ip.setdefault(sub.ip_address, {'count': 0, 'names': []})
        entry['count'] += 1

        display_name = format_participant_display(sub.participant_data)
        if display_name != ANONYMOUS and display_name not in entry['names']:
            entry['names'].append(display_name)

    rows = [
        {
            'ip_address': ip_address,
            'attempt_count': entry['count'],
            'participant_names': entry['names'],
        }
        for ip_address, entry in by_ip.items()
    ]
    rows.sort(key=lambda row: row['attempt_count'], reverse=True)
    return rows
