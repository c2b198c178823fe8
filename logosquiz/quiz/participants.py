"""
Participant fields and participant data.

Both are stored as JSON. They are checked when they enter the system and
consumed as typed values afterwards.
"""
import json
from typing import NamedTuple

ANONYMOUS = "Anonymous"


class ParticipantField(NamedTuple):
    label: str
    required: bool = False

    def to_dict(self) -> dict:
        return {'label': self.label, 'required': self.required}


def parse_participant_fields(raw) -> list:
    """Turn stored field definitions into ParticipantField values, skipping malformed entries."""
    if isinstance(raw, str):
        raw = _load_json(raw, [])
    if not isinstance(raw, list):
        return []

    fields = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        label = item.get('label')
        if not isinstance(label, str) or not label.strip():
            continue
        fields.append(ParticipantField(label.strip(), bool(item.get('required', False))))
    return fields


def coerce_participant_data(raw) -> dict:
    """
    Read stored participant data as a label -> string mapping.

    Rows written before the column became JSON hold serialized text; those
    are decoded, and anything unreadable counts as empty.
    """
    if isinstance(raw, str):
        raw = _load_json(raw, {})
    if not isinstance(raw, dict):
        return {}
    return {str(key): str(value) for key, value in raw.items() if value is not None}


def format_participant_display(raw) -> str:
    """Comma-separated participant values, or "Anonymous" when there are none."""
    values = [value for value in coerce_participant_data(raw).values() if value]
    return ", ".join(values) if values else ANONYMOUS


def _load_json(text: str, default):
    try:
        return json.loads(text)
    except ValueError:
        return default
