"""
Validation of creator and participant payloads.

Validators collect every problem as a {"field", "message"} entry and raise
ValidationFailed once, so clients can show all messages at the same time.
"""
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from logosquiz.config import get_config
from logosquiz.quiz.errors import ValidationFailed
from logosquiz.quiz.participants import ParticipantField
from logosquiz.quiz.scoring import SubmittedAnswer

QUIZ_FLAGS = ('is_published', 'randomize_questions', 'randomize_options')
QUIZ_DATETIMES = ('available_from', 'available_until', 'show_answers_after')


class SubmissionInput(NamedTuple):
    quiz_id: int
    participant_data: dict
    time_spent_seconds: Optional[int]
    answers: list


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _coerce_id(value) -> Optional[int]:
    """Accept integer ids and their decimal string form."""
    if _is_int(value):
        return value
    if isinstance(value, str):
        text = value.strip()
        # str.isdigit also accepts non-ASCII digits such as superscripts
        if text.isascii() and text.isdigit():
            return int(text)
    return None


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into a naive UTC datetime.

    Raises:
        ValueError: if the value is not a valid timestamp
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("not a timestamp")
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _error(errors: list, field: str, message: str) -> None:
    errors.append({'field': field, 'message': message})


def _validate_options(options, field: str, errors: list) -> list:
    cfg = get_config()
    if not isinstance(options, list):
        _error(errors, field, "Options must be a list")
        return []
    if len(options) < cfg.MIN_OPTIONS_PER_QUESTION:
        _error(errors, field, f"Each question must have at least {cfg.MIN_OPTIONS_PER_QUESTION} options")
    if len(options) > cfg.MAX_OPTIONS_PER_QUESTION:
        _error(errors, field, f"Each question can have at most {cfg.MAX_OPTIONS_PER_QUESTION} options")

    cleaned = []
    correct_count = 0
    for idx, opt in enumerate(options):
        opt_field = f"{field}[{idx}]"
        if not isinstance(opt, dict):
            _error(errors, opt_field, "Option must be an object")
            continue
        text = opt.get('option_text')
        if not isinstance(text, str) or not text.strip():
            _error(errors, f"{opt_field}.option_text", "Option text is required")
            text = ""
        is_correct = opt.get('is_correct', False)
        if not isinstance(is_correct, bool):
            _error(errors, f"{opt_field}.is_correct", "is_correct must be true or false")
            is_correct = False
        if is_correct:
            correct_count += 1
        cleaned.append({'option_text': text.strip(), 'is_correct': is_correct, 'order_index': idx})

    if options and correct_count != 1:
        _error(errors, field, "Each question must have exactly one correct answer")
    return cleaned


def _validate_questions(questions, errors: list) -> list:
    cfg = get_config()
    if not isinstance(questions, list):
        _error(errors, 'questions', "Questions must be a list")
        return []
    if len(questions) < cfg.MIN_QUESTIONS_PER_QUIZ:
        _error(errors, 'questions', "Quiz must have at least one question")

    cleaned = []
    for idx, question in enumerate(questions):
        field = f"questions[{idx}]"
        if not isinstance(question, dict):
            _error(errors, field, "Question must be an object")
            continue
        text = question.get('question_text')
        if not isinstance(text, str) or not text.strip():
            _error(errors, f"{field}.question_text", "Question text is required")
            text = ""
        marks = question.get('marks', 1)
        if marks is None:
            marks = 1
        if not _is_int(marks) or marks <= 0:
            _error(errors, f"{field}.marks", "Marks must be a positive whole number")
            marks = 1
        options = _validate_options(question.get('options'), f"{field}.options", errors)
        cleaned.append({
            'question_text': text.strip(),
            'marks': marks,
            'order_index': idx,
            'options': options,
        })
    return cleaned


def _validate_participant_fields(fields, errors: list) -> list:
    if fields is None:
        return []
    if not isinstance(fields, list):
        _error(errors, 'participant_fields', "Participant fields must be a list")
        return []

    cleaned = []
    seen = set()
    for idx, item in enumerate(fields):
        field = f"participant_fields[{idx}]"
        if not isinstance(item, dict):
            _error(errors, field, "Participant field must be an object")
            continue
        label = item.get('label')
        if not isinstance(label, str) or not label.strip():
            _error(errors, f"{field}.label", "Field label is required")
            continue
        label = label.strip()
        if label in seen:
            _error(errors, f"{field}.label", f"Duplicate field label: {label}")
            continue
        seen.add(label)
        required = item.get('required', False)
        if not isinstance(required, bool):
            _error(errors, f"{field}.required", "required must be true or false")
            required = False
        cleaned.append(ParticipantField(label, required).to_dict())
    return cleaned


def validate_quiz_payload(data, partial: bool = False) -> dict:
    """
    Validate a quiz create (partial=False) or update (partial=True) body.

    Returns:
        Cleaned values. For updates only the supplied keys are present.

    Raises:
        ValidationFailed: with the list of field errors
    """
    cfg = get_config()
    errors = []
    if not isinstance(data, dict):
        raise ValidationFailed([{'field': '', 'message': "Request body must be a JSON object"}])

    cleaned = {}

    if not partial or 'title' in data:
        title = data.get('title')
        if not isinstance(title, str) or not title.strip():
            _error(errors, 'title', "Title is required")
        elif len(title.strip()) > cfg.MAX_TITLE_LENGTH:
            _error(errors, 'title', "Title too long")
        else:
            cleaned['title'] = title.strip()

    if not partial or 'description' in data:
        description = data.get('description')
        if description is not None and not isinstance(description, str):
            _error(errors, 'description', "Description must be text")
        elif description is not None and len(description.strip()) > cfg.MAX_DESCRIPTION_LENGTH:
            _error(errors, 'description', "Description too long")
        else:
            cleaned['description'] = (description or '').strip() or None

    if not partial or 'time_limit_seconds' in data:
        limit = data.get('time_limit_seconds')
        if limit is not None and (not _is_int(limit) or limit <= 0):
            _error(errors, 'time_limit_seconds', "Time limit must be a positive number of seconds")
        else:
            cleaned['time_limit_seconds'] = limit

    for name in QUIZ_DATETIMES:
        if partial and name not in data:
            continue
        value = data.get(name)
        if value is None or value == '':
            cleaned[name] = None
            continue
        try:
            cleaned[name] = parse_datetime(value)
        except ValueError:
            _error(errors, name, "Must be an ISO-8601 timestamp")

    for name in QUIZ_FLAGS:
        if partial and name not in data:
            continue
        value = data.get(name, False)
        if not isinstance(value, bool):
            _error(errors, name, f"{name} must be true or false")
        else:
            cleaned[name] = value

    if not partial or 'max_attempts_per_ip' in data:
        max_attempts = data.get('max_attempts_per_ip')
        if max_attempts is not None and (not _is_int(max_attempts) or max_attempts < 0):
            _error(errors, 'max_attempts_per_ip', "Max attempts per IP must be zero or a positive number")
        else:
            cleaned['max_attempts_per_ip'] = max_attempts or None

    if not partial or 'participant_fields' in data:
        cleaned['participant_fields'] = _validate_participant_fields(data.get('participant_fields'), errors)

    if not partial or 'questions' in data:
        cleaned['questions'] = _validate_questions(data.get('questions'), errors)

    if errors:
        raise ValidationFailed(errors)
    return cleaned


def validate_submission_payload(data) -> SubmissionInput:
    """
    Validate a participant's submission body.

    Raises:
        ValidationFailed: with the list of field errors
    """
    cfg = get_config()
    errors = []
    if not isinstance(data, dict):
        raise ValidationFailed([{'field': '', 'message': "Request body must be a JSON object"}])

    quiz_id = _coerce_id(data.get('quiz_id'))
    if quiz_id is None:
        _error(errors, 'quiz_id', "Quiz ID is required")

    participant_data = {}
    raw_data = data.get('participant_data')
    if raw_data is None:
        raw_data = {}
    if not isinstance(raw_data, dict):
        _error(errors, 'participant_data', "Participant data must be an object")
    else:
        for label, value in raw_data.items():
            label = str(label).strip()
            if not isinstance(value, str):
                _error(errors, f"participant_data.{label}", "Value must be text")
                continue
            value = value.strip()
            if len(value) > cfg.MAX_PARTICIPANT_VALUE_LENGTH:
                _error(errors, f"participant_data.{label}",
                       f"Value can be at most {cfg.MAX_PARTICIPANT_VALUE_LENGTH} characters")
                continue
            participant_data[label] = value

    time_spent = data.get('time_spent_seconds')
    if time_spent is not None and (not _is_int(time_spent) or time_spent <= 0):
        _error(errors, 'time_spent_seconds', "Time spent must be a positive number of seconds")
        time_spent = None

    answers = []
    raw_answers = data.get('answers')
    if not isinstance(raw_answers, list):
        _error(errors, 'answers', "Answers are required")
    else:
        for idx, item in enumerate(raw_answers):
            field = f"answers[{idx}]"
            if not isinstance(item, dict):
                _error(errors, field, "Answer must be an object")
                continue
            question_id = _coerce_id(item.get('question_id'))
            if question_id is None:
                _error(errors, f"{field}.question_id", "Question ID is required")
                continue
            raw_option = item.get('selected_option_id')
            selected_option_id = _coerce_id(raw_option)
            if raw_option is not None and selected_option_id is None:
                _error(errors, f"{field}.selected_option_id", "Invalid option ID")
                continue
            answers.append(SubmittedAnswer(question_id, selected_option_id))

    if errors:
        raise ValidationFailed(errors)
    return SubmissionInput(quiz_id, participant_data, time_spent, answers)


def validate_participant_values(fields: list, participant_data: dict) -> None:
    """
    Check required participant fields against submitted values.

    Raises:
        ValidationFailed: when a required field is missing or blank
    """
    errors = []
    for field in fields:
        if field.required and not participant_data.get(field.label):
            _error(errors, f"participant_data.{field.label}", f"{field.label} is required")
    if errors:
        raise ValidationFailed(errors)
