"""
Test cases for the participant endpoints: taking and submitting quizzes.
"""
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from logosquiz import db
from logosquiz.quiz import repository
from logosquiz.quiz.gates import MAX_IP_LENGTH
from logosquiz.quiz.models import Answer, Submission

from conftest import option_id, submission_body

IP_A = {'X-Forwarded-For': '1.2.3.4'}
IP_B = {'X-Forwarded-For': '5.6.7.8'}


class TestTakeQuiz:
    """Test cases for serving a quiz through its share link."""

    def test_serve_published_quiz(self, client, quiz):
        """Test a published quiz is served without the answer key."""
        response = client.get(f'/api/take/{quiz.share_id}', headers=IP_A)
        assert response.status_code == 200

        data = response.get_json()
        assert data['success'] is True
        served = data['quiz']
        assert served['title'] == 'Capitals'
        assert [q['marks'] for q in served['questions']] == [1, 2]
        for question in served['questions']:
            for option in question['options']:
                assert set(option) == {'id', 'option_text'}
        assert 'is_correct' not in response.get_data(as_text=True)

    def test_participant_fields_are_served(self, client, make_quiz):
        """Test participant field definitions come with the quiz."""
        quiz = make_quiz(participant_fields=[{'label': 'Name', 'required': True}])
        response = client.get(f'/api/take/{quiz.share_id}')
        assert response.get_json()['quiz']['participant_fields'] == [{'label': 'Name', 'required': True}]

    def test_unknown_share_id(self, client):
        """Test an unknown share id is not found."""
        response = client.get('/api/take/does-not-exist')
        assert response.status_code == 404
        assert response.get_json()['kind'] == 'NOT_FOUND'

    def test_unpublished_quiz_is_not_found(self, client, make_quiz):
        """Test an unpublished quiz cannot be taken even with its share id."""
        quiz = make_quiz()
        quiz.is_published = False
        db.session.commit()

        response = client.get(f'/api/take/{quiz.share_id}')
        assert response.status_code == 404

    def test_quiz_without_questions_is_not_found(self, client, make_quiz):
        """Test a published quiz with no questions is not served."""
        quiz = make_quiz(questions=[])
        response = client.get(f'/api/take/{quiz.share_id}')
        assert response.status_code == 404

    def test_closed_quiz(self, client, make_quiz):
        """Test a quiz whose window ended an hour ago is not available."""
        until = datetime.utcnow() - timedelta(hours=1)
        quiz = make_quiz(available_until=until)

        response = client.get(f'/api/take/{quiz.share_id}')
        assert response.status_code == 403
        data = response.get_json()
        assert data['kind'] == 'NOT_AVAILABLE'
        assert data['reason'] == 'closed'
        assert data['boundary_timestamp'] == until.isoformat() + 'Z'

    def test_not_started_quiz(self, client, make_quiz):
        """Test a quiz opening in the future is not available yet."""
        quiz = make_quiz(available_from=datetime.utcnow() + timedelta(days=1))
        data = client.get(f'/api/take/{quiz.share_id}').get_json()
        assert data['kind'] == 'NOT_AVAILABLE'
        assert data['reason'] == 'notStarted'

    def test_attempt_gate_checked_before_window(self, client, make_quiz):
        """Test a capped-out IP is refused for its attempts even on a closed quiz."""
        quiz = make_quiz(max_attempts_per_ip=1)
        client.post('/api/submissions', json=submission_body(quiz, ['Paris', 'Tokyo']), headers=IP_A)
        quiz.available_until = datetime.utcnow() - timedelta(hours=1)
        db.session.commit()

        data = client.get(f'/api/take/{quiz.share_id}', headers=IP_A).get_json()
        assert data['kind'] == 'ATTEMPT_LIMIT_REACHED'

    def test_randomized_order_is_a_permutation(self, client, make_quiz):
        """Test shuffled questions and options keep the same ids."""
        questions = [
            (f'Question {n}', 1, [('A', True), ('B', False), ('C', False), ('D', False)])
            for n in range(6)
        ]
        quiz = make_quiz(questions=questions, randomize_questions=True, randomize_options=True)

        served = client.get(f'/api/take/{quiz.share_id}').get_json()['quiz']
        assert sorted(q['id'] for q in served['questions']) == sorted(q.id for q in quiz.questions)
        by_id = {q.id: q for q in quiz.questions}
        for question in served['questions']:
            expected = sorted(opt.id for opt in by_id[question['id']].options)
            assert sorted(opt['id'] for opt in question['options']) == expected

    def test_each_serve_draws_a_new_order(self, client, make_quiz):
        """Test repeated serves of a randomized quiz do not repeat one fixed order."""
        questions = [(f'Question {n}', 1, [('A', True), ('B', False)]) for n in range(6)]
        quiz = make_quiz(questions=questions, randomize_questions=True)

        orders = set()
        for _ in range(10):
            served = client.get(f'/api/take/{quiz.share_id}').get_json()['quiz']
            orders.add(tuple(q['id'] for q in served['questions']))
        assert len(orders) > 1


class TestSubmitQuiz:
    """Test cases for submitting answers."""

    def test_weighted_score(self, client, quiz):
        """Test Q1 right and Q2 wrong scores 1 of 3 marks."""
        response = client.post(
            '/api/submissions',
            json=submission_body(quiz, ['Paris', 'Osaka'], time_spent_seconds=42),
            headers=IP_A,
        )
        assert response.status_code == 201

        data = response.get_json()
        assert data['earned_marks'] == 1
        assert data['total_marks'] == 3
        assert round(data['percentage'], 2) == 33.33
        assert data['score'] == 33
        assert data['total'] == 2
        assert data['answers_hidden'] is False
        assert data['show_answers_after'] is None
        assert [item['is_correct'] for item in data['review']] == [True, False]

        submission = db.session.get(Submission, data['submission_id'])
        assert submission.score == 1
        assert submission.ip_address == '1.2.3.4'
        assert submission.time_spent_seconds == 42
        assert [a.is_correct for a in submission.answers] == [True, False]

    def test_hidden_answers(self, client, make_quiz):
        """Test answers stay hidden until show_answers_after."""
        reveal_at = datetime.utcnow() + timedelta(hours=1)
        quiz = make_quiz(show_answers_after=reveal_at)

        data = client.post('/api/submissions', json=submission_body(quiz, ['Paris', 'Tokyo'])).get_json()
        assert data['answers_hidden'] is True
        assert data['show_answers_after'] == reveal_at.isoformat() + 'Z'
        for item in data['review']:
            assert item['correct_option_id'] is None
            assert all(opt['is_correct'] is False for opt in item['options'])

    def test_unanswered_questions_still_count(self, client, quiz):
        """Test unanswered questions add to total marks only."""
        data = client.post('/api/submissions', json=submission_body(quiz, [None, 'Tokyo'])).get_json()
        assert data['earned_marks'] == 2
        assert data['total_marks'] == 3
        assert data['score'] == 67

    def test_foreign_option_scores_wrong_and_is_not_stored(self, client, quiz):
        """Test an option from another question is wrong and stored as no selection."""
        first, second = quiz.questions
        body = {
            'quiz_id': quiz.id,
            'answers': [{'question_id': first.id, 'selected_option_id': option_id(second, 'Tokyo')}],
        }
        data = client.post('/api/submissions', json=body).get_json()
        assert data['earned_marks'] == 0

        answer = Answer.query.filter_by(submission_id=data['submission_id']).one()
        assert answer.question_id == first.id
        assert answer.selected_option_id is None
        assert answer.is_correct is False

    def test_unknown_quiz(self, client):
        """Test submitting to a missing quiz."""
        response = client.post('/api/submissions', json={'quiz_id': 999, 'answers': []})
        assert response.status_code == 404
        assert response.get_json()['kind'] == 'QUIZ_NOT_FOUND'

    def test_unpublished_quiz(self, client, make_quiz):
        """Test submitting to an unpublished quiz."""
        quiz = make_quiz(is_published=False)
        response = client.post('/api/submissions', json=submission_body(quiz, ['Paris', 'Tokyo']))
        assert response.status_code == 403
        assert response.get_json()['kind'] == 'QUIZ_NOT_PUBLISHED'
        assert Submission.query.count() == 0

    def test_required_participant_field(self, client, make_quiz):
        """Test a required participant field must be filled in."""
        quiz = make_quiz(participant_fields=[{'label': 'Name', 'required': True}])

        response = client.post('/api/submissions', json=submission_body(quiz, ['Paris', 'Tokyo']))
        assert response.status_code == 400
        data = response.get_json()
        assert data['kind'] == 'VALIDATION_FAILED'
        assert data['details'][0]['field'] == 'participant_data.Name'

        body = submission_body(quiz, ['Paris', 'Tokyo'], participant_data={'Name': 'Ada'})
        assert client.post('/api/submissions', json=body).status_code == 201

    def test_malformed_body(self, client):
        """Test a body that is not JSON is rejected."""
        response = client.post('/api/submissions', data='nope', content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['kind'] == 'VALIDATION_FAILED'

    def test_attempt_limit_at_submit(self, client, make_quiz):
        """Test the attempt cap is enforced again when submitting."""
        quiz = make_quiz(max_attempts_per_ip=1)
        body = submission_body(quiz, ['Paris', 'Tokyo'])

        assert client.post('/api/submissions', json=body, headers=IP_A).status_code == 201
        response = client.post('/api/submissions', json=body, headers=IP_A)
        assert response.status_code == 403
        data = response.get_json()
        assert data['kind'] == 'ATTEMPT_LIMIT_REACHED'
        assert data['attempt_count'] == 1
        assert data['max_attempts_per_ip'] == 1
        assert client.post('/api/submissions', json=body, headers=IP_B).status_code == 201

    def test_non_ascii_digit_option_id(self, client, quiz):
        """Test a superscript option id is a validation error, not a server error."""
        body = {'quiz_id': quiz.id, 'answers': [{'question_id': quiz.questions[0].id, 'selected_option_id': '¹'}]}
        response = client.post('/api/submissions', json=body)
        assert response.status_code == 400
        data = response.get_json()
        assert data['kind'] == 'VALIDATION_FAILED'
        assert data['details'][0]['field'] == 'answers[0].selected_option_id'
        assert Submission.query.count() == 0

    def test_participant_label_with_spaces(self, client, make_quiz):
        """Test a required field is satisfied by a label sent with surrounding spaces."""
        quiz = make_quiz(participant_fields=[{'label': 'Name', 'required': True}])
        body = submission_body(quiz, ['Paris', 'Tokyo'], participant_data={'Name ': 'Ada'})

        response = client.post('/api/submissions', json=body)
        assert response.status_code == 201
        submission = db.session.get(Submission, response.get_json()['submission_id'])
        assert submission.participant_data == {'Name': 'Ada'}

    def test_oversized_forwarded_header(self, client, quiz):
        """Test a very long X-Forwarded-For is stored cut to the column width."""
        body = submission_body(quiz, ['Paris', 'Tokyo'])
        response = client.post('/api/submissions', json=body, headers={'X-Forwarded-For': '9' * 300})
        assert response.status_code == 201

        submission = db.session.get(Submission, response.get_json()['submission_id'])
        assert submission.ip_address == '9' * MAX_IP_LENGTH

    def test_storage_failure_is_rolled_back(self, client, quiz, monkeypatch):
        """Test a database error while storing returns INTERNAL_ERROR and keeps nothing."""
        def fail(**kwargs):
            raise SQLAlchemyError('disk I/O error')

        monkeypatch.setattr(repository, 'create_submission', fail)

        response = client.post('/api/submissions', json=submission_body(quiz, ['Paris', 'Tokyo']), headers=IP_A)
        assert response.status_code == 500
        data = response.get_json()
        assert data['success'] is False
        assert data['kind'] == 'INTERNAL_ERROR'
        assert Submission.query.count() == 0
        assert Answer.query.count() == 0


class TestAttemptLimitScenario:
    """Test the full attempt cap and reset cycle."""

    def test_fourth_attempt_refused_until_reset(self, client, creator_client, make_quiz):
        """Test 3 attempts with a cap of 3 block the IP until it is reset."""
        quiz = make_quiz(max_attempts_per_ip=3)
        body = submission_body(quiz, ['Paris', 'Tokyo'], participant_data={'Name': 'Ada'})
        for _ in range(3):
            assert client.post('/api/submissions', json=body, headers=IP_A).status_code == 201

        refused = client.get(f'/api/take/{quiz.share_id}', headers=IP_A)
        assert refused.status_code == 403
        data = refused.get_json()
        assert data['kind'] == 'ATTEMPT_LIMIT_REACHED'
        assert data['attempt_count'] == 3
        assert data['max_attempts_per_ip'] == 3

        assert client.get(f'/api/take/{quiz.share_id}', headers=IP_B).status_code == 200

        reset = creator_client.post(f'/api/quizzes/{quiz.id}/reset-ip', json={'ip_address': '1.2.3.4'})
        assert reset.status_code == 200
        assert reset.get_json() == {'success': True, 'deleted_count': 3}

        assert client.get(f'/api/take/{quiz.share_id}', headers=IP_A).status_code == 200
        analytics = creator_client.get(f'/api/quizzes/{quiz.id}/analytics').get_json()['analytics']
        assert all(row['ip_address'] != '1.2.3.4' for row in analytics['ip_attempts'])
        assert Answer.query.count() == 0
