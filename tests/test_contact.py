import smtplib
import pytest
from extensions import db
from models import ContactMessage
from utils.errors import ValidationError, UpstreamError, NotFoundError
from utils.messages import submit_contact, reply_to_message, REPLY_SUBJECT
from utils.notifications import Mailer, build_reply_email, build_contact_notification
from conftest import add_message


class FakeSMTP:

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []
        self.started_tls = False
        self.logged_in = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, username, password):
        self.logged_in = username

    def send_message(self, msg):
        if self.fail:
            raise smtplib.SMTPRecipientsRefused({msg['To']: (550, b'no such user')})
        self.sent.append(msg)


class TestMailer:

    def _mailer(self, server):
        mailer = Mailer(host='smtp.test', port=587, sender='noreply@example.com',
                        username='noreply@example.com', password='secret')
        mailer._connect = lambda: server
        return mailer

    def test_send_returns_message_id(self, ctx):
        server = FakeSMTP()
        result = self._mailer(server).send('ada@example.com', 'Hi', '<p>Hi</p>', 'Hi',
                                           sender_name='Portfolio Owner')

        assert result.success is True
        assert result.message_id.endswith('@example.com>')
        assert server.started_tls
        assert server.logged_in == 'noreply@example.com'
        assert server.sent[0]['Message-ID'] == result.message_id
        assert 'Portfolio Owner' in server.sent[0]['From']

    def test_smtp_error_is_returned_not_raised(self, ctx):
        result = self._mailer(FakeSMTP(fail=True)).send('ada@example.com', 'Hi', '<p>Hi</p>')
        assert result.success is False
        assert result.error

    def test_unconfigured_mailer(self, ctx):
        result = Mailer(host=None, port=None, sender=None).send('ada@example.com', 'Hi', '<p>Hi</p>')
        assert result == (False, None, 'SMTP not configured')


class TestEmailBodies:

    def test_user_content_is_escaped(self):
        subject, html, text = build_contact_notification('Eve', 'eve@example.com', '<script>x</script>')
        assert '<script>' not in html
        assert '&lt;script&gt;' in html
        assert '<script>x</script>' in text

    def test_reply_contains_reference(self):
        html, text = build_reply_email('Thanks!\nTalk soon', 'Sam', 'abc-123')
        assert 'Thanks!<br>Talk soon' in html
        assert 'Reference ID: abc-123' in text


class TestSubmitContact:

    def test_stores_message_and_notifies_owner(self, ctx, mailer):
        contact = submit_contact('Ada', 'ada@example.com', 'Hello!')

        stored = db.session.get(ContactMessage, contact.id)
        assert stored.status == 'new'
        assert stored.message == 'Hello!'
        assert mailer.sent[0]['recipient'] == 'owner@example.com'
        assert mailer.sent[0]['reply_to'] == 'ada@example.com'

    def test_notification_failure_keeps_message(self, ctx, failing_mailer):
        contact = submit_contact('Ada', 'ada@example.com', 'Hello!')
        assert db.session.get(ContactMessage, contact.id) is not None
        assert len(failing_mailer.sent) == 1

    def test_missing_fields(self, ctx, mailer):
        with pytest.raises(ValidationError):
            submit_contact('Ada', '', 'Hello!')
        assert ContactMessage.query.count() == 0
        assert mailer.sent == []

    def test_non_text_fields(self, ctx, mailer):
        with pytest.raises(ValidationError) as excinfo:
            submit_contact(123, 'ada@example.com', ['Hello'])
        assert excinfo.value.message == 'All fields must be text'
        assert ContactMessage.query.count() == 0
        assert mailer.sent == []


class TestReplyToMessage:

    def test_success_marks_replied(self, ctx, mailer):
        message_id = add_message()

        message = reply_to_message(message_id, 'Thanks for writing', 'Sam')

        assert message.status == 'replied'
        assert message.reply_text == 'Thanks for writing'
        assert message.email_sent is True
        assert message.email_message_id == '<test-1@example.com>'
        assert message.replied_at is not None
        sent = mailer.sent[0]
        assert sent['recipient'] == 'ada@example.com'
        assert sent['subject'] == REPLY_SUBJECT
        assert sent['sender_name'] == 'Sam'

    def test_default_sender_name(self, ctx, mailer):
        reply_to_message(add_message(), 'Thanks')
        assert mailer.sent[0]['sender_name'] == ctx.config['REPLY_EMAIL_NAME']

    def test_failure_leaves_message_unchanged(self, ctx, failing_mailer):
        message_id = add_message(status='read')

        with pytest.raises(UpstreamError):
            reply_to_message(message_id, 'Thanks')

        message = db.session.get(ContactMessage, message_id)
        assert message.status == 'read'
        assert message.reply_text is None
        assert message.email_sent is None

    def test_empty_reply(self, ctx, mailer):
        with pytest.raises(ValidationError):
            reply_to_message(add_message(), '   ')
        assert mailer.sent == []

    def test_non_text_reply(self, ctx, mailer):
        message_id = add_message()
        with pytest.raises(ValidationError):
            reply_to_message(message_id, 5)
        with pytest.raises(ValidationError):
            reply_to_message(message_id, 'Thanks', sender_name={'name': 'Sam'})
        assert mailer.sent == []
        assert db.session.get(ContactMessage, message_id).status == 'new'

    def test_unknown_message(self, ctx, mailer):
        with pytest.raises(NotFoundError):
            reply_to_message('5f0c1d2e-0000-4000-8000-000000000000', 'Thanks')


class TestContactRoutes:

    def test_submit(self, app, client, mailer):
        response = client.post('/api/contact', json={
            'name': 'Ada', 'email': 'ada@example.com', 'message': 'Hello!'
        })

        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'message': 'Message sent successfully!'}
        with app.app_context():
            assert ContactMessage.query.count() == 1

    def test_submit_missing_fields(self, client, mailer):
        response = client.post('/api/contact', json={'name': 'Ada'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'All fields are required'

    def test_honeypot(self, app, client, mailer):
        response = client.post('/api/contact', json={
            'name': 'Bot', 'email': 'bot@example.com', 'message': 'spam', 'website': 'http://spam'
        })
        assert response.status_code == 200
        with app.app_context():
            assert ContactMessage.query.count() == 0

    def test_rate_limit(self, app, client, mailer):
        app.config['CONTACT_RATE_LIMIT'] = 2
        payload = {'name': 'Ada', 'email': 'ada@example.com', 'message': 'Hello!'}
        assert client.post('/api/contact', json=payload).status_code == 200
        assert client.post('/api/contact', json=payload).status_code == 200
        assert client.post('/api/contact', json=payload).status_code == 429

    def test_reply_endpoint(self, app, admin_client, mailer):
        with app.app_context():
            message_id = add_message()

        response = admin_client.post('/admin/api/messages/reply', json={
            'messageId': message_id, 'replyText': 'Thanks!', 'senderDisplayName': 'Sam'
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['emailMessageId'] == '<test-1@example.com>'
        assert data['contactMessage']['status'] == 'replied'

    def test_reply_endpoint_upstream_failure(self, app, admin_client, failing_mailer):
        with app.app_context():
            message_id = add_message()

        response = admin_client.post(f'/admin/api/messages/{message_id}/reply',
                                     json={'replyMessage': 'Thanks!'})

        assert response.status_code == 502
        assert response.get_json()['success'] is False
        with app.app_context():
            assert db.session.get(ContactMessage, message_id).status == 'new'

    def test_reply_endpoint_requires_message_id(self, admin_client, mailer):
        response = admin_client.post('/admin/api/messages/reply', json={'replyText': 'Thanks!'})
        assert response.status_code == 400

    def test_submit_with_non_text_field(self, app, client, mailer):
        response = client.post('/api/contact', json={
            'name': 123, 'email': 'ada@example.com', 'message': 'Hello!'
        })

        assert response.status_code == 400
        assert response.get_json() == {'error': 'All fields must be text'}
        with app.app_context():
            assert ContactMessage.query.count() == 0

    def test_submit_with_non_object_body(self, client, mailer):
        response = client.post('/api/contact', json=['Ada', 'ada@example.com', 'Hello!'])
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Request body must be a JSON object'}

    def test_reply_endpoint_with_non_text_reply(self, app, admin_client, mailer):
        with app.app_context():
            message_id = add_message()

        response = admin_client.post(f'/admin/api/messages/{message_id}/reply', json={'replyText': 5})

        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'error': 'Reply message must be text'}
        assert mailer.sent == []
