import pytest
from app import create_app
from extensions import db
from utils.notifications import Mailer, SendResult
from models import ContactMessage
from utils.security import RATE_LIMIT_REQUESTS


class RecordingMailer(Mailer):
    """Mailer that keeps sent emails in memory instead of talking to SMTP"""

    def __init__(self, fail_with=None):
        super().__init__(host='smtp.test', port=587, sender='noreply@example.com')
        self.sent = []
        self.fail_with = fail_with

    def send(self, recipient, subject, html_body, text_body=None, sender_name=None, reply_to=None):
        self.sent.append({
            'recipient': recipient,
            'subject': subject,
            'html': html_body,
            'text': text_body,
            'sender_name': sender_name,
            'reply_to': reply_to,
        })
        if self.fail_with:
            return SendResult(False, error=self.fail_with)
        return SendResult(True, message_id=f'<test-{len(self.sent)}@example.com>')


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', {'UPLOAD_FOLDER': str(tmp_path / 'images')})
    RATE_LIMIT_REQUESTS.clear()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = client.post('/auth/login', json={'username': 'admin', 'password': 'test-password'})
    assert response.status_code == 200
    return client


@pytest.fixture
def mailer(app):
    mailer = RecordingMailer()
    app.extensions['mailer'] = mailer
    return mailer


@pytest.fixture
def failing_mailer(app):
    mailer = RecordingMailer(fail_with='550 mailbox unavailable')
    app.extensions['mailer'] = mailer
    return mailer


def add_message(name='Ada', email='ada@example.com', message='Hello there', status='new'):
    """Insert a contact message; needs an active app context"""
    contact = ContactMessage(name=name, email=email, message=message, status=status)
    db.session.add(contact)
    db.session.commit()
    return contact.id
