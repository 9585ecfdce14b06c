"""
Notifications Module - Outbound email over SMTP

The mailer is built once from the app configuration and stored on
app.extensions; senders never read SMTP settings at call time.
"""

import smtplib
from collections import namedtuple
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr, make_msgid
from flask import current_app
from markupsafe import escape


SendResult = namedtuple('SendResult', ['success', 'message_id', 'error'], defaults=(None, None))


class Mailer:
    """SMTP sender bound to one set of credentials and one sender identity"""

    def __init__(self, host, port, sender, username=None, password=None,
                 use_tls=True, timeout=15, default_sender_name=None):
        self.host = host
        self.port = int(port or 587)
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.default_sender_name = default_sender_name

    @classmethod
    def from_config(cls, config):
        return cls(
            host=config.get('SMTP_HOST'),
            port=config.get('SMTP_PORT', 587),
            sender=config.get('EMAIL_FROM') or config.get('SMTP_USER'),
            username=config.get('SMTP_USER'),
            password=config.get('SMTP_PASS'),
            use_tls=config.get('SMTP_USE_TLS', True),
            timeout=config.get('SMTP_TIMEOUT', 15),
            default_sender_name=config.get('REPLY_EMAIL_NAME'),
        )

    @property
    def is_configured(self):
        return bool(self.host and self.sender)

    def _connect(self):
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def send(self, recipient, subject, html_body, text_body=None, sender_name=None, reply_to=None):
        """
        Send one email.

        Args:
            recipient (str): Destination address
            subject (str): Email subject
            html_body (str): HTML part
            text_body (str, optional): Plain text alternative
            sender_name (str, optional): Display name for the From header
            reply_to (str, optional): Reply-To address

        Returns:
            SendResult: success flag, Message-ID on success, error text on failure
        """
        if not self.is_configured:
            current_app.logger.debug("SMTP config incomplete, email not sent")
            return SendResult(False, error='SMTP not configured')

        domain = self.sender.rsplit('@', 1)[-1] if '@' in self.sender else None
        message_id = make_msgid(domain=domain)

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = formataddr((sender_name or self.default_sender_name or '', self.sender))
        msg['To'] = recipient
        msg['Message-ID'] = message_id
        if reply_to:
            msg['Reply-To'] = reply_to

        if text_body:
            msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))

        try:
            with self._connect() as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            current_app.logger.error(f"Error sending email to {recipient}: {str(e)}")
            return SendResult(False, error=str(e))

        current_app.logger.info(f"Email sent to {recipient}, message id {message_id}")
        return SendResult(True, message_id=message_id)


def init_mailer(app):
    app.extensions['mailer'] = Mailer.from_config(app.config)


def get_mailer():
    return current_app.extensions['mailer']


def _html_lines(text):
    return str(escape(text)).replace('\n', '<br>')


def build_contact_notification(name, email, message):
    """Subject and bodies of the admin notification for a new contact message"""
    subject = f"New Contact Form Submission from {name}"
    html = (
        "<h2>New Contact Form Submission</h2>"
        f"<p><strong>Name:</strong> {escape(name)}</p>"
        f"<p><strong>Email:</strong> {escape(email)}</p>"
        "<p><strong>Message:</strong></p>"
        f"<p>{_html_lines(message)}</p>"
    )
    text = f"New Contact Form Submission\n\nName: {name}\nEmail: {email}\n\n{message}"
    return subject, html, text


def build_reply_email(reply_text, sender_name, reference_id):
    """Bodies of a reply sent to the author of a contact message"""
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background: #667eea; padding: 20px; border-radius: 10px 10px 0 0;">
    <h2 style="color: white; margin: 0;">Reply from {escape(sender_name)}</h2>
  </div>
  <div style="background: #f8f9fa; padding: 20px; border-left: 4px solid #667eea;">
    <h3 style="color: #333; margin-top: 0;">Reply to your message:</h3>
    <div style="background: white; padding: 15px; border-radius: 8px; border: 1px solid #e9ecef;">
      {_html_lines(reply_text)}
    </div>
  </div>
  <div style="background: white; padding: 20px; border-radius: 0 0 10px 10px; border-top: 1px solid #e9ecef;">
    <p style="color: #666; margin: 0; font-size: 14px;">
      This is a reply to your message sent through the contact form at my website.
      <br>
      <strong>Reference ID:</strong> {escape(reference_id)}
    </p>
  </div>
</div>
"""
    text = (
        f"Reply from {sender_name}\n\n"
        f"{reply_text}\n\n"
        "---\n"
        "This is a reply to your message sent through the contact form.\n"
        f"Reference ID: {reference_id}"
    )
    return html, text


def send_admin_notification(subject, html_body, text_body=None, reply_to=None):
    """
    Email the site owner. Failures are logged and reported as False,
    never raised.
    """
    recipient = current_app.config.get('ADMIN_EMAIL') or current_app.config.get('EMAIL_FROM')
    if not recipient:
        current_app.logger.debug("Admin email not configured, skipping notification")
        return False

    try:
        result = get_mailer().send(recipient, subject, html_body, text_body, reply_to=reply_to)
    except Exception as e:
        current_app.logger.error(f"Admin notification error: {str(e)}")
        return False

    if not result.success:
        current_app.logger.warning(f"Admin notification not delivered: {result.error}")
    return result.success


__all__ = [
    'SendResult',
    'Mailer',
    'init_mailer',
    'get_mailer',
    'build_contact_notification',
    'build_reply_email',
    'send_admin_notification'
]
