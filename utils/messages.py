"""
Messages Module - Contact message inbox, bulk operations and the reply pipeline
"""

import uuid
from collections import namedtuple
from datetime import datetime
from flask import current_app
from extensions import db
from models import ContactMessage, MESSAGE_STATUSES
from .errors import ValidationError, NoValidIdentifiersError, NotFoundError, UpstreamError
from .notifications import (
    get_mailer, build_contact_notification, build_reply_email, send_admin_notification
)


MESSAGE_MAX_LENGTH = 5000
REPLY_SUBJECT = 'Re: for your message'

# processed: ids actually changed, skipped: well-formed but missing,
# invalid: malformed entries dropped before any lookup
BulkResult = namedtuple('BulkResult', ['processed', 'skipped', 'invalid'])


def check_status(status):
    if status not in MESSAGE_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(MESSAGE_STATUSES)}")
    return status


def is_valid_identifier(value):
    """Message ids are UUID strings; anything else cannot name a message"""
    if not isinstance(value, str):
        return False
    value = value.strip()
    if not value or value in ('undefined', 'null'):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def normalize_identifiers(ids):
    """
    Split a caller-supplied id list into well-formed ids and rejected entries.

    Well-formed ids are stripped and de-duplicated, keeping first occurrence.

    Returns:
        tuple: (valid ids, invalid entries)
    """
    if isinstance(ids, str) or not isinstance(ids, (list, tuple, set)):
        raise ValidationError("'ids' must be a list of message identifiers")

    valid, invalid, seen = [], [], set()
    for value in ids:
        if not is_valid_identifier(value):
            invalid.append(value)
            continue
        value = value.strip()
        if value not in seen:
            seen.add(value)
            valid.append(value)
    return valid, invalid


def bulk_update_status(ids, status):
    """
    Set the same status on many messages.

    Missing messages are skipped without error. Raises
    NoValidIdentifiersError before any lookup when no well-formed id remains.
    """
    check_status(status)
    valid, invalid = normalize_identifiers(ids)
    if not valid:
        raise NoValidIdentifiersError()

    processed, skipped = [], []
    for message_id in valid:
        message = db.session.get(ContactMessage, message_id)
        if message is None:
            skipped.append(message_id)
            continue
        message.status = status
        processed.append(message_id)

    if processed:
        db.session.commit()

    current_app.logger.info(
        f"Bulk status '{status}': {len(processed)} updated, "
        f"{len(skipped)} missing, {len(invalid)} invalid")
    return BulkResult(processed, skipped, invalid)


def bulk_delete(ids):
    """Delete many messages; deleting a missing message is a no-op"""
    valid, invalid = normalize_identifiers(ids)
    if not valid:
        raise NoValidIdentifiersError()

    processed, skipped = [], []
    for message_id in valid:
        message = db.session.get(ContactMessage, message_id)
        if message is None:
            skipped.append(message_id)
            continue
        db.session.delete(message)
        processed.append(message_id)

    if processed:
        db.session.commit()

    current_app.logger.info(
        f"Bulk delete: {len(processed)} deleted, {len(skipped)} missing, {len(invalid)} invalid")
    return BulkResult(processed, skipped, invalid)


def list_messages(status=None, search=None):
    """Messages newest first, optionally filtered by status and a search term"""
    query = ContactMessage.query
    if status and status != 'all':
        query = query.filter(ContactMessage.status == check_status(status))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(db.or_(
            ContactMessage.name.ilike(pattern),
            ContactMessage.email.ilike(pattern),
            ContactMessage.message.ilike(pattern),
        ))
    return query.order_by(ContactMessage.created_at.desc()).all()


def message_stats():
    counts = dict(
        db.session.query(ContactMessage.status, db.func.count(ContactMessage.id))
        .group_by(ContactMessage.status)
        .all()
    )
    stats = {status: counts.get(status, 0) for status in MESSAGE_STATUSES}
    stats['total'] = sum(counts.values())
    return stats


def get_message(message_id, mark_read=False):
    """Load one message; opening a new message marks it read when asked"""
    message = db.session.get(ContactMessage, message_id) if is_valid_identifier(message_id) else None
    if not message:
        raise NotFoundError('Message not found')
    if mark_read and message.status == 'new':
        message.status = 'read'
        db.session.commit()
    return message


def set_message_status(message_id, status):
    check_status(status)
    message = get_message(message_id)
    message.status = status
    db.session.commit()
    current_app.logger.info(f"Message {message_id} marked {status}")
    return message


def delete_message(message_id):
    message = get_message(message_id)
    db.session.delete(message)
    db.session.commit()
    current_app.logger.info(f"Deleted message {message_id}")
    return message_id


def _clean_text(value, error):
    """Strip a text field; None counts as empty, any other non-string is rejected"""
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(error)
    return value.strip()


def submit_contact(name, email, message):
    """
    Store a public contact submission and notify the site owner.

    Notification delivery never affects the outcome of the submission.
    """
    name = _clean_text(name, 'All fields must be text')
    email = _clean_text(email, 'All fields must be text')
    message = _clean_text(message, 'All fields must be text')
    if not all([name, email, message]):
        raise ValidationError('All fields are required')

    contact = ContactMessage(
        name=name[:255],
        email=email[:255],
        message=message[:MESSAGE_MAX_LENGTH],
        status='new',
        created_at=datetime.utcnow(),
    )
    db.session.add(contact)
    db.session.commit()
    current_app.logger.info(f"Contact message saved to DB, message_id: {contact.id}")

    subject, html, text = build_contact_notification(name, email, message)
    if not send_admin_notification(subject, html, text, reply_to=email):
        current_app.logger.warning(f"Contact notification failed for message {contact.id}")

    return contact


def reply_to_message(message_id, reply_text, sender_name=None):
    """
    Email a reply to the author of a contact message and record it.

    The message is marked replied only when the email was accepted by the
    SMTP server; otherwise UpstreamError is raised and nothing changes.
    """
    reply_text = _clean_text(reply_text, 'Reply message must be text')
    if not reply_text:
        raise ValidationError('Message ID and reply message are required')

    try:
        message = get_message(message_id)
    except NotFoundError:
        raise NotFoundError('Original message not found')

    sender_name = (_clean_text(sender_name, 'Sender name must be text')
                   or current_app.config.get('REPLY_EMAIL_NAME') or 'Admin')
    html, text = build_reply_email(reply_text, sender_name, message.id)

    try:
        result = get_mailer().send(message.email, REPLY_SUBJECT, html, text, sender_name=sender_name)
    except Exception as e:
        current_app.logger.error(f"Reply email for {message.id} raised: {str(e)}")
        raise UpstreamError('Failed to send email') from e

    if not result.success:
        current_app.logger.error(f"Reply email for {message.id} failed: {result.error}")
        raise UpstreamError(f"Failed to send email: {result.error}")

    message.reply_text = reply_text
    message.replied_at = datetime.utcnow()
    message.email_sent = True
    message.email_message_id = result.message_id
    message.status = 'replied'
    db.session.commit()

    current_app.logger.info(f"Reply recorded for message {message.id}")
    return message


__all__ = [
    'BulkResult',
    'check_status',
    'is_valid_identifier',
    'normalize_identifiers',
    'bulk_update_status',
    'bulk_delete',
    'list_messages',
    'message_stats',
    'get_message',
    'set_message_status',
    'delete_message',
    'submit_contact',
    'reply_to_message'
]
