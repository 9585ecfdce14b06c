"""
Dashboard Routes - Admin write API
Handles: CRUD for every content collection, the contact message inbox,
bulk message operations and email replies

Every route requires an admin session. PortfolioError subclasses raised
here are turned into JSON responses by the app-level error handler.
"""

from flask import request, jsonify, current_app
from utils.data import (
    list_projects, list_skills, list_experience, list_settings, list_social_links,
    create_project, update_project, delete_project,
    create_skill, update_skill, delete_skill,
    create_experience, update_experience, delete_experience,
    upsert_setting,
    create_social_link, update_social_link, delete_social_link, reorder_social_links
)
from utils.decorators import admin_required
from utils.errors import ValidationError
from utils.helpers import get_payload, serialize, success_response
from utils.messages import (
    list_messages, message_stats, get_message, set_message_status, delete_message,
    bulk_update_status, bulk_delete, reply_to_message
)
from . import dashboard_bp


@dashboard_bp.before_request
@admin_required
def require_admin():
    """Gate every dashboard endpoint"""
    return None


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

@dashboard_bp.route('/projects', methods=['GET'])
def projects():
    return jsonify(serialize(list_projects()))


@dashboard_bp.route('/projects', methods=['POST'])
def add_project():
    project = create_project(get_payload())
    return success_response(201, project=project.to_dict())


@dashboard_bp.route('/projects/<project_id>', methods=['PUT', 'PATCH'])
def edit_project(project_id):
    project = update_project(project_id, get_payload())
    return success_response(project=project.to_dict())


@dashboard_bp.route('/projects/<project_id>', methods=['DELETE'])
def remove_project(project_id):
    delete_project(project_id)
    return success_response(id=project_id)


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

@dashboard_bp.route('/skills', methods=['GET'])
def skills():
    return jsonify(serialize(list_skills()))


@dashboard_bp.route('/skills', methods=['POST'])
def add_skill():
    skill = create_skill(get_payload())
    return success_response(201, skill=skill.to_dict())


@dashboard_bp.route('/skills/<skill_id>', methods=['PUT', 'PATCH'])
def edit_skill(skill_id):
    skill = update_skill(skill_id, get_payload())
    return success_response(skill=skill.to_dict())


@dashboard_bp.route('/skills/<skill_id>', methods=['DELETE'])
def remove_skill(skill_id):
    delete_skill(skill_id)
    return success_response(id=skill_id)


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

@dashboard_bp.route('/experience', methods=['GET'])
def experience():
    return jsonify(serialize(list_experience(request.args.get('type') or None)))


@dashboard_bp.route('/experience', methods=['POST'])
def add_experience():
    entry = create_experience(get_payload())
    return success_response(201, experience=entry.to_dict())


@dashboard_bp.route('/experience/<experience_id>', methods=['PUT', 'PATCH'])
def edit_experience(experience_id):
    entry = update_experience(experience_id, get_payload())
    return success_response(experience=entry.to_dict())


@dashboard_bp.route('/experience/<experience_id>', methods=['DELETE'])
def remove_experience(experience_id):
    delete_experience(experience_id)
    return success_response(id=experience_id)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dashboard_bp.route('/settings', methods=['GET'])
def settings():
    return jsonify(serialize(list_settings()))


@dashboard_bp.route('/settings/<key>', methods=['PUT'])
def save_setting(key):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or 'value' not in payload:
        raise ValidationError("Request body must contain 'value'")
    setting = upsert_setting(key, payload['value'])
    return success_response(setting=setting.to_dict())


# ---------------------------------------------------------------------------
# Social links
# ---------------------------------------------------------------------------

@dashboard_bp.route('/social-links', methods=['GET'])
def social_links():
    return jsonify(serialize(list_social_links()))


@dashboard_bp.route('/social-links', methods=['POST'])
def add_social_link():
    link = create_social_link(get_payload())
    return success_response(201, socialLink=link.to_dict())


@dashboard_bp.route('/social-links/reorder', methods=['POST'])
def reorder_links():
    payload = get_payload() or {}
    links = reorder_social_links(payload.get('ids'))
    return success_response(socialLinks=serialize(links))


@dashboard_bp.route('/social-links/<link_id>', methods=['PUT', 'PATCH'])
def edit_social_link(link_id):
    link = update_social_link(link_id, get_payload())
    return success_response(socialLink=link.to_dict())


@dashboard_bp.route('/social-links/<link_id>', methods=['DELETE'])
def remove_social_link(link_id):
    delete_social_link(link_id)
    return success_response(id=link_id)


# ---------------------------------------------------------------------------
# Contact messages
# ---------------------------------------------------------------------------

@dashboard_bp.route('/messages', methods=['GET'])
def messages():
    """Inbox, newest first, with per-status counts"""
    items = list_messages(status=request.args.get('status') or None,
                          search=request.args.get('q') or None)
    return jsonify({'messages': serialize(items), 'stats': message_stats()})


@dashboard_bp.route('/messages/<message_id>', methods=['GET'])
def view_message(message_id):
    """Opening a new message marks it as read"""
    message = get_message(message_id, mark_read=True)
    return jsonify(message.to_dict())


@dashboard_bp.route('/messages/<message_id>/status', methods=['PATCH', 'POST'])
def update_message_status(message_id):
    payload = get_payload() or {}
    message = set_message_status(message_id, payload.get('status'))
    return success_response(message=message.to_dict())


@dashboard_bp.route('/messages/<message_id>/read', methods=['POST'])
def mark_message_read(message_id):
    message = set_message_status(message_id, 'read')
    return success_response(message=message.to_dict())


@dashboard_bp.route('/messages/<message_id>/unread', methods=['POST'])
def mark_message_unread(message_id):
    message = set_message_status(message_id, 'new')
    return success_response(message=message.to_dict())


@dashboard_bp.route('/messages/<message_id>', methods=['DELETE'])
def remove_message(message_id):
    delete_message(message_id)
    return success_response(id=message_id)


@dashboard_bp.route('/messages/bulk-status', methods=['POST'])
def bulk_message_status():
    payload = get_payload() or {}
    result = bulk_update_status(payload.get('ids'), payload.get('status'))
    return success_response(
        updated=result.processed,
        skipped=result.skipped,
        invalid=[str(value) for value in result.invalid],
        count=len(result.processed)
    )


@dashboard_bp.route('/messages/bulk-delete', methods=['POST'])
def bulk_message_delete():
    payload = get_payload() or {}
    result = bulk_delete(payload.get('ids'))
    return success_response(
        deleted=result.processed,
        skipped=result.skipped,
        invalid=[str(value) for value in result.invalid],
        count=len(result.processed)
    )


def _send_reply(message_id, payload):
    reply_text = payload.get('replyText') or payload.get('replyMessage') or payload.get('reply')
    sender_name = payload.get('senderDisplayName') or payload.get('adminName')
    message = reply_to_message(message_id, reply_text, sender_name)
    current_app.logger.info(f"Reply sent for message {message.id}")
    return success_response(
        message='Reply sent successfully',
        emailMessageId=message.email_message_id,
        contactMessage=message.to_dict()
    )


@dashboard_bp.route('/messages/reply', methods=['POST'])
def reply_message():
    payload = get_payload() or {}
    if not payload.get('messageId'):
        raise ValidationError('Message ID and reply message are required')
    return _send_reply(payload['messageId'], payload)


@dashboard_bp.route('/messages/<message_id>/reply', methods=['POST'])
def reply_to(message_id):
    return _send_reply(message_id, get_payload() or {})
