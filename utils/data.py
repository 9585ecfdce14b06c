"""
Data Management Module - Content store accessors for the portfolio
Read views for the public site and CRUD helpers for the admin dashboard
"""

from datetime import datetime
from flask import current_app
from extensions import db
from models import (
    Project, Skill, Experience, Setting, SocialLink, EXPERIENCE_TYPES
)
from .errors import ValidationError, NotFoundError


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def _text(max_length=None, required=False, empty=None):
    def coerce(value, field):
        if value is None:
            if required:
                raise ValidationError(f"'{field}' is required")
            return empty
        text = str(value).strip()
        if required and not text:
            raise ValidationError(f"'{field}' is required")
        if max_length:
            text = text[:max_length]
        return text or empty
    return coerce


def _boolean(value, field):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def _integer(value, field):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{field}' must be a number")


def _skill_level(value, field):
    level = _integer(value, field)
    return min(max(level, 1), 5)


def _string_list(value, field):
    """Accept a list or a comma separated string"""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(',')
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"'{field}' must be a list")
    return [str(item).strip()[:100] for item in value if str(item).strip()]


def _experience_type(value, field):
    kind = str(value or '').strip().lower()
    if kind not in EXPERIENCE_TYPES:
        raise ValidationError(f"'{field}' must be one of: {', '.join(EXPERIENCE_TYPES)}")
    return kind


# wire key -> (model attribute, coercer, required on create)
PROJECT_FIELDS = {
    'title': ('title', _text(255, required=True), True),
    'description': ('description', _text(required=True), True),
    'longDescription': ('long_description', _text(), False),
    'techStack': ('tech_stack', _string_list, False),
    'liveUrl': ('live_url', _text(500), False),
    'codeUrl': ('code_url', _text(500), False),
    'imageUrl': ('image_url', _text(500), False),
    'imageStorageId': ('image_storage_id', _text(500), False),
    'featured': ('featured', _boolean, False),
    'order': ('order', _integer, False),
}

SKILL_FIELDS = {
    'name': ('name', _text(255, required=True), True),
    'category': ('category', _text(100, required=True), True),
    'level': ('level', _skill_level, True),
    'icon': ('icon', _text(100), False),
    'iconUrl': ('icon_url', _text(500), False),
    'order': ('order', _integer, False),
}

EXPERIENCE_FIELDS = {
    'type': ('type', _experience_type, True),
    'title': ('title', _text(255, required=True), True),
    'organization': ('organization', _text(255, required=True), True),
    'location': ('location', _text(255), False),
    'startDate': ('start_date', _text(50, required=True), True),
    'endDate': ('end_date', _text(50), False),
    'current': ('current', _boolean, False),
    'description': ('description', _text(required=True), True),
    'highlights': ('highlights', _string_list, False),
    'order': ('order', _integer, False),
}

SOCIAL_LINK_FIELDS = {
    'name': ('name', _text(100, required=True), True),
    'url': ('url', _text(500, required=True), True),
    'iconUrl': ('icon_url', _text(500), False),
    'defaultEmoji': ('default_emoji', _text(20, required=True), True),
    'color': ('color', _text(255, empty=''), False),
    'order': ('order', _integer, False),
}


def _snake_case(key):
    return ''.join(f'_{ch.lower()}' if ch.isupper() else ch for ch in key)


def _apply_fields(record, payload, fields, creating=False):
    """
    Copy supplied payload values onto a record.

    Keys are read in camelCase (wire format) with a snake_case fallback.
    Missing keys are left untouched, which makes every update partial.
    On create, required fields must be present.
    """
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')

    for wire_key, (attr, coerce, required) in fields.items():
        if wire_key in payload:
            raw = payload[wire_key]
        elif _snake_case(wire_key) in payload:
            raw = payload[_snake_case(wire_key)]
        else:
            if creating and required:
                raise ValidationError(f"'{wire_key}' is required")
            continue
        setattr(record, attr, coerce(raw, wire_key))
    return record


def _get_or_404(model, record_id, label):
    record = db.session.get(model, str(record_id)) if record_id else None
    if not record:
        raise NotFoundError(f'{label} not found')
    return record


def _touch(record):
    record.updated_at = datetime.utcnow()


# ---------------------------------------------------------------------------
# Public read views
# ---------------------------------------------------------------------------

def list_projects(featured_only=False):
    """Projects sorted by display order, lowest first"""
    query = Project.query
    if featured_only:
        query = query.filter(Project.featured.is_(True))
    return query.order_by(Project.order.asc(), Project.created_at.asc()).all()


def list_featured_projects():
    return list_projects(featured_only=True)


def list_skills(category=None):
    query = Skill.query
    if category:
        query = query.filter(Skill.category == category)
    return query.order_by(Skill.order.asc(), Skill.created_at.asc()).all()


def skills_by_category():
    """Group ordered skills by category, keeping first-seen category order"""
    grouped = {}
    for skill in list_skills():
        grouped.setdefault(skill.category, []).append(skill)
    return grouped


def list_experience(kind=None):
    """Experience sorted by order descending so the latest entry comes first"""
    query = Experience.query
    if kind:
        query = query.filter(Experience.type == _experience_type(kind, 'type'))
    return query.order_by(Experience.order.desc(), Experience.created_at.desc()).all()


def experience_by_type():
    return {kind: list_experience(kind) for kind in EXPERIENCE_TYPES}


def get_setting(key, default=None):
    setting = Setting.query.filter_by(key=key).first()
    if setting is None or setting.value is None:
        return default
    return setting.value


def list_settings():
    return Setting.query.order_by(Setting.key.asc()).all()


def list_social_links():
    return SocialLink.query.order_by(SocialLink.order.asc(), SocialLink.created_at.asc()).all()


def get_portfolio_bundle():
    """Everything the landing page renders, in one payload"""
    experience = experience_by_type()
    return {
        'personalInfo': get_setting('personal_info', {}),
        'projects': [p.to_dict() for p in list_projects()],
        'skills': [s.to_dict() for s in list_skills()],
        'experience': {kind: [e.to_dict() for e in items] for kind, items in experience.items()},
        'socialLinks': [link.to_dict() for link in list_social_links()],
    }


# ---------------------------------------------------------------------------
# Admin writes
# ---------------------------------------------------------------------------

def _create(model, payload, fields, label):
    record = _apply_fields(model(), payload, fields, creating=True)
    now = datetime.utcnow()
    record.created_at = now
    if hasattr(record, 'updated_at'):
        record.updated_at = now
    db.session.add(record)
    db.session.commit()
    current_app.logger.info(f"Created {label} {record.id}")
    return record


def _update(model, record_id, payload, fields, label):
    record = _get_or_404(model, record_id, label)
    _apply_fields(record, payload, fields)
    _touch(record)
    db.session.commit()
    current_app.logger.info(f"Updated {label} {record.id}")
    return record


def _delete(model, record_id, label):
    record = _get_or_404(model, record_id, label)
    db.session.delete(record)
    db.session.commit()
    current_app.logger.info(f"Deleted {label} {record_id}")
    return record_id


def create_project(payload):
    return _create(Project, payload, PROJECT_FIELDS, 'Project')


def update_project(project_id, payload):
    return _update(Project, project_id, payload, PROJECT_FIELDS, 'Project')


def delete_project(project_id):
    return _delete(Project, project_id, 'Project')


def create_skill(payload):
    return _create(Skill, payload, SKILL_FIELDS, 'Skill')


def update_skill(skill_id, payload):
    return _update(Skill, skill_id, payload, SKILL_FIELDS, 'Skill')


def delete_skill(skill_id):
    return _delete(Skill, skill_id, 'Skill')


def create_experience(payload):
    return _create(Experience, payload, EXPERIENCE_FIELDS, 'Experience')


def update_experience(experience_id, payload):
    return _update(Experience, experience_id, payload, EXPERIENCE_FIELDS, 'Experience')


def delete_experience(experience_id):
    return _delete(Experience, experience_id, 'Experience')


def upsert_setting(key, value):
    """Patch the value of an existing key or insert a new one"""
    key = (key or '').strip()
    if not key:
        raise ValidationError("'key' is required")

    setting = Setting.query.filter_by(key=key).first()
    if setting:
        setting.value = value
        _touch(setting)
    else:
        setting = Setting(key=key, value=value, updated_at=datetime.utcnow())
        db.session.add(setting)
    db.session.commit()
    current_app.logger.info(f"Saved setting '{key}'")
    return setting


def create_social_link(payload):
    """Create a link at the end of the list (max existing order + 1)"""
    if isinstance(payload, dict):
        payload = {k: v for k, v in payload.items() if k != 'order'}
    max_order = db.session.query(db.func.max(SocialLink.order)).scalar() or 0
    record = _apply_fields(SocialLink(), payload, SOCIAL_LINK_FIELDS, creating=True)
    now = datetime.utcnow()
    record.order = max(max_order, 0) + 1
    record.created_at = now
    record.updated_at = now
    db.session.add(record)
    db.session.commit()
    current_app.logger.info(f"Created social link {record.id} at position {record.order}")
    return record


def update_social_link(link_id, payload):
    return _update(SocialLink, link_id, payload, SOCIAL_LINK_FIELDS, 'Social link')


def delete_social_link(link_id):
    return _delete(SocialLink, link_id, 'Social link')


def reorder_social_links(ordered_ids):
    """
    Assign order 1..n following the given id sequence. Unknown ids are
    ignored; links left out keep their relative order after the listed ones.
    """
    if not isinstance(ordered_ids, list) or not ordered_ids:
        raise ValidationError("'ids' must be a non-empty list")

    links = {link.id: link for link in SocialLink.query.all()}
    position = 0
    for link_id in ordered_ids:
        link = links.pop(str(link_id), None)
        if link is None:
            continue
        position += 1
        link.order = position
        _touch(link)
    for link in sorted(links.values(), key=lambda l: (l.order, l.created_at)):
        position += 1
        link.order = position
        _touch(link)
    db.session.commit()
    return list_social_links()


__all__ = [
    'list_projects',
    'list_featured_projects',
    'list_skills',
    'skills_by_category',
    'list_experience',
    'experience_by_type',
    'get_setting',
    'list_settings',
    'list_social_links',
    'get_portfolio_bundle',
    'create_project',
    'update_project',
    'delete_project',
    'create_skill',
    'update_skill',
    'delete_skill',
    'create_experience',
    'update_experience',
    'delete_experience',
    'upsert_setting',
    'create_social_link',
    'update_social_link',
    'delete_social_link',
    'reorder_social_links'
]
