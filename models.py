from extensions import db
from datetime import datetime
from sqlalchemy import JSON
import uuid

MESSAGE_STATUSES = ('new', 'read', 'replied')
EXPERIENCE_TYPES = ('work', 'education')


# Custom JSON type that uses JSONB on PostgreSQL and JSON/Text on SQLite
class SafeJSON(db.TypeDecorator):
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            from sqlalchemy.dialects.postgresql import JSONB
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


def _iso(value):
    return value.isoformat() if value else None


class Project(db.Model):
    __tablename__ = 'projects'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    long_description = db.Column(db.Text)
    tech_stack = db.Column(SafeJSON, default=list)
    live_url = db.Column(db.String(500))
    code_url = db.Column(db.String(500))
    image_url = db.Column(db.String(500))
    image_storage_id = db.Column(db.String(500))
    featured = db.Column(db.Boolean, default=False, nullable=False)
    order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'longDescription': self.long_description,
            'techStack': self.tech_stack or [],
            'liveUrl': self.live_url,
            'codeUrl': self.code_url,
            'imageUrl': self.image_url,
            'imageStorageId': self.image_storage_id,
            'featured': bool(self.featured),
            'order': self.order,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Skill(db.Model):
    __tablename__ = 'skills'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(100), nullable=False, default='tools')  # frontend, backend, database, tools
    level = db.Column(db.Integer, default=3, nullable=False)  # 1-5
    icon = db.Column(db.String(100))
    icon_url = db.Column(db.String(500))
    order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'level': self.level,
            'icon': self.icon,
            'iconUrl': self.icon_url,
            'order': self.order,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Experience(db.Model):
    __tablename__ = 'experience'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = db.Column(db.String(20), nullable=False)  # work, education
    title = db.Column(db.String(255), nullable=False)
    organization = db.Column(db.String(255), nullable=False)
    location = db.Column(db.String(255))
    start_date = db.Column(db.String(50), nullable=False)
    end_date = db.Column(db.String(50))
    current = db.Column(db.Boolean, default=False, nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    highlights = db.Column(SafeJSON, default=list)
    order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.Index('idx_experience_type_order', 'type', 'order'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'organization': self.organization,
            'location': self.location,
            'startDate': self.start_date,
            'endDate': self.end_date,
            'current': bool(self.current),
            'description': self.description,
            'highlights': self.highlights or [],
            'order': self.order,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Setting(db.Model):
    __tablename__ = 'settings'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    key = db.Column(db.String(255), unique=True, nullable=False, index=True)
    value = db.Column(SafeJSON)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'key': self.key,
            'value': self.value,
            'updatedAt': _iso(self.updated_at),
        }


class ContactMessage(db.Model):
    __tablename__ = 'contact_messages'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), default='new', nullable=False)  # new, read, replied
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    # Written only by the reply path; kept when status is reverted
    reply_text = db.Column(db.Text)
    replied_at = db.Column(db.DateTime)
    email_sent = db.Column(db.Boolean)
    email_message_id = db.Column(db.String(255))

    __table_args__ = (
        db.Index('idx_contact_status_created', 'status', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'message': self.message,
            'status': self.status,
            'createdAt': _iso(self.created_at),
            'replyText': self.reply_text,
            'repliedAt': _iso(self.replied_at),
            'emailSent': self.email_sent,
            'emailMessageId': self.email_message_id,
        }


class SocialLink(db.Model):
    __tablename__ = 'social_links'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(100), nullable=False)
    url = db.Column(db.String(500), nullable=False)
    icon_url = db.Column(db.String(500))
    default_emoji = db.Column(db.String(20), nullable=False, default='🔗')
    color = db.Column(db.String(255), nullable=False, default='')  # CSS classes for styling
    order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'url': self.url,
            'iconUrl': self.icon_url,
            'defaultEmoji': self.default_emoji,
            'color': self.color,
            'order': self.order,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }
