"""
Seed Script: starter portfolio content
Fills empty collections with sample projects, skills, experience,
social links and the personal_info setting.

Usage:
    flask --app app seed-content [--force]
"""

from datetime import datetime
import click
from flask import current_app
from flask.cli import with_appcontext
from extensions import db
from models import Project, Skill, Experience, Setting, SocialLink


PERSONAL_INFO = {
    'name': 'Your Name',
    'title': 'Full Stack Developer',
    'bio': 'I build web applications end to end, from database schema to polished UI.',
    'email': 'hello@example.com',
    'location': 'Remote',
    'profileImage': None,
}

PROJECTS = [
    {
        'title': 'E-commerce Platform',
        'description': 'Full-stack e-commerce solution with payment integration',
        'long_description': 'A complete e-commerce platform featuring user authentication, product catalog, '
                            'shopping cart, and Stripe payment integration. Includes admin dashboard for '
                            'inventory management.',
        'tech_stack': ['Next.js', 'TypeScript', 'PostgreSQL', 'Stripe', 'Tailwind CSS'],
        'live_url': 'https://demo-ecommerce.example.com',
        'code_url': 'https://github.com/yourusername/ecommerce-platform',
        'featured': True,
        'order': 1,
    },
    {
        'title': 'Task Management App',
        'description': 'Collaborative task management with real-time updates',
        'long_description': 'Real-time synchronization, drag-and-drop kanban boards, team collaboration '
                            'features, and deadline tracking.',
        'tech_stack': ['React', 'Node.js', 'Socket.io', 'MongoDB', 'Express'],
        'live_url': 'https://task-manager-demo.example.com',
        'code_url': 'https://github.com/yourusername/task-manager',
        'featured': True,
        'order': 2,
    },
    {
        'title': 'Weather Dashboard',
        'description': 'Weather app with location-based forecasts',
        'long_description': 'Current conditions and 7-day forecasts with location detection and '
                            'meteorological data visualization.',
        'tech_stack': ['Vue.js', 'OpenWeather API', 'Chart.js', 'CSS3'],
        'featured': False,
        'order': 3,
    },
]

SKILLS = [
    ('JavaScript', 'frontend', 5, 'js'),
    ('TypeScript', 'frontend', 5, 'ts'),
    ('React', 'frontend', 5, 'react'),
    ('Python', 'backend', 4, 'python'),
    ('Flask', 'backend', 4, 'flask'),
    ('PostgreSQL', 'database', 4, 'postgresql'),
    ('Git', 'tools', 5, 'git'),
    ('Docker', 'tools', 3, 'docker'),
]

EXPERIENCE = [
    {
        'type': 'work',
        'title': 'Senior Developer',
        'organization': 'Tech Company',
        'location': 'Remote',
        'start_date': '2022-01',
        'current': True,
        'description': 'Leading development of customer-facing web applications.',
        'highlights': ['Shipped a new billing system', 'Mentored junior developers'],
        'order': 2,
    },
    {
        'type': 'work',
        'title': 'Web Developer',
        'organization': 'Digital Agency',
        'start_date': '2019-06',
        'end_date': '2021-12',
        'current': False,
        'description': 'Built websites and web apps for agency clients.',
        'highlights': [],
        'order': 1,
    },
    {
        'type': 'education',
        'title': 'BSc Computer Science',
        'organization': 'State University',
        'start_date': '2015-09',
        'end_date': '2019-06',
        'current': False,
        'description': 'Focus on software engineering and databases.',
        'highlights': [],
        'order': 1,
    },
]

SOCIAL_LINKS = [
    ('GitHub', 'https://github.com/yourusername', '💻', 'hover:bg-gray-800'),
    ('LinkedIn', 'https://linkedin.com/in/yourusername', '💼', 'hover:bg-blue-600'),
    ('Twitter', 'https://twitter.com/yourusername', '🐦', 'hover:bg-sky-500'),
]


def seed_content(force=False):
    """
    Insert starter content into empty collections.

    Args:
        force (bool): Seed every collection even if it already has rows

    Returns:
        dict: Number of rows inserted per collection
    """
    now = datetime.utcnow()
    inserted = {'projects': 0, 'skills': 0, 'experience': 0, 'socialLinks': 0, 'settings': 0}

    if force or not Project.query.first():
        for item in PROJECTS:
            db.session.add(Project(created_at=now, updated_at=now, **item))
            inserted['projects'] += 1

    if force or not Skill.query.first():
        for position, (name, category, level, icon) in enumerate(SKILLS, start=1):
            db.session.add(Skill(name=name, category=category, level=level, icon=icon,
                                 order=position, created_at=now, updated_at=now))
            inserted['skills'] += 1

    if force or not Experience.query.first():
        for item in EXPERIENCE:
            db.session.add(Experience(created_at=now, updated_at=now, **item))
            inserted['experience'] += 1

    if force or not SocialLink.query.first():
        for position, (name, url, emoji, color) in enumerate(SOCIAL_LINKS, start=1):
            db.session.add(SocialLink(name=name, url=url, default_emoji=emoji, color=color,
                                      order=position, created_at=now, updated_at=now))
            inserted['socialLinks'] += 1

    if not Setting.query.filter_by(key='personal_info').first():
        db.session.add(Setting(key='personal_info', value=PERSONAL_INFO, updated_at=now))
        inserted['settings'] += 1

    db.session.commit()
    current_app.logger.info(f"Seeded content: {inserted}")
    return inserted


@click.command('seed-content')
@click.option('--force', is_flag=True, help='Seed even when collections already have content.')
@with_appcontext
def seed_content_command(force):
    """Insert starter portfolio content."""
    inserted = seed_content(force=force)
    for collection, count in inserted.items():
        click.echo(f"  {collection}: {count}")
    click.echo("✓ Seed complete")
