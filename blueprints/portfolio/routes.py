"""
Portfolio Routes - Public read endpoints and contact form submission
"""

from flask import request, jsonify, current_app
from extensions import db
from utils.data import (
    list_projects, list_featured_projects, list_skills, skills_by_category,
    list_experience, experience_by_type,
    get_setting, list_social_links, get_portfolio_bundle
)
from utils.errors import ValidationError
from utils.helpers import get_payload, serialize, is_truthy
from utils.messages import submit_contact
from utils.security import check_rate_limit
from . import portfolio_bp


@portfolio_bp.route('/portfolio')
def portfolio():
    """Landing page bundle"""
    return jsonify(get_portfolio_bundle())


@portfolio_bp.route('/projects')
def projects():
    if is_truthy(request.args.get('featured')):
        return jsonify(serialize(list_featured_projects()))
    return jsonify(serialize(list_projects()))


@portfolio_bp.route('/skills')
def skills():
    """Ordered skills; ?grouped=1 returns them keyed by category"""
    if is_truthy(request.args.get('grouped')):
        return jsonify({category: serialize(items) for category, items in skills_by_category().items()})
    return jsonify(serialize(list_skills(category=request.args.get('category') or None)))


@portfolio_bp.route('/experience')
def experience():
    """Work and education, latest first"""
    return jsonify({kind: serialize(items) for kind, items in experience_by_type().items()})


@portfolio_bp.route('/experience/work')
def work_experience():
    return jsonify(serialize(list_experience('work')))


@portfolio_bp.route('/experience/education')
def education():
    return jsonify(serialize(list_experience('education')))


@portfolio_bp.route('/settings/<key>')
def setting(key):
    return jsonify({'key': key, 'value': get_setting(key)})


@portfolio_bp.route('/social-links')
def social_links():
    return jsonify(serialize(list_social_links()))


@portfolio_bp.route('/contact', methods=['POST'])
def contact():
    """Contact form processing - saves to database, then notifies the owner"""
    try:
        payload = get_payload()
    except ValidationError as e:
        return jsonify({'error': e.message}), 400

    # Honeypot spam protection
    if payload.get('website'):
        return jsonify({'success': True, 'message': 'Message sent successfully!'})

    if not check_rate_limit('portfolio_contact'):
        return jsonify({'error': 'Too many requests. Please try again later.'}), 429

    try:
        submit_contact(payload.get('name'), payload.get('email'), payload.get('message'))
    except ValidationError as e:
        return jsonify({'error': e.message}), 400
    except Exception as e:
        current_app.logger.error(f"Contact form error: {str(e)}")
        db.session.rollback()
        return jsonify({'error': 'Failed to send message'}), 500

    return jsonify({'success': True, 'message': 'Message sent successfully!'})
