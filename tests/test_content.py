import io
import pytest
from app import create_app
from extensions import db
from models import Project, SocialLink
from migrations.seed_content import seed_content
from utils.data import (
    create_project, update_project, list_projects, create_skill, list_skills,
    create_experience, list_experience, upsert_setting, get_setting,
    create_social_link, reorder_social_links, list_social_links, delete_project
)
from utils.errors import ValidationError, NotFoundError


def _project(title, order, featured=False):
    return create_project({'title': title, 'description': f'{title} description',
                           'order': order, 'featured': featured})


def _link(name):
    return create_social_link({'name': name, 'url': f'https://{name.lower()}.example.com',
                               'defaultEmoji': '🔗'})


class TestContentStore:

    def test_projects_sorted_by_order(self, ctx):
        _project('Third', 3)
        _project('First', 1, featured=True)
        _project('Second', 2)

        assert [p.title for p in list_projects()] == ['First', 'Second', 'Third']
        assert [p.title for p in list_projects(featured_only=True)] == ['First']

    def test_create_requires_fields(self, ctx):
        with pytest.raises(ValidationError):
            create_project({'title': 'No description'})
        assert Project.query.count() == 0

    def test_partial_update(self, ctx):
        project = create_project({'title': 'Site', 'description': 'A site',
                                  'techStack': 'Flask, SQLAlchemy'})

        update_project(project.id, {'featured': True})

        updated = db.session.get(Project, project.id)
        assert updated.featured is True
        assert updated.title == 'Site'
        assert updated.tech_stack == ['Flask', 'SQLAlchemy']

    def test_missing_record(self, ctx):
        with pytest.raises(NotFoundError):
            update_project('missing', {'title': 'x'})
        with pytest.raises(NotFoundError):
            delete_project('missing')

    def test_skill_level_is_clamped(self, ctx):
        skill = create_skill({'name': 'Python', 'category': 'backend', 'level': 9})
        assert skill.level == 5
        assert [s.name for s in list_skills(category='backend')] == ['Python']

    def test_experience_latest_first(self, ctx):
        for order, title in [(1, 'Junior'), (2, 'Senior')]:
            create_experience({'type': 'work', 'title': title, 'organization': 'Acme',
                               'startDate': '2020-01', 'description': 'Work', 'order': order})
        create_experience({'type': 'education', 'title': 'BSc', 'organization': 'Uni',
                           'startDate': '2015-09', 'description': 'Study'})

        assert [e.title for e in list_experience('work')] == ['Senior', 'Junior']
        assert [e.title for e in list_experience('education')] == ['BSc']

    def test_experience_type_checked(self, ctx):
        with pytest.raises(ValidationError):
            create_experience({'type': 'hobby', 'title': 'x', 'organization': 'y',
                               'startDate': '2020', 'description': 'z'})

    def test_setting_upsert(self, ctx):
        upsert_setting('personal_info', {'name': 'Ada'})
        upsert_setting('personal_info', {'name': 'Ada Lovelace'})

        assert get_setting('personal_info') == {'name': 'Ada Lovelace'}
        assert get_setting('missing', 'fallback') == 'fallback'

    def test_social_links_append_and_reorder(self, ctx):
        github, linkedin, twitter = _link('GitHub'), _link('LinkedIn'), _link('Twitter')
        assert [github.order, linkedin.order, twitter.order] == [1, 2, 3]

        reorder_social_links([twitter.id, github.id, 'unknown'])

        assert [link.name for link in list_social_links()] == ['Twitter', 'GitHub', 'LinkedIn']
        assert db.session.get(SocialLink, twitter.id).order == 1

    def test_seed_fills_empty_store_once(self, ctx):
        first = seed_content()
        second = seed_content()

        assert first['projects'] > 0
        assert second == {'projects': 0, 'skills': 0, 'experience': 0, 'socialLinks': 0, 'settings': 0}
        assert get_setting('personal_info')['name']


class TestPublicApi:

    def test_portfolio_bundle(self, app, client):
        with app.app_context():
            seed_content()

        data = client.get('/api/portfolio').get_json()

        assert data['personalInfo']['title'] == 'Full Stack Developer'
        assert [p['order'] for p in data['projects']] == sorted(p['order'] for p in data['projects'])
        assert set(data['experience']) == {'work', 'education'}
        assert data['socialLinks'][0]['name'] == 'GitHub'

    def test_featured_filter(self, app, client):
        with app.app_context():
            _project('Featured', 1, featured=True)
            _project('Plain', 2)

        data = client.get('/api/projects?featured=true').get_json()

        assert [p['title'] for p in data] == ['Featured']

    def test_skills_grouped_by_category(self, app, client):
        with app.app_context():
            create_skill({'name': 'Flask', 'category': 'backend', 'level': 4, 'order': 2})
            create_skill({'name': 'React', 'category': 'frontend', 'level': 5, 'order': 1})
            create_skill({'name': 'Python', 'category': 'backend', 'level': 5, 'order': 1})

        data = client.get('/api/skills?grouped=1').get_json()

        assert set(data) == {'backend', 'frontend'}
        assert [s['name'] for s in data['backend']] == ['Python', 'Flask']
        assert [s['name'] for s in data['frontend']] == ['React']

    def test_setting_endpoint(self, client):
        assert client.get('/api/settings/personal_info').get_json() == {'key': 'personal_info', 'value': None}

    def test_security_headers(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.headers['X-Content-Type-Options'] == 'nosniff'

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nope')
        assert response.status_code == 404
        assert response.get_json()['success'] is False


class TestAdminApi:

    def test_requires_login(self, client):
        assert client.post('/admin/api/projects', json={'title': 'x'}).status_code == 401
        assert client.put('/admin/api/settings/theme', json={'value': 'dark'}).status_code == 401

    def test_login_rejects_bad_password(self, client):
        response = client.post('/auth/login', json={'username': 'admin', 'password': 'wrong'})
        assert response.status_code == 401

    def test_session_status(self, admin_client):
        assert admin_client.get('/auth/me').get_json() == {'authenticated': True, 'username': 'admin'}
        admin_client.post('/auth/logout')
        assert admin_client.get('/auth/me').get_json() == {'authenticated': False}

    def test_project_crud(self, admin_client):
        created = admin_client.post('/admin/api/projects', json={
            'title': 'Portfolio', 'description': 'This site', 'techStack': ['Flask']
        })
        assert created.status_code == 201
        project_id = created.get_json()['project']['id']

        edited = admin_client.put(f'/admin/api/projects/{project_id}', json={'liveUrl': 'https://example.com'})
        assert edited.get_json()['project']['liveUrl'] == 'https://example.com'
        assert edited.get_json()['project']['title'] == 'Portfolio'

        assert admin_client.delete(f'/admin/api/projects/{project_id}').status_code == 200
        assert admin_client.delete(f'/admin/api/projects/{project_id}').status_code == 404

    def test_validation_error_is_400(self, admin_client):
        response = admin_client.post('/admin/api/skills', json={'name': 'Go'})
        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'error': "'category' is required"}

    def test_setting_requires_value(self, admin_client):
        assert admin_client.put('/admin/api/settings/theme', json={}).status_code == 400
        response = admin_client.put('/admin/api/settings/theme', json={'value': 'dark'})
        assert response.get_json()['setting']['value'] == 'dark'

    def test_social_link_reorder(self, admin_client):
        ids = []
        for name in ('GitHub', 'LinkedIn'):
            response = admin_client.post('/admin/api/social-links', json={
                'name': name, 'url': 'https://example.com', 'defaultEmoji': '🔗'
            })
            ids.append(response.get_json()['socialLink']['id'])

        response = admin_client.post('/admin/api/social-links/reorder', json={'ids': list(reversed(ids))})

        assert [link['name'] for link in response.get_json()['socialLinks']] == ['LinkedIn', 'GitHub']


class TestUploadLimit:

    def test_request_cap_follows_file_size_override(self, tmp_path):
        app = create_app('testing', {'UPLOAD_FOLDER': str(tmp_path), 'MAX_FILE_SIZE': 1024})
        assert app.config['MAX_CONTENT_LENGTH'] == 1024 + 1024 * 1024

    def test_explicit_cap_is_kept(self, tmp_path):
        app = create_app('testing', {'UPLOAD_FOLDER': str(tmp_path), 'MAX_FILE_SIZE': 1024,
                                     'MAX_CONTENT_LENGTH': 4096})
        assert app.config['MAX_CONTENT_LENGTH'] == 4096

    def test_oversized_request_is_413(self, tmp_path):
        app = create_app('testing', {'UPLOAD_FOLDER': str(tmp_path), 'MAX_FILE_SIZE': 1024,
                                     'MAX_CONTENT_LENGTH': 4096})
        client = app.test_client()
        client.post('/auth/login', json={'username': 'admin', 'password': 'test-password'})

        response = client.post('/api/upload', data={
            'file': (io.BytesIO(b'\x00' * 8192), 'big.png'),
            'section': 'profile',
        }, content_type='multipart/form-data')

        assert response.status_code == 413
        assert response.get_json()['success'] is False
