"""
Shared fixtures: an app on a throwaway SQLite file and helpers for users and jobs.
"""

import pytest

from jobboard.app import create_app
from jobboard.auth import hash_password
from jobboard.models import User


@pytest.fixture
def app(tmp_path):
    return create_app({
        "TESTING": True,
        "DB_URL": f"sqlite:///{tmp_path / 'jobboard.db'}",
        "SECRET_KEY": "test-secret",
        "CORS_ORIGINS": ["http://localhost:3000"],
        "ALLOW_OWNER_APPLY": True,
    })


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["jobboard.store"]


@pytest.fixture
def refs(app):
    return app.extensions["jobboard.references"]


@pytest.fixture
def make_user(store):
    """Insert a user straight into the store."""

    def _make(name="Ann", email=None, skills=None):
        return store.create(User, {
            "name": name,
            "email": email or f"{name.lower()}@example.com",
            "password_hash": hash_password("secret123"),
            "mobile": None,
            "skills": skills or [],
            "posted_jobs": [],
            "applications": [],
        })

    return _make


@pytest.fixture
def job_fields():
    """Cleaned job column values, as the routes hand them to the reference maintainer."""

    def _fields(**overrides):
        fields = {
            "title": "Backend Engineer",
            "company_name": "Acme",
            "company_size": "11-50",
            "location": "Berlin",
            "monthly_salary": 4000.0,
            "job_type": "Full-Time",
            "remote_office": "Office",
            "is_remote": False,
            "description": "Build APIs",
            "about_company": "Acme",
            "skills_required": ["Python"],
        }
        fields.update(overrides)
        return fields

    return _fields


@pytest.fixture
def register(client):
    """Register through the API; returns (user dict, auth headers)."""

    def _register(name="Ann", email=None, password="secret123"):
        resp = client.post("/api/users/register", json={
            "name": name,
            "email": email or f"{name.lower()}@example.com",
            "password": password,
        })
        assert resp.status_code == 201, resp.get_json()
        body = resp.get_json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register


@pytest.fixture
def job_payload():
    def _payload(**overrides):
        payload = {
            "title": "Backend Engineer",
            "companyName": "Acme",
            "location": "Berlin",
            "monthlySalary": 4000,
            "jobType": "Full Time",
            "remoteOffice": "Office",
            "description": "Build APIs",
            "skillsRequired": ["Python", "Flask"],
        }
        payload.update(overrides)
        return payload

    return _payload
