from __future__ import annotations

import logging
from flask import Blueprint, current_app, g, jsonify

from jobboard.auth import hash_password, login_required, password_matches
from jobboard.errors import Unauthorized, ValidationError
from jobboard.models import User
from jobboard.routes.common import json_body, store, user_to_dict
from jobboard.validation import clean_registration, normalize_email

bp = Blueprint("users", __name__)
log = logging.getLogger(__name__)


def _token_for(user: User) -> str:
    return current_app.extensions["jobboard.tokens"].issue(user.id)


@bp.post("/api/users/register")
def register():
    """
    Register a User
    ---
    tags: [Users]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, email, password]
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string, minLength: 6 }
            mobile: { type: string }
            skills:
              type: array
              items: { type: string }
    responses:
      201:
        description: Registered; returns a bearer token and the user
      400:
        description: Validation error (including an email already in use)
    """
    fields = clean_registration(json_body())
    s = store()
    if s.find_one(User, User.email == fields["email"]) is not None:
        raise ValidationError({"email": "is already in use"})

    user = s.create(User, {
        "name": fields["name"],
        "email": fields["email"],
        "password_hash": hash_password(fields["password"]),
        "mobile": fields["mobile"],
        "skills": fields["skills"],
        "posted_jobs": [],
        "applications": [],
    })
    log.info("User %s registered", user.id)
    return jsonify({"token": _token_for(user), "user": user_to_dict(user)}), 201


@bp.post("/api/users/login")
def login():
    """
    Log in
    ---
    tags: [Users]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string }
            password: { type: string }
    responses:
      200:
        description: Returns a bearer token and the user
      400:
        description: Missing fields
      401:
        description: Invalid credentials
    """
    data = json_body()
    email, password = data.get("email"), data.get("password")
    errors = {}
    if not isinstance(email, str) or not email.strip():
        errors["email"] = "is required"
    if not isinstance(password, str) or not password:
        errors["password"] = "is required"
    if errors:
        raise ValidationError(errors)

    user = store().find_one(User, User.email == normalize_email(email))
    if user is None or not password_matches(user.password_hash, password):
        raise Unauthorized("Invalid credentials")
    return jsonify({"token": _token_for(user), "user": user_to_dict(user)})


@bp.get("/api/users/me")
@login_required
def me():
    """
    Current User
    ---
    tags: [Users]
    security:
      - Bearer: []
    responses:
      200:
        description: The caller, with postedJobs and applications ids
      401:
        description: Missing or invalid token
      404:
        description: Not Found
    """
    return jsonify(user_to_dict(store().get(User, g.user_id)))
