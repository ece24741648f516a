from __future__ import annotations

import logging
from flask import Blueprint, g, jsonify

from jobboard.auth import login_required
from jobboard.errors import ValidationError
from jobboard.guard import require_application_reader, require_status_editor
from jobboard.models import Application, Job, User
from jobboard.query import find_applications_by_candidate
from jobboard.routes.common import application_to_dict, job_to_dict, json_body, references, store, user_summary
from jobboard.validation import clean_status

bp = Blueprint("applications", __name__)
log = logging.getLogger(__name__)


@bp.post("/api/applications")
@login_required
def create_application():
    """
    Apply to a Job
    ---
    tags: [Applications]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [jobId]
          properties:
            jobId: { type: integer }
            resumeUrl: { type: string }
    responses:
      200:
        description: Created application, status Pending
        schema:
          $ref: '#/definitions/Application'
      400:
        description: Validation error
      401:
        description: Missing or invalid token
      403:
        description: Owners may not apply to their own jobs (when configured)
      404:
        description: Job not found
      409:
        description: Already applied to this job
    definitions:
      Application:
        type: object
        properties:
          id: { type: integer }
          job: { type: object }
          candidate: { type: object }
          status: { type: string, enum: [Pending, Accepted, Rejected] }
          resumeUrl: { type: string }
          appliedAt: { type: string, format: date-time }
    """
    data = json_body()
    job_id = data.get("jobId")
    if isinstance(job_id, str) and job_id.strip().isdigit():
        job_id = int(job_id.strip())
    if not isinstance(job_id, int) or isinstance(job_id, bool):
        raise ValidationError({"jobId": "is required and must be an integer id"})
    resume_url = data.get("resumeUrl")
    if resume_url is not None and not isinstance(resume_url, str):
        raise ValidationError({"resumeUrl": "must be a string"})

    application = references().create_application(g.user_id, job_id, resume_url or None)
    return jsonify(application_to_dict(application))


@bp.get("/api/applications")
@login_required
def list_my_applications():
    """
    List the caller's Applications
    ---
    tags: [Applications]
    security:
      - Bearer: []
    responses:
      200:
        description: Applications newest first, job populated (null when deleted)
        schema:
          type: array
          items:
            $ref: '#/definitions/Application'
      401:
        description: Missing or invalid token
    """
    s = store()
    applications = find_applications_by_candidate(s, g.user_id)
    jobs = s.find_many(Job, list({a.job_id for a in applications}))
    return jsonify([
        application_to_dict(a, job=job_to_dict(jobs[a.job_id]) if a.job_id in jobs else None)
        for a in applications
    ])


@bp.get("/api/applications/<int:application_id>")
@login_required
def get_application(application_id: int):
    """
    Get Application by ID
    ---
    tags: [Applications]
    security:
      - Bearer: []
    parameters:
      - name: application_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Application with job and candidate populated
        schema:
          $ref: '#/definitions/Application'
      401:
        description: Missing or invalid token
      403:
        description: Caller is neither the candidate nor the job owner
      404:
        description: Not Found
    """
    s = store()
    application = s.get(Application, application_id)
    job = s.find_by_id(Job, application.job_id)
    require_application_reader(application, job, g.user_id)

    candidate = s.find_by_id(User, application.candidate_id)
    return jsonify(application_to_dict(
        application,
        job=job_to_dict(job) if job is not None else None,
        candidate=user_summary(candidate),
    ))


@bp.put("/api/applications/<int:application_id>/status")
@login_required
def update_status(application_id: int):
    """
    Accept or reject an Application
    ---
    tags: [Applications]
    security:
      - Bearer: []
    parameters:
      - name: application_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [status]
          properties:
            status: { type: string, enum: [Pending, Accepted, Rejected] }
    responses:
      200:
        description: Updated application
        schema:
          $ref: '#/definitions/Application'
      400:
        description: Status outside Pending/Accepted/Rejected
      401:
        description: Missing or invalid token
      403:
        description: Caller does not own the job
      404:
        description: Application or its job not found
    """
    s = store()
    application = s.get(Application, application_id)
    require_status_editor(s.find_by_id(Job, application.job_id), g.user_id)
    status = clean_status(json_body())

    application = s.update(Application, application_id, {"status": status.value})
    log.info("Application %s status set to %s by user %s", application_id, status.value, g.user_id)
    return jsonify(application_to_dict(application))
