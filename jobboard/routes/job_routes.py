from __future__ import annotations

import logging
from typing import Any, Dict, List

from flask import Blueprint, g, jsonify, request

from jobboard.auth import login_required
from jobboard.models import Application, Job, User
from jobboard.query import JobQuery, find_jobs
from jobboard.routes.common import application_to_dict, job_to_dict, json_body, references, store, user_summary
from jobboard.validation import clean_job

bp = Blueprint("jobs", __name__)
log = logging.getLogger(__name__)


def _with_owners(jobs: List[Job]) -> List[Dict[str, Any]]:
    owners = store().find_many(User, list({j.posted_by for j in jobs}))
    return [job_to_dict(j, owner=user_summary(owners.get(j.posted_by))) for j in jobs]


@bp.get("/health")
def health():
    """
    Health Check
    ---
    tags: [Meta]
    responses:
      200:
        description: API and store health
        schema:
          type: object
          properties:
            ok: { type: boolean }
            users: { type: integer }
            jobs: { type: integer }
            applications: { type: integer }
      503:
        description: Store unavailable
    """
    s = store()
    return jsonify({
        "ok": True,
        "users": s.count(User),
        "jobs": s.count(Job),
        "applications": s.count(Application),
    })


@bp.get("/api/jobs")
def list_jobs():
    """
    List Jobs
    ---
    tags: [Jobs]
    parameters:
      - name: title
        in: query
        type: string
        description: Case-insensitive substring of the title
      - name: location
        in: query
        type: string
        description: Case-insensitive substring of the location
      - name: jobType
        in: query
        type: string
        enum: [Full-Time, Part-Time, Internship, Contract, Freelance]
        description: Synonyms such as "Full Time" are accepted
      - name: remoteOffice
        in: query
        type: string
        enum: [Remote, Office, Hybrid]
      - name: skills
        in: query
        type: string
        description: Comma-separated; matches jobs requiring any of them
      - name: minSalary
        in: query
        type: number
      - name: maxSalary
        in: query
        type: number
    responses:
      200:
        description: Matching jobs, newest first, owner name and email populated
        schema:
          type: array
          items:
            $ref: '#/definitions/Job'
      400:
        description: Invalid query parameter
    definitions:
      Job:
        type: object
        properties:
          id: { type: integer }
          title: { type: string }
          companyName: { type: string }
          logoUrl: { type: string }
          companySize: { type: string }
          location: { type: string }
          monthlySalary: { type: number }
          jobType: { type: string }
          remoteOffice: { type: string }
          isRemote: { type: boolean }
          description: { type: string }
          aboutCompany: { type: string }
          additionalInfo: { type: string }
          skillsRequired:
            type: array
            items: { type: string }
          postedBy: { type: object }
          applicants:
            type: array
            items: { type: integer }
          createdAt: { type: string, format: date-time }
    """
    query = JobQuery.from_args(request.args)
    return jsonify(_with_owners(find_jobs(store(), query)))


@bp.get("/api/jobs/user")
@login_required
def list_my_jobs():
    """
    List Jobs posted by the caller
    ---
    tags: [Jobs]
    security:
      - Bearer: []
    parameters:
      - { name: title, in: query, type: string }
      - { name: location, in: query, type: string }
      - { name: jobType, in: query, type: string }
      - { name: remoteOffice, in: query, type: string }
      - { name: skills, in: query, type: string }
      - { name: minSalary, in: query, type: number }
      - { name: maxSalary, in: query, type: number }
    responses:
      200:
        description: The caller's matching jobs, newest first
        schema:
          type: array
          items:
            $ref: '#/definitions/Job'
      401:
        description: Missing or invalid token
    """
    query = JobQuery.from_args(request.args, posted_by=g.user_id)
    jobs = find_jobs(store(), query)
    log.debug("Found %d jobs for user %s", len(jobs), g.user_id)
    return jsonify(_with_owners(jobs))


@bp.get("/api/jobs/<int:job_id>")
def get_job(job_id: int):
    """
    Get Job by ID
    ---
    tags: [Jobs]
    parameters:
      - name: job_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Job with owner and applications populated
        schema:
          $ref: '#/definitions/Job'
      404:
        description: Not Found
    """
    s = store()
    job = s.get(Job, job_id)
    owner = s.find_by_id(User, job.posted_by)
    found = s.find_many(Application, job.applicants or [])
    applicants = [application_to_dict(found[i]) for i in (job.applicants or []) if i in found]
    return jsonify(job_to_dict(job, owner=user_summary(owner), applicants=applicants))


@bp.post("/api/jobs")
@login_required
def create_job():
    """
    Create Job
    ---
    tags: [Jobs]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [title, companyName, location, monthlySalary, jobType, description]
          properties:
            title: { type: string }
            companyName: { type: string }
            logoUrl: { type: string }
            companySize: { type: string, default: "11-50" }
            location: { type: string }
            monthlySalary: { type: number }
            jobType: { type: string }
            remoteOffice: { type: string, enum: [Remote, Office, Hybrid] }
            isRemote: { type: boolean }
            description: { type: string }
            aboutCompany: { type: string }
            additionalInfo: { type: string }
            skillsRequired:
              type: array
              items: { type: string }
    responses:
      201:
        description: Created
        schema:
          $ref: '#/definitions/Job'
      400:
        description: Validation error
      401:
        description: Missing or invalid token
    """
    fields = clean_job(json_body())
    job = references().create_job(g.user_id, fields)
    return jsonify(job_to_dict(job)), 201


@bp.put("/api/jobs/<int:job_id>")
@bp.patch("/api/jobs/<int:job_id>")
@login_required
def update_job(job_id: int):
    """
    Update Job
    ---
    tags: [Jobs]
    security:
      - Bearer: []
    parameters:
      - name: job_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        required: true
        description: Any subset of the Job fields; postedBy, applicants and createdAt are ignored
        schema:
          $ref: '#/definitions/Job'
    responses:
      200:
        description: Updated
        schema:
          $ref: '#/definitions/Job'
      400:
        description: Validation error
      401:
        description: Missing or invalid token
      403:
        description: Caller does not own the job
      404:
        description: Not Found
    """
    job = references().update_job(g.user_id, job_id, json_body())
    return jsonify(job_to_dict(job))


@bp.delete("/api/jobs/<int:job_id>")
@login_required
def delete_job(job_id: int):
    """
    Delete Job
    ---
    tags: [Jobs]
    security:
      - Bearer: []
    parameters:
      - name: job_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Deleted
      401:
        description: Missing or invalid token
      403:
        description: Caller does not own the job
      404:
        description: Not Found
    """
    references().delete_job(g.user_id, job_id)
    return jsonify({"ok": True, "message": "Job removed"})
