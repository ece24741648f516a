"""
HTTP tests for /api/applications.
"""

import pytest


@pytest.fixture
def posted(client, register, job_payload):
    """Ann posts a job; returns (job, ann headers)."""
    _, ann = register("Ann")
    job = client.post("/api/jobs", json=job_payload(), headers=ann).get_json()
    return job, ann


class TestApply:
    def test_apply(self, client, register, posted):
        job, _ = posted
        bob, headers = register("Bob")

        resp = client.post("/api/applications", json={"jobId": job["id"], "resumeUrl": "http://cv/bob"}, headers=headers)

        assert resp.status_code == 200
        application = resp.get_json()
        assert application["status"] == "Pending"
        assert application["candidate"] == bob["id"]
        assert application["job"] == job["id"]
        assert client.get("/api/users/me", headers=headers).get_json()["applications"] == [application["id"]]

    def test_apply_twice_conflicts(self, client, register, posted):
        job, _ = posted
        _, headers = register("Bob")
        client.post("/api/applications", json={"jobId": job["id"]}, headers=headers)

        resp = client.post("/api/applications", json={"jobId": job["id"]}, headers=headers)

        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Already applied to this job"
        assert len(client.get(f"/api/jobs/{job['id']}").get_json()["applicants"]) == 1

    def test_apply_to_missing_job(self, client, register):
        _, headers = register("Bob")
        resp = client.post("/api/applications", json={"jobId": 999}, headers=headers)
        assert resp.status_code == 404

    def test_job_id_out_of_range(self, client, register):
        _, headers = register("Bob")
        assert client.post("/api/applications", json={"jobId": 10**30}, headers=headers).status_code == 404
        assert client.post("/api/applications", json={"jobId": str(10**30)}, headers=headers).status_code == 404
        assert client.get(f"/api/applications/{10**30}", headers=headers).status_code == 404
        assert client.get("/api/users/me", headers=headers).get_json()["applications"] == []

    def test_job_id_required(self, client, register):
        _, headers = register("Bob")
        resp = client.post("/api/applications", json={}, headers=headers)
        assert resp.status_code == 400
        assert "jobId" in resp.get_json()["details"]

    def test_requires_token(self, client, posted):
        job, _ = posted
        assert client.post("/api/applications", json={"jobId": job["id"]}).status_code == 401

    def test_owner_apply_toggle(self, app, client, posted):
        job, ann = posted
        app.extensions["jobboard.references"].allow_owner_apply = False

        resp = client.post("/api/applications", json={"jobId": job["id"]}, headers=ann)

        assert resp.status_code == 403


class TestReadApplications:
    def test_list_mine_newest_first_with_job(self, client, register, job_payload, posted):
        first_job, ann = posted
        second_job = client.post("/api/jobs", json=job_payload(title="Second"), headers=ann).get_json()
        _, bob = register("Bob")
        client.post("/api/applications", json={"jobId": first_job["id"]}, headers=bob)
        client.post("/api/applications", json={"jobId": second_job["id"]}, headers=bob)

        applications = client.get("/api/applications", headers=bob).get_json()

        assert [a["job"]["title"] for a in applications] == ["Second", "Backend Engineer"]
        assert client.get("/api/applications", headers=ann).get_json() == []

    def test_read_by_candidate_and_owner_only(self, client, register, posted):
        job, ann = posted
        _, bob = register("Bob")
        _, eve = register("Eve")
        application = client.post("/api/applications", json={"jobId": job["id"]}, headers=bob).get_json()
        url = f"/api/applications/{application['id']}"

        as_bob = client.get(url, headers=bob)
        as_ann = client.get(url, headers=ann)
        as_eve = client.get(url, headers=eve)

        assert as_bob.status_code == 200
        assert as_bob.get_json()["candidate"]["name"] == "Bob"
        assert as_bob.get_json()["job"]["id"] == job["id"]
        assert as_ann.status_code == 200
        assert as_eve.status_code == 403

    def test_read_missing(self, client, register):
        _, headers = register("Bob")
        assert client.get("/api/applications/999", headers=headers).status_code == 404

    def test_dangling_after_job_deleted(self, client, register, posted):
        job, ann = posted
        _, bob = register("Bob")
        application = client.post("/api/applications", json={"jobId": job["id"]}, headers=bob).get_json()
        client.delete(f"/api/jobs/{job['id']}", headers=ann)
        url = f"/api/applications/{application['id']}"

        assert client.get(url, headers=bob).get_json()["job"] is None
        assert client.get("/api/applications", headers=bob).get_json()[0]["job"] is None
        assert client.get(url, headers=ann).status_code == 403
        assert client.put(f"{url}/status", json={"status": "Accepted"}, headers=ann).status_code == 404


class TestStatus:
    def test_owner_sets_status(self, client, register, posted):
        job, ann = posted
        _, bob = register("Bob")
        application = client.post("/api/applications", json={"jobId": job["id"]}, headers=bob).get_json()

        resp = client.put(f"/api/applications/{application['id']}/status", json={"status": "Rejected"}, headers=ann)

        assert resp.status_code == 200
        assert resp.get_json()["status"] == "Rejected"

    def test_invalid_status_leaves_record(self, client, register, posted):
        job, ann = posted
        _, bob = register("Bob")
        application = client.post("/api/applications", json={"jobId": job["id"]}, headers=bob).get_json()
        url = f"/api/applications/{application['id']}"

        resp = client.put(f"{url}/status", json={"status": "Hired"}, headers=ann)

        assert resp.status_code == 400
        assert "status" in resp.get_json()["details"]
        assert client.get(url, headers=bob).get_json()["status"] == "Pending"

    def test_candidate_cannot_set_status(self, client, register, posted):
        job, _ = posted
        _, bob = register("Bob")
        application = client.post("/api/applications", json={"jobId": job["id"]}, headers=bob).get_json()

        resp = client.put(f"/api/applications/{application['id']}/status", json={"status": "Accepted"}, headers=bob)

        assert resp.status_code == 403


class TestScenario:
    def test_apply_accept_and_reapply(self, client, register):
        _, u1 = register("U1", email="a@x.com")
        job = client.post("/api/jobs", json={
            "title": "Backend Engineer",
            "companyName": "X",
            "location": "Remote",
            "monthlySalary": 4000,
            "jobType": "Full Time",
            "description": "APIs",
        }, headers=u1).get_json()
        _, u2 = register("U2", email="b@x.com")

        application = client.post("/api/applications", json={"jobId": job["id"]}, headers=u2).get_json()
        assert application["status"] == "Pending"

        accepted = client.put(f"/api/applications/{application['id']}/status", json={"status": "Accepted"}, headers=u1)
        assert accepted.status_code == 200

        seen = client.get(f"/api/applications/{application['id']}", headers=u2).get_json()
        assert seen["status"] == "Accepted"

        again = client.post("/api/applications", json={"jobId": job["id"]}, headers=u2)
        assert again.status_code == 409
        assert again.get_json()["error"] == "conflict"
