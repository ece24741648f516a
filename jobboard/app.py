import json
import logging

import click
from flask import Flask, jsonify
from flask_cors import CORS
from flasgger import Swagger

from jobboard import config
from jobboard.auth import TokenAuthority
from jobboard.db import make_engine
from jobboard.errors import register_error_handlers
from jobboard.log import configure_logging
from jobboard.references import ReferenceMaintainer
from jobboard.routes.application_routes import bp as application_bp
from jobboard.routes.job_routes import bp as job_bp
from jobboard.routes.user_routes import bp as user_bp
from jobboard.store import EntityStore

log = logging.getLogger(__name__)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.update(
        DB_URL=config.DB_URL,
        SECRET_KEY=config.SECRET_KEY,
        CORS_ORIGINS=config.CORS_ORIGINS,
        STORE_TIMEOUT_SECONDS=config.STORE_TIMEOUT_SECONDS,
        TOKEN_MAX_AGE_SECONDS=config.TOKEN_MAX_AGE_SECONDS,
        ALLOW_OWNER_APPLY=config.ALLOW_OWNER_APPLY,
        LOG_LEVEL=config.LOG_LEVEL,
    )
    if overrides:
        app.config.update(overrides)
    configure_logging(app)

    CORS(
        app,
        origins=app.config["CORS_ORIGINS"],
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    store = EntityStore(make_engine(app.config["DB_URL"], app.config["STORE_TIMEOUT_SECONDS"]))
    store.create_schema()
    app.extensions["jobboard.store"] = store
    app.extensions["jobboard.references"] = ReferenceMaintainer(store, app.config["ALLOW_OWNER_APPLY"])
    app.extensions["jobboard.tokens"] = TokenAuthority(app.config["SECRET_KEY"], app.config["TOKEN_MAX_AGE_SECONDS"])

    register_error_handlers(app)
    app.register_blueprint(job_bp)
    app.register_blueprint(application_bp)
    app.register_blueprint(user_bp)

    @app.get("/")
    def index():
        return jsonify({"status": "ok", "message": "Job board API is running"})

    @app.cli.command("reconcile-references")
    def reconcile_references():
        """Rebuild postedJobs, applications and applicants lists from the canonical fields."""
        report = app.extensions["jobboard.references"].reconcile()
        click.echo(json.dumps(report.to_dict()))

    # simple Swagger config (shows at /apidocs)
    Swagger(app, template={
        "info": {"title": "Job Board API", "version": "1.0.0"},
        "basePath": "/",
        "securityDefinitions": {
            "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"},
        },
    })

    log.info("App ready (store: %s)", store.engine.url.render_as_string(hide_password=True))
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=config.PORT, debug=True)
