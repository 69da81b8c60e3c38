"""Flask application factory for the Iqra scheduling backend."""

import logging
import os
from typing import Any, Optional

from flask import Flask, jsonify

from auth import auth_bp
from scheduling.config import Settings, load_settings
from scheduling.errors import SchedulingError
from scheduling.janitor import SessionJanitor
from scheduling.routes.calendar import calendar_bp
from scheduling.routes.context import EXTENSION_KEY, Services
from scheduling.routes.health import health_bp
from scheduling.routes.schedules import schedules_bp
from scheduling.routes.tasks import tasks_bp
from scheduling.schedule_store import ScheduleStore
from scheduling.services.meet_credentials import MeetCredentialStore, calendar_for_teacher


def build_services(
    settings: Settings,
    db: Any,
    auth_client: Any,
    *,
    bucket: Any = None,
) -> Services:
    """Wire the components around one Firestore client and Auth module."""

    credentials = MeetCredentialStore(db)

    def calendar_for(teacher_id: str):
        return calendar_for_teacher(teacher_id, settings=settings, credential_store=credentials)

    store = ScheduleStore(
        db,
        calendar_for=calendar_for,
        horizon_weeks=settings.horizon_weeks,
        timezone_name=settings.timezone,
        batch_size=settings.batch_size,
    )
    janitor = SessionJanitor.from_settings(db, settings, bucket=bucket)
    return Services(
        settings=settings,
        db=db,
        auth=auth_client,
        store=store,
        janitor=janitor,
        credentials=credentials,
    )


def create_app(services: Optional[Services] = None) -> Flask:
    """Return the Flask app; Firebase is initialised when ``services`` is omitted."""

    if services is None:
        from iqra.firebase import get_auth, get_bucket, get_db

        settings = load_settings()
        services = build_services(settings, get_db(), get_auth(), bucket=get_bucket())

    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = services

    @app.errorhandler(SchedulingError)
    def handle_scheduling_error(exc: SchedulingError):
        return jsonify(exc.to_dict()), exc.http_status

    for blueprint in (health_bp, auth_bp, schedules_bp, calendar_bp, tasks_bp):
        app.register_blueprint(blueprint)
    return app


if __name__ == "__main__":  # pragma: no cover - dev server entrypoint
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.environ.get("PORT", 10000))
    create_app().run(host="0.0.0.0", port=port)
