# app.py: scheduler JSON API

from datetime import datetime as _dt, timezone as _tz
from typing import Any, Dict, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS
from pydantic import ValidationError

from calendar_service import SchedulingService
from event_store import InMemoryEventStore, SqlEventStore
from scheduler.config import SchedulerConfig, load_config


def build_service(config: Optional[SchedulerConfig] = None) -> SchedulingService:
    """In-memory store by default; a SQL store when a database URL is configured."""
    config = config or load_config()
    if config.database_url and config.database_url != "sqlite://":
        store = SqlEventStore(config.utc_offset_minutes, url=config.database_url)
    else:
        store = InMemoryEventStore(config.utc_offset_minutes)
    return SchedulingService(store, config)


# ---------- helpers ----------
def _dump(model, **kw) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, **kw)


def _invalid(e: Exception):
    if isinstance(e, ValidationError):
        details = [
            {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
            for err in e.errors()
        ]
    else:
        details = str(e)
    return jsonify({"error": "Invalid request", "details": details}), 400


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=False) if request.data else {}
    return data if isinstance(data, dict) else {}


def create_app(service: Optional[SchedulingService] = None) -> Flask:
    app = Flask(__name__)
    CORS(app)
    svc = service or build_service()
    app.config["SCHEDULING_SERVICE"] = svc

    @app.get('/health')
    def health():
        return jsonify({'ok': True, 'service': 'scheduler', 'time': _dt.now(_tz.utc).isoformat()})

    # JSON/error handler for bad JSON bodies
    @app.errorhandler(400)
    def handle_400(err):
        return jsonify({'error': 'Bad Request', 'details': str(err)}), 400

    @app.errorhandler(415)
    def handle_415(err):
        return jsonify({'error': 'Unsupported Media Type', 'details': 'Request body must be JSON'}), 415

    @app.post('/analyze')
    def analyze():
        data = _body()
        text = data.get('request') or data.get('message') or ''
        if not isinstance(text, str) or not text.strip():
            return jsonify({'error': 'No request provided'}), 400
        intent = svc.analyze_request(text)
        return jsonify(_dump(intent))

    @app.get('/events')
    def list_events():
        date_str = request.args.get('date')
        try:
            if date_str:
                return jsonify(_dump(svc.events_for_date(date_str)))
        except ValueError as e:
            return _invalid(e)
        events = svc.list_events()
        return jsonify({'count': len(events), 'events': [_dump(e) for e in events]})

    @app.get('/events/<event_id>')
    def get_event(event_id: str):
        event = svc.get_event(event_id)
        if not event:
            return jsonify({'error': f'Event with ID "{event_id}" not found'}), 404
        return jsonify(_dump(event))

    @app.post('/events')
    def create_event():
        data = _body()
        try:
            event = svc.book_event(
                data.get('title') or '',
                data.get('startTime') or data.get('start_time'),
                data.get('endTime') or data.get('end_time'),
            )
        except (ValidationError, ValueError) as e:
            return _invalid(e)
        return jsonify({
            'success': True,
            'eventId': event.id,
            'message': f'Successfully created calendar event "{event.title}"',
            'event': _dump(event),
        }), 201

    @app.delete('/events/<event_id>')
    def delete_event(event_id: str):
        event = svc.get_event(event_id)
        if not event or not svc.delete_event(event_id):
            return jsonify({'deleted': False, 'error': f'Event with ID "{event_id}" not found'}), 404
        return jsonify({'deleted': True, 'message': f'Successfully deleted calendar event "{event.title}"'})

    @app.delete('/events')
    def clear_events():
        svc.clear()
        return jsonify({'cleared': True})

    @app.post('/slots/best')
    def best_slot():
        data = _body()
        duration = data.get('durationMinutes', data.get('duration'))
        try:
            result = svc.find_best_slot(
                data.get('date'),
                duration,
                preferred_time=data.get('preferredTime'),
                is_fatigued=data.get('isFatigued') or False,
            )
        except (ValidationError, ValueError) as e:
            return _invalid(e)
        return jsonify(_dump(result, exclude_none=True))

    @app.post('/schedule')
    def schedule():
        data = _body()
        text = data.get('request') or data.get('message') or ''
        if not isinstance(text, str) or not text.strip():
            return jsonify({'error': 'No request provided'}), 400
        print("NL_QUERY:", text)
        try:
            outcome = svc.schedule_request(text)
        except (ValidationError, ValueError) as e:
            return _invalid(e)
        status = 201 if outcome.event else 409
        return jsonify(_dump(outcome, exclude_none=True)), status

    return app


if __name__ == '__main__':
    create_app().run(debug=True)
