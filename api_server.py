#!/usr/bin/env python3
"""
Flask API server for the Networking Coach application.

Serves template rendering, AI message generation, message history and
usage analytics. History and analytics endpoints require a bearer token;
the database session of an authenticated request is bound to its user.
"""

import re
import sys
import time
from datetime import datetime, timezone
from flask import Flask, jsonify, request, g
from flask_cors import CORS

from networking_coach.config import config
from networking_coach.database import init_db, get_db_session
from networking_coach.auth import (
    require_auth, require_auth_optional,
    create_access_token, create_user, authenticate_user
)
from networking_coach.generate_message import GenerationError, generate_networking_message
from networking_coach.message_templates import (
    MESSAGE_TEMPLATES, MessageData, conversation_starters, render_message
)
from networking_coach.policies import PolicyViolation
from networking_coach.services import AnalyticsService, MessageService, ProfileService

# ========================================
# App Configuration
# ========================================

app = Flask(__name__)
app.config['SECRET_KEY'] = config.SECRET_KEY

# The generation function answers any origin, the rest of the API only known ones
CORS(
    app,
    resources={
        r"/api/*": {"origins": config.ALLOWED_ORIGINS, "supports_credentials": True},
        r"/functions/*": {"origins": "*"},
    },
    allow_headers=config.CORS_ALLOW_HEADERS,
)

# Rate limiting (simple in-memory)
rate_limit_cache = {}


# ========================================
# Utilities
# ========================================

def validate_email(email: str) -> bool:
    """Validate email format."""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def rate_limit():
    """Simple in-memory rate limiter."""
    client_ip = request.remote_addr
    current_time = time.time()

    if client_ip not in rate_limit_cache:
        rate_limit_cache[client_ip] = []

    # Clean old requests
    rate_limit_cache[client_ip] = [
        t for t in rate_limit_cache[client_ip]
        if current_time - t < config.RATE_LIMIT_WINDOW
    ]

    if len(rate_limit_cache[client_ip]) >= config.RATE_LIMIT_MAX_REQUESTS:
        return False

    rate_limit_cache[client_ip].append(current_time)
    return True


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.lower() in ('1', 'true', 'yes')
    return bool(value)


# ========================================
# Request Hooks
# ========================================

@app.before_request
def before_request():
    """Run before each request."""
    # CORS preflights are answered by flask-cors and do not count against the limit
    if request.method != 'OPTIONS' and not rate_limit():
        return jsonify({"error": "Rate limit exceeded. Please wait."}), 429

    g.start_time = time.time()
    g.db = get_db_session()


@app.teardown_request
def teardown_request(exception=None):
    """Clean up database session."""
    db = g.pop('db', None)
    if db is not None:
        if exception:
            db.rollback()
        else:
            try:
                db.commit()
            except Exception as e:
                app.logger.error(f"Commit failed, rolling back: {e}")
                db.rollback()
        db.close()


@app.errorhandler(PolicyViolation)
def handle_policy_violation(error):
    g.db.rollback()
    return jsonify({"error": str(error)}), 403


# ========================================
# Health Check
# ========================================

@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0"
    })


# ========================================
# Authentication Endpoints
# ========================================

@app.route('/api/auth/register', methods=['POST'])
def register():
    """Register a new user."""
    data = _json_body()

    email = (data.get('email') or '').strip()
    password = data.get('password') or ''
    full_name = (data.get('fullName') or data.get('full_name') or '').strip()

    if not email or not validate_email(email):
        return jsonify({"error": "Valid email is required"}), 400

    if len(password) < config.MIN_PASSWORD_LENGTH:
        return jsonify({"error": f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters"}), 400

    user, error = create_user(email, password, full_name)
    if error == "Email already registered":
        return jsonify({"error": error}), 409
    if error:
        return jsonify({"error": error}), 400

    token = create_access_token(user.id, user.email)

    return jsonify({
        "success": True,
        "token": token,
        "user": {
            "id": user.id,
            "email": user.email,
            "fullName": full_name or None,
        }
    }), 201


@app.route('/api/auth/login', methods=['POST'])
def login():
    """Login and get access token."""
    data = _json_body()

    email = (data.get('email') or '').strip()
    password = data.get('password') or ''

    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    user, error = authenticate_user(email, password)
    if error:
        return jsonify({"error": error}), 401

    token = create_access_token(user.id, user.email)

    return jsonify({
        "success": True,
        "token": token,
        "user": {
            "id": user.id,
            "email": user.email,
        }
    })


@app.route('/api/auth/me', methods=['GET'])
@require_auth
def get_current_user():
    """Get current authenticated user."""
    return jsonify(ProfileService(g.db, g.current_user).to_dict())


@app.route('/api/auth/profile', methods=['PUT'])
@require_auth
def update_profile():
    """Update the current user's profile."""
    data = _json_body()

    email = data.get('email')
    if email is not None and email and not validate_email(email):
        return jsonify({"error": "Invalid email format"}), 400

    service = ProfileService(g.db, g.current_user)
    service.update(full_name=data.get('fullName'), email=email)

    return jsonify({"success": True, "profile": service.to_dict()})


# ========================================
# Templates Endpoints
# ========================================

@app.route('/api/templates', methods=['GET'])
def get_templates():
    """List the available message types."""
    return jsonify({
        "templates": [{
            "messageType": key,
            "title": template.title,
            "description": template.description,
        } for key, template in MESSAGE_TEMPLATES.items()],
        "total": len(MESSAGE_TEMPLATES),
    })


@app.route('/api/templates/render', methods=['POST'])
def render_template_message():
    """Fill a static template with the form data."""
    try:
        message = render_message(MessageData.from_payload(_json_body()))
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    return jsonify({"success": True, "message": message})


@app.route('/api/conversation-starters', methods=['GET'])
def get_conversation_starters():
    """Questions worth asking in an informational interview."""
    limit = request.args.get('limit', 6, type=int)
    return jsonify({"starters": conversation_starters(limit)})


# ========================================
# Message Generation
# ========================================

@app.route('/functions/v1/generate-networking-message', methods=['POST'])
@app.route('/api/generate', methods=['POST'])
@require_auth_optional
def generate_message():
    """
    Generate a message with the language model.

    Answers ``{"success": true, "message": ...}`` or
    ``{"success": false, "error": ...}``. With ``save: true`` and a valid
    token the result is also stored in the caller's history.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "error": "Request body must be a JSON object"}), 400

    try:
        message_data = MessageData.from_payload(data)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    try:
        message = generate_networking_message(message_data)
    except GenerationError as e:
        app.logger.error(f"Error in generate-networking-message: {e.message}")
        return jsonify({"success": False, "error": e.message}), e.status_code
    except Exception as e:
        app.logger.exception("Error in generate-networking-message")
        return jsonify({"success": False, "error": str(e)}), 500

    result = {"success": True, "message": message}

    if _as_bool(data.get('save')) and g.current_user:
        saved = MessageService(g.db, g.current_user).create(message_data, message)
        result["saved"] = saved.to_dict()

    return jsonify(result)


# ========================================
# Message History Endpoints
# ========================================

@app.route('/api/messages', methods=['GET'])
@require_auth
def get_messages():
    """Get the current user's messages, newest first."""
    service = MessageService(g.db, g.current_user)

    messages = service.get_all(
        favorites_only=_as_bool(request.args.get('favorites', False)),
        message_type=request.args.get('type'),
        skip=request.args.get('skip', 0, type=int),
        limit=request.args.get('limit', type=int),
    )

    return jsonify({
        "messages": [m.to_dict() for m in messages],
        "total": len(messages),
    })


@app.route('/api/messages', methods=['POST'])
@require_auth
def save_message():
    """
    Save a message to history.

    ``generatedMessage`` is stored as given; without it the static
    template for ``messageType`` is rendered and stored.
    """
    data = _json_body()

    try:
        message_data = MessageData.from_payload(data)
        text = data.get('generatedMessage') or render_message(message_data)
        if not isinstance(text, str):
            raise ValueError("generatedMessage must be a string")
        message = MessageService(g.db, g.current_user).create(message_data, text)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"success": True, "message": message.to_dict()}), 201


@app.route('/api/messages/<message_id>', methods=['GET'])
@require_auth
def get_message(message_id):
    """Get one message (recorded as viewed)."""
    message = MessageService(g.db, g.current_user).view(message_id)
    if not message:
        return jsonify({"error": "Message not found"}), 404

    return jsonify({"message": message.to_dict()})


@app.route('/api/messages/<message_id>', methods=['PATCH'])
@require_auth
def update_message(message_id):
    """Edit a saved message."""
    data = _json_body()

    update_data = {}
    field_map = {
        'generatedMessage': 'generated_message',
        'recipientName': 'recipient_name',
        'recipientTitle': 'recipient_title',
        'company': 'company',
        'purpose': 'purpose',
        'isFavorite': 'is_favorite',
    }

    for camel, snake in field_map.items():
        if camel not in data:
            continue
        value = data[camel]
        if snake != 'is_favorite' and value is not None and not isinstance(value, str):
            return jsonify({"error": f"{camel} must be a string"}), 400
        update_data[snake] = value

    for required in ('generated_message', 'recipient_name', 'company'):
        if required in update_data and not (update_data[required] or '').strip():
            return jsonify({"error": f"{required} cannot be empty"}), 400

    message = MessageService(g.db, g.current_user).update(message_id, **update_data)
    if not message:
        return jsonify({"error": "Message not found"}), 404

    return jsonify({"success": True, "message": message.to_dict()})


@app.route('/api/messages/<message_id>', methods=['DELETE'])
@require_auth
def delete_message(message_id):
    """Delete a message."""
    if not MessageService(g.db, g.current_user).delete(message_id):
        return jsonify({"error": "Message not found"}), 404

    return jsonify({"success": True})


@app.route('/api/messages/<message_id>/favorite', methods=['POST'])
@require_auth
def toggle_favorite(message_id):
    """Add to or remove from favorites."""
    message = MessageService(g.db, g.current_user).toggle_favorite(message_id)
    if not message:
        return jsonify({"error": "Message not found"}), 404

    return jsonify({"success": True, "isFavorite": message.is_favorite})


@app.route('/api/messages/<message_id>/copy', methods=['POST'])
@require_auth
def copy_message(message_id):
    """Record a copy and hand back the text to put on the clipboard."""
    message = MessageService(g.db, g.current_user).mark_copied(message_id)
    if not message:
        return jsonify({"error": "Message not found"}), 404

    return jsonify({"success": True, "message": message.generated_message})


# ========================================
# Analytics
# ========================================

@app.route('/api/analytics', methods=['GET'])
@require_auth
def get_analytics():
    """Get usage statistics for the current user."""
    service = AnalyticsService(g.db, g.current_user)
    limit = request.args.get('limit', 20, type=int)

    return jsonify({
        "stats": service.get_stats(),
        "recent": [{
            "id": event.id,
            "messageId": event.message_id,
            "actionType": event.action_type,
            "createdAt": event.created_at.isoformat() if event.created_at else None,
        } for event in service.recent(limit)],
    })


# ========================================
# Main Entry Point
# ========================================

def run(host: str = config.API_HOST, port: int = config.API_PORT, debug: bool = config.FLASK_DEBUG) -> None:
    """Create tables if needed and start the development server."""
    init_db()

    for problem in config.validate():
        app.logger.warning(f"Config: {problem}")

    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Networking Coach API Server')
    parser.add_argument('--debug', action='store_true', help='Run in debug mode')
    parser.add_argument('--port', type=int, default=config.API_PORT, help='Port to run on')
    parser.add_argument('--host', default=config.API_HOST, help='Host to bind to')
    parser.add_argument('--init-db', action='store_true', help='Initialize database')
    args = parser.parse_args()

    if args.init_db:
        init_db()
        print("Database initialized!")
        sys.exit(0)

    run(host=args.host, port=args.port, debug=args.debug or config.FLASK_DEBUG)
