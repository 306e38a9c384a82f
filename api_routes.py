"""API routes for the Daily Info Center."""
from __future__ import annotations

import logging

from flask import jsonify, request, send_file
from werkzeug.exceptions import HTTPException

from app_utils import get_current_timestamp, parse_bool, parse_date
from dailynews.errors import (
    ConfigError,
    ConflictError,
    DailyNewsError,
    ExtractionExhausted,
    NoActiveTopicsError,
    NotFoundError,
    ProviderError,
    ValidationError,
)

logger = logging.getLogger("dailynews")


def register_error_handlers(app):
    """Map the error taxonomy onto HTTP statuses with a ``{error, details?}`` body."""

    def _error(message, status, details=None):
        body = {"error": message}
        if details:
            body["details"] = details
        return jsonify(body), status

    @app.errorhandler(ValidationError)
    def _validation(exc):
        return _error(str(exc), 400)

    @app.errorhandler(NotFoundError)
    def _not_found(exc):
        return _error(str(exc), 404)

    @app.errorhandler(ConflictError)
    def _conflict(exc):
        return _error(str(exc), 409)

    @app.errorhandler(NoActiveTopicsError)
    def _no_topics(exc):
        return _error(str(exc), 400)

    @app.errorhandler(ConfigError)
    def _config(exc):
        logger.warning("Configuration error: %s", exc)
        return _error("Service not configured", 503, str(exc))

    @app.errorhandler(ExtractionExhausted)
    def _exhausted(exc):
        attempts = [{"strategy": name, "reason": reason} for name, reason in exc.attempts]
        return jsonify({"error": "Failed to process URL", "details": str(exc.cause or exc), "attempts": attempts}), 422

    @app.errorhandler(ProviderError)
    def _provider(exc):
        logger.warning("Upstream provider error (%s): %s", exc.provider, exc)
        body = {"error": "Upstream provider failed", "details": str(exc), "retryable": exc.retryable}
        return jsonify(body), 502

    @app.errorhandler(DailyNewsError)
    def _generic(exc):
        logger.error("Unhandled application error: %s", exc, exc_info=True)
        return _error("Internal server error", 500, str(exc))

    @app.errorhandler(Exception)
    def _unexpected(exc):
        if isinstance(exc, HTTPException):
            return _error(exc.description or exc.name, exc.code or 500)
        logger.error("Unexpected error: %s", exc, exc_info=True)
        return _error("Internal server error", 500)


def register_routes(app, services):
    """Register all API routes with the Flask app.

    Args:
        app: Flask app instance.
        services: ``dailynews.services.Services`` container.
    """
    store = services.store

    @app.route("/api/health")
    def api_health():
        return jsonify({"status": "ok", "timestamp": get_current_timestamp()})

    @app.route("/api/system-health")
    def api_system_health():
        """Which providers have credentials; never returns key material."""
        settings = services.settings
        return jsonify(
            {
                "status": "ok",
                "providers": settings.configured_providers(),
                "generation_provider": settings.generation_provider,
                "search_provider": settings.search_provider,
                "speech_provider": settings.speech_provider,
                "languages": [language.value for language in settings.languages],
                "timestamp": get_current_timestamp(),
            }
        )

    # -- topics ------------------------------------------------------------

    @app.route("/api/topics", methods=["GET"])
    def api_list_topics():
        return jsonify([topic.to_dict() for topic in store.list_topics()])

    @app.route("/api/topics", methods=["POST"])
    def api_add_topic():
        payload = request.get_json(silent=True) or {}
        name = _required_name(payload, "Topic")
        return jsonify(store.add_topic(name).to_dict()), 201

    @app.route("/api/topics/<int:topic_id>", methods=["PUT"])
    def api_update_topic(topic_id: int):
        name, is_active = _update_fields(request.get_json(silent=True) or {}, "Topic")
        return jsonify(store.update_topic(topic_id, name=name, is_active=is_active).to_dict())

    @app.route("/api/topics/<int:topic_id>", methods=["DELETE"])
    def api_delete_topic(topic_id: int):
        store.delete_topic(topic_id)
        return jsonify({"success": True})

    # -- daily articles ----------------------------------------------------

    @app.route("/api/articles/dates")
    def api_article_dates():
        return jsonify([value.isoformat() for value in store.list_article_dates()])

    @app.route("/api/articles/<string:day>")
    def api_articles_by_date(day: str):
        return jsonify([article.to_dict() for article in store.get_articles_by_date(parse_date(day))])

    @app.route("/api/articles/detail/<int:article_id>")
    def api_article_detail(article_id: int):
        article = store.get_article(article_id)
        if article is None:
            raise NotFoundError("Article not found")
        return jsonify(article.to_dict())

    @app.route("/api/articles/tts/<int:article_id>", methods=["POST"])
    def api_article_tts(article_id: int):
        result = services.speech.synthesize(article_id)
        return jsonify(result.to_dict())

    @app.route("/api/articles/audio/<path:filename>")
    def api_article_audio(filename: str):
        path = services.audio.resolve(filename)
        return send_file(path, mimetype="audio/mpeg")

    @app.route("/api/generate", methods=["POST"])
    def api_generate():
        run = services.article_generator().run()
        return jsonify(run.to_dict())

    # -- social ------------------------------------------------------------

    @app.route("/api/social/interests", methods=["GET"])
    def api_list_interests():
        return jsonify([interest.to_dict() for interest in store.list_interests()])

    @app.route("/api/social/interests", methods=["POST"])
    def api_add_interest():
        payload = request.get_json(silent=True) or {}
        name = _required_name(payload, "Interest")
        return jsonify(store.add_interest(name).to_dict()), 201

    @app.route("/api/social/interests/<int:interest_id>", methods=["PUT"])
    def api_update_interest(interest_id: int):
        name, is_active = _update_fields(request.get_json(silent=True) or {}, "Interest")
        return jsonify(store.update_interest(interest_id, name=name, is_active=is_active).to_dict())

    @app.route("/api/social/interests/<int:interest_id>", methods=["DELETE"])
    def api_delete_interest(interest_id: int):
        store.delete_interest(interest_id)
        return jsonify({"success": True})

    @app.route("/api/social/submit", methods=["POST"])
    def api_social_submit():
        payload = request.get_json(silent=True) or {}
        interest_id = payload.get("interestId", payload.get("interest_id"))
        result = services.social.submit(payload.get("url"), interest_id)
        return jsonify(result.to_dict()), (200 if result.duplicate else 201)

    @app.route("/api/social/dates")
    def api_social_dates():
        return jsonify([value.isoformat() for value in store.list_social_dates()])

    @app.route("/api/social/articles/<string:day>")
    def api_social_articles(day: str):
        return jsonify([article.to_dict() for article in store.get_social_articles_by_date(parse_date(day))])

    @app.route("/api/social/article/<int:article_id>", methods=["GET"])
    def api_social_article(article_id: int):
        article = store.get_social_article(article_id)
        if article is None:
            raise NotFoundError("Article not found")
        return jsonify(article.to_dict())

    @app.route("/api/social/article/<int:article_id>", methods=["DELETE"])
    def api_delete_social_article(article_id: int):
        store.delete_social_article(article_id)
        return jsonify({"success": True})

    @app.route("/api/social/article/<int:article_id>/summary", methods=["POST"])
    def api_social_summary(article_id: int):
        return jsonify(services.social.summarize(article_id).to_dict())


def _required_name(payload, label: str) -> str:
    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{label} name is required")
    return name.strip()


def _update_fields(payload, label: str):
    name = payload.get("name")
    if name is not None and (not isinstance(name, str) or not name.strip()):
        raise ValidationError(f"{label} name is required")
    is_active = parse_bool(payload.get("is_active"))
    if name is None and is_active is None:
        raise ValidationError("Nothing to update: provide name or is_active")
    return (name.strip() if name else None), is_active
