# server.py
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

import llm
import poster
import steam
from config import Settings
from heuristics import empty_summary

logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).resolve().parent / "public"
SAMPLE_SIZE = 12
DEFAULT_NUM = 200


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or Settings.from_env()

    app = Flask(__name__, static_folder=str(PUBLIC_DIR), static_url_path="")
    app.config["SETTINGS"] = settings
    CORS(app)

    @app.route("/", methods=["GET"])
    def index():
        return app.send_static_file("index.html")

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "ai": settings.ai_enabled})

    @app.route("/api/search", methods=["GET"])
    def search():
        term = request.args.get("term", "").strip()
        if not term:
            return jsonify({"results": []})
        try:
            games = steam.search_games(term, timeout=settings.steam_timeout)
        except Exception:
            logger.exception("Search failed for %r", term)
            return _error("Search failed.", 500)
        return jsonify({"results": [g.to_dict() for g in games]})

    @app.route("/api/reviews", methods=["GET"])
    def reviews():
        app_id = request.args.get("appId", "").strip()
        if not app_id:
            return _error("Missing appId.", 400)
        if not (app_id.isascii() and app_id.isdigit()):
            return _error("Invalid appId.", 400)
        try:
            num = int(request.args.get("num", DEFAULT_NUM))
        except ValueError:
            return _error("num must be an integer.", 400)
        num = steam.clamp_count(num)
        lang = steam.normalize_language(request.args.get("lang"))

        try:
            found = steam.fetch_reviews(app_id, max_count=num, lang=lang, timeout=settings.steam_timeout)
            if not found:
                return jsonify({
                    "count": 0,
                    "appId": app_id,
                    "lang": lang,
                    "summary": empty_summary(),
                    "sample": [],
                    "source": "heuristic",
                })

            summary, source = llm.summarise_reviews(
                found, app_id, api_key=settings.api_key, model_name=settings.text_model
            )
        except Exception:
            logger.exception("Review fetch failed for app %s", app_id)
            return _error("Review fetch failed.", 500)

        logger.info("App %s: %d review(s) summarised via %s", app_id, len(found), source)
        return jsonify({
            "count": len(found),
            "appId": app_id,
            "lang": lang,
            "summary": summary,
            "sample": [rv.to_sample() for rv in found[:SAMPLE_SIZE]],
            "source": source,
        })

    @app.route("/api/art", methods=["POST"])
    def art():
        if not settings.ai_enabled:
            logger.error("No Gemini API key configured for /api/art")
            return _error("Server missing AI key.", 500)

        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            return _error("Expected a JSON object.", 400)
        req = poster.PosterRequest.from_payload(body)
        if not req.name:
            return _error("Missing game name.", 400)

        try:
            image = poster.generate_poster(req, settings.api_key, model=settings.image_model)
        except poster.PosterError:
            logger.exception("Poster for %r came back without an image", req.name)
            return _error("Image generation failed.", 500)
        except Exception:
            logger.exception("AI art generation failed for %r", req.name)
            return _error("AI art generation failed.", 500)

        return jsonify({"appId": req.app_id, "name": req.name, "imageUrl": image.data_url})

    return app
