#!/usr/bin/env python3
"""
Competitor Watcher REST API Server
HTTP endpoints the React frontend uses to render report HTML with glossary tooltips
"""

import logging
from dataclasses import asdict
from typing import Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from .core.annotator import GlossaryAnnotator
from .core.config import CompWatchConfig, default_config, setup_logging
from .core.glossary import GlossaryStore
from .core.render import RenderSurface
from .core.sanitizer import HTMLSanitizer

logger = logging.getLogger(__name__)

# Global components (initialized once)
config: CompWatchConfig = default_config
glossary_store: Optional[GlossaryStore] = None
sanitizer: Optional[HTMLSanitizer] = None
annotator: Optional[GlossaryAnnotator] = None


def initialize_components(app_config: Optional[CompWatchConfig] = None,
                          store: Optional[GlossaryStore] = None) -> bool:
    """Initialize shared read-only components"""
    global config, glossary_store, sanitizer, annotator

    config = app_config or default_config
    try:
        glossary_store = store if store is not None else GlossaryStore.from_config(config.glossary)
        logger.info(f"Glossary store ready: {', '.join(glossary_store.locales)}")

        sanitizer = HTMLSanitizer(config.sanitizer)
        annotator = GlossaryAnnotator(glossary_store, config=config.annotator)
        return True

    except Exception as e:
        logger.error(f"Failed to initialize components: {e}")
        return False


def _json_body():
    """Parsed JSON object body or None"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _payload_too_large(html: str) -> bool:
    return len(html.encode("utf-8")) > config.api.max_payload_kb * 1024


def create_app(app_config: Optional[CompWatchConfig] = None,
               store: Optional[GlossaryStore] = None) -> Flask:
    """Build the Flask application"""
    if not initialize_components(app_config, store):
        raise RuntimeError("Failed to initialize Competitor Watcher components")

    app = Flask(__name__)
    CORS(app)  # Enable CORS for React frontend

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            "status": "healthy",
            "message": "Competitor Watcher render API is running",
            "locales": glossary_store.locales
        })

    @app.route('/api/render', methods=['POST'])
    def render_report():
        """Sanitize report HTML and annotate glossary terms"""
        data = _json_body()
        if data is None or not isinstance(data.get('html'), str):
            return jsonify({"error": "Request body must be JSON with an 'html' string"}), 400

        html = data['html']
        if _payload_too_large(html):
            return jsonify({"error": f"HTML exceeds {config.api.max_payload_kb} KB"}), 413

        try:
            # One surface per request; each request is a new payload
            surface = RenderSurface(annotator, sanitizer, locale=data.get('locale'))
            output = surface.render(html)
            return jsonify({
                "html": output,
                "locale": surface.locale,
                "terms_annotated": surface.term_count
            })
        except Exception as e:
            logger.exception(f"Render error: {e}")
            return jsonify({"error": "Failed to render report"}), 500

    @app.route('/api/sanitize', methods=['POST'])
    def sanitize_report():
        """Sanitize report HTML without annotation"""
        data = _json_body()
        if data is None or not isinstance(data.get('html'), str):
            return jsonify({"error": "Request body must be JSON with an 'html' string"}), 400

        html = data['html']
        if _payload_too_large(html):
            return jsonify({"error": f"HTML exceeds {config.api.max_payload_kb} KB"}), 413

        return jsonify({"html": sanitizer.sanitize(html)})

    @app.route('/api/glossary/<locale>', methods=['GET'])
    def get_glossary(locale):
        """List glossary entries for a locale"""
        resolved = glossary_store.normalize_locale(locale)
        entries = glossary_store.get_glossary(resolved).values()
        return jsonify({
            "locale": resolved,
            "terms": [asdict(entry) for entry in entries]
        })

    @app.route('/api/glossary/<locale>/search', methods=['GET'])
    def search_glossary(locale):
        """Search glossary entries for a locale"""
        query = request.args.get('q', '').strip()
        if not query:
            return jsonify({"error": "Missing search query 'q'"}), 400

        resolved = glossary_store.normalize_locale(locale)
        results = glossary_store.search_terms(query, resolved)
        return jsonify({
            "locale": resolved,
            "query": query,
            "terms": [asdict(entry) for entry in results]
        })

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None,
               app_config: Optional[CompWatchConfig] = None):
    """Start the development server"""
    app_config = app_config or default_config
    setup_logging(app_config.log_level)

    app = create_app(app_config)
    host = host or app_config.api.host
    port = port or app_config.api.port

    print(f"\nStarting Flask server on http://{host}:{port}")
    print("React frontend should connect automatically")
    print("Press Ctrl+C to stop\n")
    app.run(host=host, port=port, debug=app_config.debug)


if __name__ == '__main__':
    run_server()
