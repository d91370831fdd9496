"""
HTTP API for the Twitter datasource.

Routes:
- GET  /api/metadata   datasource descriptor
- POST /api/execute    JSON envelope in, JSON envelope out
- GET  /api/search     plain query-string search, JSON tweets out

Run: python main.py serve
"""

from flask import Flask, Response, jsonify, request

from collectors.base import AuthenticationError, ProviderError
from collectors.paginator import CollectionCancelled
from config.settings import ConfigurationError
from geo.resolver import ResolutionError
from query.builder import SearchParams
from service.datasource import EmptyResultError, TwitterDatasource


def create_app(datasource: TwitterDatasource | None = None):
    app = Flask(__name__)
    ds = datasource or TwitterDatasource()

    # ── CORS for development ──
    @app.after_request
    def add_cors(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    # ── API Routes ──

    @app.route("/api/metadata")
    def metadata():
        return Response(ds.get_metadata(), mimetype="application/json")

    @app.route("/api/execute", methods=["POST"])
    def execute():
        body = request.get_data(as_text=True)
        return Response(ds.execute(body), mimetype="application/json")

    @app.route("/api/search")
    def search():
        query = request.args.get("q", "").strip()
        if not query:
            return jsonify({"error": "Missing required parameter 'q'"}), 400

        # Optional values that don't parse fall back to their defaults
        params = SearchParams.from_mapping(query, request.args.to_dict())

        try:
            result = ds.search(params)
        except EmptyResultError as e:
            return jsonify({"error": str(e)}), 404
        except ConfigurationError as e:
            return jsonify({"error": str(e)}), 500
        except (AuthenticationError, ResolutionError, ProviderError, CollectionCancelled) as e:
            return jsonify({"error": str(e)}), 502
        except ValueError as e:
            # q is checked above, so this is a server-side setting problem
            return jsonify({"error": str(e)}), 500

        return jsonify(result.to_dict())

    @app.route("/")
    def index():
        return jsonify({
            "message": "twitter-datasource API",
            "endpoints": [
                "/api/metadata",
                "/api/execute",
                "/api/search",
            ],
        })

    return app
