# server.py — Flask API over the path request boundary
import logging

from flask import Flask, jsonify, request

import config
from path_service import handle_path_request
from store_map import build_store_map, store_map_to_dict

logger = logging.getLogger(__name__)


def create_app(store_map=None):
    app = Flask(__name__)
    store_map = store_map if store_map is not None else build_store_map()
    app.config['STORE_MAP'] = store_map

    # ======= CORS =======
    @app.after_request
    def _cors(resp):
        resp.headers["Access-Control-Allow-Origin"] = "*"
        resp.headers["Access-Control-Allow-Headers"] = "*"
        resp.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return resp

    @app.route("/", methods=["GET"])
    def root():
        return {"ok": True, "find_path": "/api/navigation/find-path (POST JSON)", "store": "/api/store"}

    @app.route("/api/store", methods=["GET"])
    def store():
        return jsonify(store_map_to_dict(store_map))

    @app.route("/api/navigation/find-path", methods=["POST"])
    def find_path_endpoint():
        """
        JSON body: {"start": {"x": 1, "y": 0}, "end": {"x": 2, "y": 3}}
        200 -> {"path": [[x, y], ...]}; 400/404/503 -> {"error": ..., "code": ...}
        """
        data = request.get_json(force=True, silent=True)
        try:
            result = handle_path_request(data, store_map)
        except Exception:
            logger.exception("Error in pathfinding")
            return jsonify({"error": "Internal server error"}), 500
        return jsonify(result.to_dict()), result.status.http_status

    return app


def run_server(store_map=None, host=config.SERVER_HOST, port=config.SERVER_PORT):
    app = create_app(store_map)
    logger.info("Server running on %s:%d", host, port)
    app.run(host=host, port=port, threaded=True)
