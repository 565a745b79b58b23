"""
REST API for OSPFGraph.

Exposes the path and impact engine over JSON for dashboards and
automation. The API holds one topology snapshot at a time.
"""

import time
from typing import Optional

from flask import Blueprint, Flask, abort, jsonify, request
from werkzeug.exceptions import HTTPException

from ..analytics.deep import NetworkAnalytics
from ..analytics.matrix import path_matrix
from ..capacity.bandwidth import BandwidthRanker
from ..capacity.stats import capacity_stats
from ..config import ENGINE_CONFIG, EngineConfig
from ..errors import TopologyError
from ..graph.builder import build_graph
from ..impact.asymmetry import asymmetry_summary
from ..impact.blast_radius import ImpactAnalyzer
from ..log import get_logger
from ..paths.enumerate import PathStrategy, k_paths
from ..paths.solver import equal_cost_paths
from ..topology.loader import topology_from_dict
from ..topology.model import Topology

logger = get_logger(__name__)


class OSPFGraphAPI:
    """
    REST API server for path and impact analysis.

    Endpoints:
      GET  /api/v1/health            — API health check
      GET  /api/v1/topology          — Current topology
      PUT  /api/v1/topology          — Replace the topology (JSON records)
      GET  /api/v1/paths             — Primary/alternate paths (?source&target&k&strategy)
      GET  /api/v1/ecmp              — Equal-cost paths (?source&target)
      GET  /api/v1/matrix            — All-pairs path matrix
      POST /api/v1/impact/blast      — Blast radius for a link cost change
      POST /api/v1/impact/failures   — Simultaneous failure of several links
      GET  /api/v1/impact/links      — Link-down impact ranking
      GET  /api/v1/analysis          — Deep analysis
      GET  /api/v1/asymmetry         — Asymmetric links
      POST /api/v1/capacity/rank     — Bandwidth-aware path ranking
      GET  /api/v1/capacity/stats    — Link utilization (?growth)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or ENGINE_CONFIG
        self.topology: Optional[Topology] = None
        self.analyzer = ImpactAnalyzer(self.config)
        self.analytics = NetworkAnalytics(self.config)
        self.ranker = BandwidthRanker(self.config)
        self._last_update: float = 0

    def set_topology(self, topology: Topology):
        """Replace the current topology snapshot."""
        self.topology = topology
        self._last_update = time.time()

    def create_app(self) -> Flask:
        """Create and configure the Flask application."""
        app = Flask(__name__)
        api = Blueprint("api", __name__, url_prefix="/api/v1")

        def current() -> Topology:
            if self.topology is None:
                abort(404, "No topology loaded")
            return self.topology

        def require_nodes(topology: Topology, *node_ids: str):
            for node_id in node_ids:
                if not node_id:
                    abort(400, "Query must include 'source' and 'target'")
                if not topology.has_node(node_id):
                    abort(404, f"Node {node_id} not found")

        def json_object() -> dict:
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                abort(400, "Request body must be a JSON object")
            return data

        def require_id(data: dict, key: str) -> str:
            value = data.get(key)
            if not isinstance(value, str) or not value:
                abort(400, f"'{key}' must be a non-empty string")
            return value

        @api.route("/health")
        def health():
            return jsonify({
                "status": "ok",
                "topology_loaded": self.topology is not None,
                "nodes": len(self.topology.nodes) if self.topology else 0,
                "links": len(self.topology.links) if self.topology else 0,
                "last_update": self._last_update,
            })

        @api.route("/topology", methods=["GET"])
        def topology_get():
            return jsonify(current().to_dict())

        @api.route("/topology", methods=["PUT"])
        def topology_put():
            data = request.get_json(silent=True)
            if data is None:
                abort(400, "Request body must be topology JSON")
            try:
                topology = topology_from_dict(data)
            except TopologyError as exc:
                abort(400, str(exc))
            self.set_topology(topology)
            logger.info("Topology replaced: %d nodes, %d links",
                        len(topology.nodes), len(topology.links))
            return jsonify({"nodes": len(topology.nodes), "links": len(topology.links)})

        @api.route("/paths")
        def paths():
            topology = current()
            source = request.args.get("source", "")
            target = request.args.get("target", "")
            require_nodes(topology, source, target)
            k = request.args.get("k", self.config.default_k, type=int)
            try:
                strategy = PathStrategy(request.args.get("strategy", "backup"))
            except ValueError:
                abort(400, "strategy must be one of: backup, disjoint, yen")

            results = k_paths(topology, source, target, k=k, strategy=strategy,
                              duplicate_policy=self.config.duplicate_policy)
            return jsonify({
                "source": source,
                "target": target,
                "paths": [r.to_dict() for r in results],
                "count": len(results),
            })

        @api.route("/ecmp")
        def ecmp():
            topology = current()
            source = request.args.get("source", "")
            target = request.args.get("target", "")
            require_nodes(topology, source, target)
            G = build_graph(topology, self.config.duplicate_policy)
            found = equal_cost_paths(G, source, target)
            return jsonify({"paths": found, "count": len(found)})

        @api.route("/matrix")
        def matrix():
            topology = current()
            data = path_matrix(topology, duplicate_policy=self.config.duplicate_policy)
            # JSON has no infinity
            for row in data.values():
                for cell in row.values():
                    if cell["path_count"] == 0:
                        cell.update(cost=None, forward_cost=None, reverse_cost=None)
            return jsonify(data)

        @api.route("/impact/blast", methods=["POST"])
        def impact_blast():
            topology = current()
            data = json_object()
            link_id = require_id(data, "link_id")
            if topology.link(link_id) is None:
                abort(404, f"Link {link_id} not found")

            if data.get("down"):
                result = self.analyzer.simulate_link_down(topology, link_id)
            else:
                cost = data.get("cost")
                if not isinstance(cost, (int, float)) or isinstance(cost, bool) or cost < 1:
                    abort(400, "Request must include 'cost' >= 1 or 'down': true")
                result = self.analyzer.blast_radius(topology, link_id, cost)
            return jsonify(result.to_dict())

        @api.route("/impact/failures", methods=["POST"])
        def impact_failures():
            topology = current()
            link_ids = json_object().get("link_ids")
            if (not isinstance(link_ids, list) or not link_ids
                    or not all(isinstance(lid, str) for lid in link_ids)):
                abort(400, "'link_ids' must be a non-empty list of strings")
            result = self.analyzer.simulate_failures(topology, link_ids)
            if not result.failed_links:
                abort(404, f"Links not found: {', '.join(result.unknown_links)}")
            return jsonify(result.to_dict())

        @api.route("/impact/links")
        def impact_links():
            report = self.analyzer.analyze(current())
            return jsonify({
                "summary": report.summary,
                "link_impacts": [li.to_dict() for li in report.link_impacts],
            })

        @api.route("/analysis")
        def analysis():
            return jsonify(self.analytics.analyze(current()).to_dict())

        @api.route("/asymmetry")
        def asymmetry():
            return jsonify(asymmetry_summary(current()))

        @api.route("/capacity/rank", methods=["POST"])
        def capacity_rank():
            topology = current()
            data = json_object()
            source = require_id(data, "source")
            target = require_id(data, "target")
            require_nodes(topology, source, target)
            try:
                results = self.ranker.rank_paths(
                    topology,
                    source,
                    target,
                    required_bandwidth=float(data.get("required_bandwidth", 0)),
                    cost_weight=float(data.get("cost_weight", 0.5)),
                    k=int(data.get("k", 5)),
                )
            except (TypeError, ValueError) as exc:
                abort(400, str(exc))
            return jsonify({"paths": [p.to_dict() for p in results], "count": len(results)})

        @api.route("/capacity/stats")
        def capacity_statistics():
            topology = current()
            growth = request.args.get("growth", None, type=float)
            stats = capacity_stats(topology, growth_pct=growth)
            if stats is None:
                abort(404, "No links with both capacity and utilization")
            return jsonify(stats.to_dict())

        app.register_blueprint(api)

        @app.errorhandler(HTTPException)
        def http_error(exc):
            return jsonify({"error": exc.description, "status": exc.code}), exc.code

        return app
