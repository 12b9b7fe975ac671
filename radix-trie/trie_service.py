"""
Prefix Match Service: a REST API over a byte-keyed radix trie.

Exposes the RadixTrie as a JSON API with endpoints for inserting keys,
exact lookup, and shortest / longest / all prefix matching, the way a
routing table or path matcher would query it.
Built with Flask. Designed for containerized deployment.
"""

from __future__ import annotations

import os
import time
import logging
from typing import Any

from flask import Flask, jsonify, request

from bytetrie import PrefixMatch, RadixTrie

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

MAX_KEY_BYTES = int(os.environ.get("TRIE_MAX_KEY_BYTES", 256))
SEED_ENABLED = os.environ.get("TRIE_SEED", "1") != "0"

_ENCODINGS = ("text", "hex")
_MISSING = object()


class KeyDecodeError(ValueError):
    """Raised when a key in a request cannot be turned into bytes."""


# ---------------------------------------------------------------------------
# Flask application
# ---------------------------------------------------------------------------

app = Flask(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger("trie-service")

# Global trie instance, persists for the lifetime of the process
trie: RadixTrie[Any] = RadixTrie()
_start_time = time.time()

# Seed with route prefixes so the service is useful out-of-the-box
_SEED_ROUTES = {
    "/": "root",
    "/api": "api-gateway",
    "/api/v1": "api-v1",
    "/api/v1/users": "users-service",
    "/api/v1/orders": "orders-service",
    "/api/v2": "api-v2",
    "/static": "cdn",
    "/static/img": "image-cdn",
    "/health": "health-check",
    "/admin": "admin-panel",
}

if SEED_ENABLED:
    for route, backend in _SEED_ROUTES.items():
        trie.insert(route, backend)
    logger.info("Seeded trie with %d routes", len(_SEED_ROUTES))


def _decode_key(raw: str, encoding: str) -> bytes:
    if encoding == "text":
        return raw.encode("utf-8")
    if encoding == "hex":
        try:
            return bytes.fromhex(raw)
        except ValueError as exc:
            raise KeyDecodeError(f"Invalid hex key: {exc}") from exc
    raise KeyDecodeError(f"Unknown encoding '{encoding}' (expected one of {', '.join(_ENCODINGS)})")


def _render_key(key: bytes, encoding: str) -> str:
    if encoding == "hex":
        return key.hex()
    # A stored key may end inside a multi-byte character of the query.
    return key.decode("utf-8", errors="replace")


def _match_json(match: PrefixMatch[Any] | None, encoding: str) -> dict[str, Any]:
    if match is None:
        return {"found": False, "prefix": None, "prefix_length": 0, "value": None}
    return {
        "found": True,
        "prefix": _render_key(match.prefix, encoding),
        "prefix_length": match.prefix_length,
        "value": match.value,
    }


def _query_key() -> tuple[bytes, str]:
    """Read ``q`` and ``encoding`` from the query string."""
    if "q" not in request.args:
        raise KeyDecodeError("Missing query parameter 'q'")
    encoding = request.args.get("encoding", "text")
    return _decode_key(request.args["q"], encoding), encoding


@app.errorhandler(KeyDecodeError)
def bad_key(exc: KeyDecodeError):
    logger.warning("Rejected request to %s: %s", request.path, exc)
    return jsonify({"error": str(exc)}), 400


# ── Health & Info ─────────────────────────────────────────────────────────

@app.route("/")
def index():
    """Landing page with API documentation."""
    return jsonify({
        "service": "Prefix Match Service",
        "version": "1.0.0",
        "description": "REST API for exact and prefix lookups powered by a radix trie",
        "endpoints": {
            "GET  /":                    "This help page",
            "GET  /health":              "Health check",
            "GET  /stats":               "Trie statistics",
            "GET  /lookup?q=<key>":      "Exact match lookup",
            "GET  /match/shortest?q=<s>": "Shortest stored key that prefixes s",
            "GET  /match/longest?q=<s>":  "Longest stored key that prefixes s",
            "GET  /match/all?q=<s>":      "Every stored key that prefixes s, shortest first",
            "POST /insert":              "Insert a key  {\"key\": \"...\", \"value\": ...}",
        },
        "encodings": list(_ENCODINGS),
    })


@app.route("/health")
def health():
    """Liveness / readiness probe."""
    return jsonify({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _start_time, 2),
        "trie_size": len(trie),
    })


@app.route("/stats")
def stats():
    """Trie statistics."""
    return jsonify({
        "total_keys": len(trie),
        "uptime_seconds": round(time.time() - _start_time, 2),
        "seed_keys": len(_SEED_ROUTES) if SEED_ENABLED else 0,
    })


# ── Core API ──────────────────────────────────────────────────────────────

@app.route("/lookup")
def lookup():
    """Exact key lookup."""
    key, encoding = _query_key()
    value = trie.lookup(key, _MISSING)
    found = value is not _MISSING
    if not found:
        value = None
    logger.debug("lookup key=%r found=%s", key, found)
    return jsonify({"key": _render_key(key, encoding), "found": found, "value": value})


@app.route("/match/shortest")
def match_shortest():
    """Shortest stored key that is a prefix of the input."""
    query, encoding = _query_key()
    body = _match_json(trie.match_shortest_prefix(query), encoding)
    return jsonify({"input": _render_key(query, encoding), **body})


@app.route("/match/longest")
def match_longest():
    """Longest stored key that is a prefix of the input."""
    query, encoding = _query_key()
    body = _match_json(trie.match_longest_prefix(query), encoding)
    return jsonify({"input": _render_key(query, encoding), **body})


@app.route("/match/all")
def match_all():
    """All stored keys that are prefixes of the input, root to deepest."""
    query, encoding = _query_key()
    matches = [_match_json(m, encoding) for m in trie.match_all_prefixes(query)]
    for m in matches:
        del m["found"]
    return jsonify({
        "input": _render_key(query, encoding),
        "count": len(matches),
        "matches": matches,
    })


@app.route("/insert", methods=["POST"])
def insert():
    """Insert a key into the trie."""
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    raw = body.get("key")
    value = body.get("value", raw)

    if not isinstance(raw, str) or not raw:
        return jsonify({"error": "Missing 'key' in request body"}), 400
    encoding = body.get("encoding", "text")
    key = _decode_key(raw, encoding)
    if len(key) > MAX_KEY_BYTES:
        logger.warning("Rejected key of %d bytes", len(key))
        return jsonify({"error": f"Key too long (max {MAX_KEY_BYTES} bytes)"}), 400

    trie.insert(key, value)
    logger.info("Inserted key=%r", key)
    return jsonify({"inserted": raw, "value": value, "trie_size": len(trie)}), 201


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    logger.info("Starting Prefix Match Service on port %d", port)
    app.run(host="0.0.0.0", port=port, debug=debug)
