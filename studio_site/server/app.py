# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import signal
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional
from flask import Flask, Response, jsonify, request, send_file
from werkzeug.exceptions import HTTPException
from ..core.config import Config
from ..core.errors import ContactValidationError, DeliveryError, InvalidPathError, ScanError
from ..core.models import MediaListResult, MediaTreeResult
from ..infrastructure.mailer import SmtpMailer
from ..services.catalog_service import MediaCatalog
from ..services.contact_service import ContactService
from ..services.image_optimizer import OptimizeParams, can_optimize, optimize_image
from ..services.index_service import CatalogIndex


def configure_logging(config: Config):
    handlers = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(config.log_file, maxBytes=5 * 1024 * 1024, backupCount=5))
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


class Server:
    def __init__(self, config_path: str = "config.yaml", config: Optional[Config] = None,
                 mailer=None):
        self.config = config or Config.load(config_path)
        configure_logging(self.config)
        self.logger = logging.getLogger("studio_site.server.app")

        # Refuse to start half-configured in production
        self.config.check_startup()

        self.app = Flask(__name__)

        # Services
        self.catalog = MediaCatalog(self.config)
        self.index = CatalogIndex(self.config)
        self.mailer = mailer or SmtpMailer(
            self.config.smtp,
            display_name=self.config.studio_name,
            dev_mode=not self.config.is_production,
        )
        self.contact_service = ContactService(self.mailer, studio_name=self.config.studio_name)

        self.config.media_root.mkdir(parents=True, exist_ok=True)
        self.catalog.ensure_default_structure()

        self._setup_routes()
        self._setup_error_handlers()
        self.logger.debug(f"Server configuration: {self.config.safe_dump()}")

    def _setup_routes(self):
        @self.app.after_request
        def log_request(response):
            self.logger.info(f"{request.method} {request.full_path.rstrip('?')} {response.status_code}")
            return response

        @self.app.route("/api/health")
        def health():
            return jsonify({
                "status": "ok",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "environment": self.config.environment,
            })

        @self.app.route("/api/media/list")
        def list_media():
            rel_path = request.args.get("path")
            if rel_path is None:
                return jsonify({"success": False, "message": "path query parameter is required", "items": []}), 400
            try:
                entries = self.catalog.list_by_category(rel_path)
            except InvalidPathError as e:
                self.logger.warning(f"Rejected media listing: {e}")
                return jsonify({"success": False, "message": "Invalid path", "items": []}), 400
            except ScanError as e:
                self.logger.error(f"Media listing failed: {e}")
                return jsonify({"success": False, "message": "Failed to list media"}), 500

            result = MediaListResult(items=[entry.to_list_item() for entry in entries])
            return jsonify(result.model_dump(mode="json"))

        @self.app.route("/api/media/tree")
        def media_tree():
            try:
                root = self.catalog.get_tree()
            except ScanError as e:
                self.logger.error(f"Media tree failed: {e}")
                return jsonify({"success": False, "message": "Failed to read media tree"}), 500
            return jsonify(MediaTreeResult(tree=root.children).model_dump(mode="json"))

        @self.app.route("/api/database/all")
        def database_all():
            try:
                snapshot = self.index.read()
            except ScanError as e:
                return self._scan_failed("Error fetching images", e)
            data = snapshot.model_dump(mode="json", by_alias=True)
            return jsonify({
                "success": True,
                "data": {
                    "images": data["images"],
                    "stats": snapshot.stats().model_dump(mode="json", by_alias=True),
                },
            })

        @self.app.route("/api/database/category/<path:category>")
        def database_category(category):
            try:
                records = self.index.get_by_category(category)
            except ScanError as e:
                return self._scan_failed("Error fetching images by category", e)
            return jsonify({
                "success": True,
                "data": {
                    "category": category,
                    "images": [r.model_dump(mode="json", by_alias=True) for r in records],
                    "count": len(records),
                },
            })

        @self.app.route("/api/database/stats")
        def database_stats():
            try:
                stats = self.index.stats()
            except ScanError as e:
                return self._scan_failed("Error fetching statistics", e)
            return jsonify({"success": True, "data": stats.model_dump(mode="json", by_alias=True)})

        @self.app.route("/api/database/refresh", methods=["POST"])
        def database_refresh():
            try:
                snapshot = self.index.refresh()
            except ScanError as e:
                return self._scan_failed("Error refreshing database", e)
            self.logger.info("[User Action] Snapshot refreshed via API.")
            return jsonify({
                "success": True,
                "message": "Database refreshed successfully",
                "data": {
                    "categories": list(snapshot.images.keys()),
                    "totalFiles": snapshot.total_files,
                },
            })

        @self.app.route("/api/database/image/<path:image_path>")
        def database_image(image_path):
            try:
                record = self.index.get_by_path(image_path)
            except ScanError as e:
                return self._scan_failed("Error fetching image info", e)
            if record is None:
                return jsonify({"success": False, "message": "Image not found"}), 404
            return jsonify({"success": True, "data": record.model_dump(mode="json", by_alias=True)})

        @self.app.route("/api/contact", methods=["POST"])
        def contact():
            payload = request.get_json(silent=True)
            try:
                receipt = self.contact_service.relay(payload)
            except ContactValidationError as e:
                self.logger.warning(f"Contact form validation failed: {e.errors}")
                return jsonify({"success": False, "message": "Validation failed", "errors": e.errors}), 400
            except DeliveryError as e:
                self.logger.error(f"Failed to send contact form email: {e}")
                return jsonify({
                    "success": False,
                    "message": "Failed to send message. Please try again later.",
                }), 500

            self.logger.info(f"Contact form relayed ({receipt.message_id})")
            return jsonify({"success": True, "message": "Message sent successfully"})

        @self.app.route("/media/<path:rel_path>")
        def serve_media(rel_path):
            try:
                file_path = self.catalog.resolve_file(rel_path)
            except (InvalidPathError, FileNotFoundError):
                return jsonify({"success": False, "message": "Route not found"}), 404

            params = OptimizeParams.from_query(request.args)
            if params and can_optimize(file_path):
                try:
                    data, mimetype = optimize_image(file_path, params)
                    response = Response(data, mimetype=mimetype)
                    response.headers["Cache-Control"] = f"public, max-age={self.config.optimized_cache_seconds}"
                    return response
                except (OSError, ValueError) as e:
                    # Pillow raises OSError/ValueError subclasses for undecodable input
                    self.logger.error(f"Image optimization error for {rel_path}: {e}")

            response = send_file(file_path, max_age=self.config.media_cache_seconds, conditional=True)
            response.headers["Cache-Control"] = f"public, max-age={self.config.media_cache_seconds}"
            return response

    def _scan_failed(self, message: str, error: Exception):
        self.logger.error(f"{message}: {error}")
        return jsonify({"success": False, "message": message}), 500

    def _setup_error_handlers(self):
        @self.app.errorhandler(404)
        def not_found(e):
            return jsonify({"success": False, "message": "Route not found"}), 404

        @self.app.errorhandler(Exception)
        def unhandled(e):
            if isinstance(e, HTTPException):
                return jsonify({"success": False, "message": e.description}), e.code
            self.logger.exception(f"Unhandled error: {e}")
            return jsonify({"success": False, "message": "Internal Server Error"}), 500

    def _handle_sigterm(self, signum, frame):
        self.logger.info("SIGTERM received. Shutting down gracefully")
        raise SystemExit(0)

    def run(self):
        signal.signal(signal.SIGTERM, self._handle_sigterm)
        self.logger.info(
            f"Server is running in {self.config.environment} mode on "
            f"{self.config.server_host}:{self.config.server_port}"
        )
        try:
            self.app.run(host=self.config.server_host, port=self.config.server_port)
        finally:
            self.logger.info("Process terminated")


if __name__ == "__main__":
    server = Server()
    server.run()
