"""
metaimport service: vanity import paths for the Go toolchain.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, Response

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import ConfigurationError
from shared.logging import configure_logging, get_logger

from .config import MetaImportConfig, load_config
from .handler import GoImportHandler
from .rules.engine import Resolver
from .rules.table import RuleTable


class MetaImportService(BaseService):
    """go-get redirector service implementation."""

    def __init__(self, import_config: MetaImportConfig, config: Optional[ServiceConfig] = None):
        super().__init__("metaimport", config)
        self.import_config = import_config

        # Built once; shared read-only by every request
        self.rule_table = RuleTable.build(import_config.paths)
        self.resolver = Resolver(self.rule_table)
        self.handler = GoImportHandler(self.resolver, metrics=self.metrics)
        self.metrics.set_gauge("rule_table_size", len(self.rule_table))

        self._setup_go_import_routes()

    def _setup_go_import_routes(self):
        """Set up the catch-all go-get route."""

        @self.app.api_route(
            "/{package_path:path}",
            methods=["GET", "HEAD"],
            include_in_schema=False,
        )
        async def go_import(request: Request, package_path: str):
            """Answer a go-get discovery request."""
            # request.url re-parses the decoded path, cutting it at "?" or "#"
            outcome = self.handler.handle(
                request.headers.get("host", ""),
                request.scope["path"],
                request.query_params,
            )
            return Response(
                content=outcome.body,
                status_code=outcome.status_code,
                media_type=outcome.media_type,
            )

    def _health_details(self) -> Dict[str, Any]:
        """Report the loaded rule table."""
        return self.rule_table.get_table_stats()

    def uvicorn_options(self) -> Dict[str, Any]:
        """Listener options derived from the configuration document."""
        options: Dict[str, Any] = {
            "host": self.import_config.listen_host,
            "port": self.import_config.listen_port,
        }
        if self.import_config.read_timeout is not None:
            options["timeout_keep_alive"] = self.import_config.read_timeout
        if self.import_config.tls is not None:
            options["ssl_certfile"] = str(self.import_config.tls.cert)
            options["ssl_keyfile"] = str(self.import_config.tls.priv_key)
        return options

    def serve(self):
        """Run the service on the configured listener."""
        options = self.uvicorn_options()
        self.logger.info(
            "Starting metaimport",
            addr=self.import_config.addr,
            tls=self.import_config.tls is not None,
            rules=len(self.rule_table)
        )
        self.run(**options)


def create_app(import_config: MetaImportConfig, config: Optional[ServiceConfig] = None) -> FastAPI:
    """Create metaimport service application."""
    service = MetaImportService(import_config, config)
    return service.app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metaimport",
        description="Serve go-import meta tags for vanity import paths."
    )
    parser.add_argument("conf_file", metavar="CONF_FILE", help="JSON configuration file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    args = build_parser().parse_args(argv)

    settings = get_config("metaimport")
    configure_logging("metaimport", settings.log_level)
    logger = get_logger("metaimport.cli")

    try:
        import_config = load_config(args.conf_file)
        service = MetaImportService(import_config, settings)
    except ConfigurationError as e:
        errors = e.details.get("errors")
        if errors:
            logger.error("Some errors were found in the configuration file", source=args.conf_file)
            for line in errors:
                logger.error(line)
        logger.error(e.message, **{k: v for k, v in e.details.items() if k != "errors"})
        return 1

    service.serve()
    return 0


if __name__ == "__main__":
    sys.exit(main())
