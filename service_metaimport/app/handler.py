"""
go-get request handling.

Translates a request (host, path, query) into an HttpOutcome without
touching the network, so the whole decision can be exercised in isolation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from shared.errors import ServiceError, TemplateRenderError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .rendering import render_go_import_page
from .rules.engine import Resolver
from .rules.models import ResolutionResult


NOT_FOUND_BODY = "404 page not found\n"


def _first_value(query: Mapping[str, str], key: str) -> Optional[str]:
    """First value of a possibly repeated query parameter."""
    getlist = getattr(query, "getlist", None)
    if getlist is not None:
        values = getlist(key)
        return values[0] if values else None
    return query.get(key)


class OutcomeKind(str, Enum):
    """Kinds of request outcomes."""
    OK = "ok"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class HttpOutcome:
    """What the HTTP layer must send back."""
    kind: OutcomeKind
    status_code: int
    body: str = ""
    media_type: Optional[str] = None
    result: Optional[ResolutionResult] = field(default=None, compare=False)

    @classmethod
    def ok(cls, html: str, result: Optional[ResolutionResult] = None) -> "HttpOutcome":
        return cls(OutcomeKind.OK, 200, html, "text/html", result)

    @classmethod
    def not_found(cls) -> "HttpOutcome":
        return cls(OutcomeKind.NOT_FOUND, 404, NOT_FOUND_BODY, "text/plain; charset=utf-8")

    @classmethod
    def bad_request(cls) -> "HttpOutcome":
        return cls(OutcomeKind.BAD_REQUEST, 400)

    @classmethod
    def internal_error(cls) -> "HttpOutcome":
        return cls(OutcomeKind.INTERNAL_ERROR, 500)


class GoImportHandler:
    """Answers go-get discovery requests from a resolver."""

    def __init__(self, resolver: Resolver, metrics: Optional[MetricsCollector] = None):
        self.logger = get_logger("metaimport.handler")
        self.resolver = resolver
        self.metrics = metrics

    def handle(self, host: str, url_path: str, query: Mapping[str, str]) -> HttpOutcome:
        """Resolve ``host + url_path`` for a ``?go-get=1`` request."""
        if _first_value(query, "go-get") != "1":
            self.logger.info("Not a go-get query", host=host, path=url_path, query=dict(query))
            return self._record(HttpOutcome.bad_request())

        package_path = host + url_path
        self.logger.info("Request for package", package=package_path)

        try:
            result = self.resolver.resolve(package_path)
        except TemplateRenderError as e:
            self.logger.warning(
                "Unable to render repository",
                package=package_path,
                error=e.details.get("error", e.message)
            )
            return self._record(HttpOutcome.not_found(), label="render_error")

        if result is None:
            self.logger.info("Unable to match package", package=package_path)
            return self._record(HttpOutcome.not_found())

        try:
            html = render_go_import_page(result)
        except ServiceError as e:
            self.logger.error("Unable to render page", package=package_path, error=e.details.get("error"))
            return self._record(HttpOutcome.internal_error())

        return self._record(HttpOutcome.ok(html, result))

    def _record(self, outcome: HttpOutcome, label: Optional[str] = None) -> HttpOutcome:
        if self.metrics is not None:
            self.metrics.record_resolution(label or outcome.kind.value)
        return outcome
