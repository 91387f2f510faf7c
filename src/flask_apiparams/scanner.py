"""Flask route scanner.

Walks app.url_map and explores the parameters of every endpoint handler,
collecting one ScannedEndpoint per (rule, HTTP method) and the definitions
built for their body models.

- Skips static routes and HEAD/OPTIONS
- Class-based views (MethodView) use the handler method matching the
  HTTP method
- Endpoint ids are ``[blueprint.]function.method``; duplicates get
  ``_2``, ``_3``, ...
- A handler whose type hints cannot be resolved is reported with a
  warning and no parameters instead of failing the scan
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable

from flask_apiparams.explorers import DefinitionRegistry, explore_api_parameters

if TYPE_CHECKING:
    from flask import Flask
    from werkzeug.routing import Rule

    from flask_apiparams.metadata import MetadataProvider

logger = logging.getLogger("flask_apiparams")


@dataclass
class ScannedEndpoint:
    """Result of exploring a single Flask endpoint.

    Attributes:
        endpoint_id: Unique identifier (e.g., 'users.get_user.get').
        http_method: HTTP method (GET, POST, etc.).
        url_rule: The Flask URL rule string.
        target: Handler reference in 'module.path:qualname' format.
        parameters: Explored parameter list, or None if undocumented.
        tags: Categorization tags (the Blueprint name, if any).
        warnings: Non-fatal issues encountered while exploring.
    """

    endpoint_id: str
    http_method: str
    url_rule: str
    target: str
    parameters: list[dict[str, Any]] | None = None
    tags: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "endpoint_id": self.endpoint_id,
            "http_method": self.http_method,
            "url_rule": self.url_rule,
            "target": self.target,
            "tags": list(self.tags),
        }
        if self.parameters is not None:
            result["parameters"] = self.parameters
        if self.warnings:
            result["warnings"] = list(self.warnings)
        return result


@dataclass
class ScanResult:
    endpoints: list[ScannedEndpoint]
    definitions: DefinitionRegistry

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoints": [endpoint.to_dict() for endpoint in self.endpoints],
            "definitions": self.definitions.as_dict(),
        }


class EndpointScanner:
    """Explores parameters for every API route of a Flask app."""

    def __init__(self, provider: MetadataProvider, on_conflict: str = "error") -> None:
        self._provider = provider
        self._on_conflict = on_conflict

    def scan(
        self,
        app: Flask,
        include: str | None = None,
        exclude: str | None = None,
    ) -> ScanResult:
        """Scan all Flask routes.

        Args:
            app: Flask application instance.
            include: Regex pattern for endpoint_id inclusion.
            exclude: Regex pattern for endpoint_id exclusion.

        Returns:
            ScanResult with the endpoints and the shared definition registry.

        Raises:
            DefinitionConflictError: If two models produce different
                definitions under one name and the policy is "error".
        """
        definitions = DefinitionRegistry(on_conflict=self._on_conflict)
        endpoints: list[ScannedEndpoint] = []

        for rule in app.url_map.iter_rules():
            if not self._is_api_route(rule):
                continue

            view_func = app.view_functions.get(rule.endpoint)
            if view_func is None:
                continue

            methods = (rule.methods or set()) - {"HEAD", "OPTIONS"}
            for method in sorted(methods):
                handler = self._resolve_handler(view_func, method)
                if handler is None:
                    continue
                endpoints.append(self._scan_endpoint(rule, handler, method, definitions))

        endpoints = self._deduplicate_ids(endpoints)
        endpoints = self.filter_endpoints(endpoints, include, exclude)
        logger.debug("Scanned %d endpoints, %d definitions", len(endpoints), len(definitions))
        return ScanResult(endpoints=endpoints, definitions=definitions)

    def _scan_endpoint(
        self,
        rule: Rule,
        handler: Callable[..., Any],
        method: str,
        definitions: DefinitionRegistry,
    ) -> ScannedEndpoint:
        warnings: list[str] = []
        try:
            fragment = explore_api_parameters(definitions, self._provider, handler)
        except (TypeError, NameError) as e:
            logger.warning("Cannot explore parameters of %s %s: %s", method, rule.rule, e)
            warnings.append(f"Route '{method} {rule.rule}' has unresolvable type hints: {e}")
            fragment = None

        parameters = fragment["parameters"] if fragment else None
        documented = {p.get("name") for p in parameters or [] if p.get("in") == "path"}
        for argument in sorted(rule.arguments):
            if argument not in documented:
                warnings.append(f"Route '{method} {rule.rule}' does not document path parameter '{argument}'")

        return ScannedEndpoint(
            endpoint_id=self._generate_endpoint_id(rule, method),
            http_method=method,
            url_rule=rule.rule,
            target=self._generate_target(handler),
            parameters=parameters,
            tags=self._extract_tags(rule),
            warnings=warnings,
        )

    def filter_endpoints(
        self,
        endpoints: list[ScannedEndpoint],
        include: str | None = None,
        exclude: str | None = None,
    ) -> list[ScannedEndpoint]:
        """Apply include/exclude regex filters to endpoint ids."""
        result = endpoints

        if include is not None:
            pattern = re.compile(include)
            result = [e for e in result if pattern.search(e.endpoint_id)]

        if exclude is not None:
            pattern = re.compile(exclude)
            result = [e for e in result if not pattern.search(e.endpoint_id)]

        return result

    def _deduplicate_ids(self, endpoints: list[ScannedEndpoint]) -> list[ScannedEndpoint]:
        seen: dict[str, int] = {}
        result: list[ScannedEndpoint] = []
        for endpoint in endpoints:
            eid = endpoint.endpoint_id
            if eid in seen:
                seen[eid] += 1
                result.append(replace(endpoint, endpoint_id=f"{eid}_{seen[eid]}"))
            else:
                seen[eid] = 1
                result.append(endpoint)
        return result

    def _is_api_route(self, rule: Rule) -> bool:
        return not (rule.endpoint == "static" or rule.endpoint.endswith(".static"))

    def _resolve_handler(self, view_func: Callable[..., Any], method: str) -> Callable[..., Any] | None:
        """Return the callable whose signature documents this method."""
        view_class = getattr(view_func, "view_class", None)
        if view_class is None:
            return view_func
        handler = getattr(view_class, method.lower(), None)
        if handler is None:
            handler = getattr(view_class, "dispatch_request", None)
        return handler

    def _generate_endpoint_id(self, rule: Rule, method: str) -> str:
        parts = rule.endpoint.split(".")
        func_name = parts[-1]
        blueprint_name = parts[0] if len(parts) > 1 else None

        if blueprint_name:
            endpoint_id = f"{blueprint_name}.{func_name}.{method.lower()}"
        else:
            endpoint_id = f"{func_name}.{method.lower()}"

        return re.sub(r"[^a-zA-Z0-9.]", "_", endpoint_id)

    def _generate_target(self, handler: Callable[..., Any]) -> str:
        module = getattr(handler, "__module__", "__main__")
        name = getattr(handler, "__qualname__", getattr(handler, "__name__", repr(handler)))
        return f"{module}:{name}"

    def _extract_tags(self, rule: Rule) -> list[str]:
        parts = rule.endpoint.split(".")
        if len(parts) > 1:
            return [parts[0]]
        return []
