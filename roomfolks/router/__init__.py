"""Event routing: route table and dispatcher."""

from roomfolks.router.routes import Route, RouteHandler, Router, RouteTable

__all__ = ["Route", "RouteHandler", "RouteTable", "Router"]
