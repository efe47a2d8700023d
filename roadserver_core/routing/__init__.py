"""Routing module - Path matching, route table and dispatch."""

from roadserver_core.routing.matcher import MatchResult, PathMatcher, compile_pattern
from roadserver_core.routing.router import Route, RouteTable
from roadserver_core.routing.dispatcher import Dispatcher, build_chain

__all__ = [
    "MatchResult",
    "PathMatcher",
    "compile_pattern",
    "Route",
    "RouteTable",
    "Dispatcher",
    "build_chain",
]
