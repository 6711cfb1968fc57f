"""
Cliroute CLI Routing Engine

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import logging

from .arity import Arity, CollectionKind
from .bundles import (
    GlobalOptionBundle,
    HelpOptionBundle,
    TimeoutOptionBundle,
    TraceOptionBundle,
)
from .execution_registry import ExecutionRegistry
from .handler import Handler
from .processor import CliProcessor, ExecutionOutcome, TerminalState
from .schema import ArgumentSegment, LiteralSegment, OptionSpec, Schema, SchemaBuilder
from .settings import ProcessorSettings

logger = logging.getLogger("cliroute")


__all__ = [
    "Arity",
    "ArgumentSegment",
    "CliProcessor",
    "CollectionKind",
    "ExecutionOutcome",
    "ExecutionRegistry",
    "GlobalOptionBundle",
    "Handler",
    "HelpOptionBundle",
    "LiteralSegment",
    "OptionSpec",
    "ProcessorSettings",
    "Schema",
    "SchemaBuilder",
    "TerminalState",
    "TimeoutOptionBundle",
    "TraceOptionBundle",
]
