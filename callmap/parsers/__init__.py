from callmap.parsers.handlers.registry import HandlerRegistry, build_handler_registry
from callmap.parsers.pre_scanner import PreScanIndex, PreScanner

__all__ = [
    "HandlerRegistry",
    "PreScanIndex",
    "PreScanner",
    "build_handler_registry",
]
