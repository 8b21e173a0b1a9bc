from .rails import MethodExclusionService, RailsImplicitMethodResolver, RailsResolution

__all__ = ["MethodExclusionService", "RailsImplicitMethodResolver", "RailsResolution"]
