"""Command resolution, authorization and dispatch."""
