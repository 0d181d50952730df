"""Domain layer: catalog, broadcast scheduling and playback backends."""
