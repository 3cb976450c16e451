"""Domain layer: playback value objects and the shared kernel."""
