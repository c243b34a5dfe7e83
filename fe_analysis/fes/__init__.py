"""Feature-effect computation and post-processing."""
