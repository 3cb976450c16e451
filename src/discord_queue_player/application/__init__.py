"""Application layer: ports and the playback session service."""
