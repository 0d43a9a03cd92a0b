"""Process-level wiring for streams and marbles logging."""
