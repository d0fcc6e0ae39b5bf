"""Core primitives shared by every layer: entities, errors, config, file I/O."""
