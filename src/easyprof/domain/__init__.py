"""Domain layer: immutable model and public exceptions. No I/O."""
