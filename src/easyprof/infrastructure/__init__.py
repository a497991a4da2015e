"""Infrastructure layer: runtime instrumentation back-ends, encoders, sink."""
