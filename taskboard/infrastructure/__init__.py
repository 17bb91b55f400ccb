"""Infrastructure layer: document store backends and repositories."""
