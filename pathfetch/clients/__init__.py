"""Request pipeline internals."""
