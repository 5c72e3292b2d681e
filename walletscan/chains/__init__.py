"""Chain data clients."""
