"""csfn: typed function invocations over a key-path scope."""
