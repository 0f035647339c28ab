"""Provider webhook intake."""
