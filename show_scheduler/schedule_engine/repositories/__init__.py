"""Store access. Every SQL statement the engine issues lives in this package."""
