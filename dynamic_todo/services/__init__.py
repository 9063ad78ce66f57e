"""Tool operations, JSON-RPC tool server and change feed."""
