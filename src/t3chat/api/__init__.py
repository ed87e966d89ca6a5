"""HTTP API: request models, routes, rate limiting and SSE helpers."""
