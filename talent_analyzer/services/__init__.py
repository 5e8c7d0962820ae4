"""External integrations (GitHub, Gemini) and in-process state (cache, limiter)."""
