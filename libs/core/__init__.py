__all__ = [
    "models",
    "events",
    "schemas",
    "state_machine",
    "prompts",
    "llm_provider",
    "logging",
]
