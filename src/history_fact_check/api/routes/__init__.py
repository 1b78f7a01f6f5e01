from history_fact_check.api.routes import fact_check, health, knowledge

__all__ = ["fact_check", "health", "knowledge"]
