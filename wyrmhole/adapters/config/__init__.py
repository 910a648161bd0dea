from .loader import ConfigLoader, load_orchestrator_config

__all__ = ["ConfigLoader", "load_orchestrator_config"]
