from .logger import bind_context, clear_context, get_logger, new_run_id, setup_logging

__all__ = ["bind_context", "clear_context", "get_logger", "new_run_id", "setup_logging"]
