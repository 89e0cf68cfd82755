"""Environment setup and logging for homedash.

setup_environment() should be called before importing litellm so its
import-time chatter and warnings stay out of the terminal UI.
"""

import logging
import os
import warnings

LOGGER = logging.getLogger("homedash")


def setup_environment() -> None:
    """Configure warning filters and env vars before library imports."""
    warnings.filterwarnings("ignore", category=UserWarning)
    warnings.filterwarnings("ignore", category=DeprecationWarning)
    warnings.filterwarnings("ignore", category=FutureWarning)

    os.environ.setdefault("LITELLM_LOG", "ERROR")
    os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")


def configure_logging(level: str | None = None) -> None:
    """Route log records through Rich on stderr.

    *level* defaults to the ``LOG_LEVEL`` environment variable, then INFO.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                show_time=False,
                show_path=False,
                rich_tracebacks=False,
            )
        ],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
