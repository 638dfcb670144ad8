"""pipeline_console."""

from .monitoring.logger import configure_logger

# Configure logger with default settings (just console logging)
# create_app() reconfigures it from Settings
configure_logger()
