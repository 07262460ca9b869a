from typing import Optional

from loguru import logger

from retailsim.config import AppConfig, load_config

class AppLogger:
    """Global logger configuration for the application.

    Sets the log level from the given AppConfig (or a freshly loaded one).
    """
    def __init__(self, config: Optional[AppConfig] = None) -> None:
        config = config or load_config()
        log_level = config.log_level.upper()
        logger.remove()
        logger.add(
            sink=lambda msg: print(msg, end=""),
            level=log_level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        )
        self.logger = logger

    def get_logger(self, name: str = None):
        """Get the configured logger instance.

        Args:
            name (str, optional): Name for the logger context. Defaults to None.
        Returns:
            loguru.Logger: The configured logger instance.
        """
        if name:
            return self.logger.bind(name=name)
        return self.logger

def get_logger(name: str = None, config: Optional[AppConfig] = None):
    """Get a new application logger for the given config."""
    return AppLogger(config).get_logger(name)
