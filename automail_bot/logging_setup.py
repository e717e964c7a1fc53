from loguru import logger
import sys
import os

LOG_DIR = os.getenv("AUTOMAIL_LOG_DIR", "logs")


def configure_logging(log_dir: str = LOG_DIR, console_level: str = "INFO") -> None:
    """Route loguru output to stderr and a daily rotated file"""
    # Create logs directory if it doesn't exist
    os.makedirs(log_dir, exist_ok=True)

    logger.remove()  # Remove default handler

    # Add console handler
    logger.add(sys.stderr, level=console_level)

    # Add file handler with more verbosity for debugging
    logger.add(
        os.path.join(log_dir, "automail_{time:YYYY-MM-DD}.log"),
        rotation="1 day",    # New file is created each day
        retention="1 week",  # Logs are kept for 1 week
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} - {message}",
        backtrace=True,
        diagnose=True
    )


def get_logger(name):
    """Get a logger with the specified name"""
    return logger.bind(name=name)
