import logging
import os
import sys

AZURE_LOGGERS = [
    "azure",
    "azure.core.pipeline",
    "azure.identity",
    "azure.storage.blob",
]


def setup_logging(log_file: str = None) -> None:
    log_file = log_file or os.getenv("STORAGE_AUTH_LOG_FILE", "storage_auth.log")
    log_level_str = os.getenv("STORAGE_AUTH_LOG_LEVEL", "WARNING").upper()
    log_level = getattr(logging, log_level_str, logging.WARNING)
    # stdout carries the console report printed by DisplayManager
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file, mode="w"),
        ],
    )
    logging.info(f"Default logger initialized as {log_level_str}")
    azure_log_level_str = os.getenv("AZURE_LOG_LEVEL", "WARNING").upper()
    azure_log_level = getattr(logging, azure_log_level_str, logging.WARNING)
    for logger_name in AZURE_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(azure_log_level)
        logging.info(f"Logger {logger_name} initialized as {azure_log_level_str}")
