"""
Logging Configuration for the booking payment deployer

Provides structured logging with:
- Timestamps
- Log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- File rotation (1 file per day)
- Separate error log
- Console and file handlers
"""

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Optional


# Log directory (override with BOOKING_DEPLOYER_LOG_DIR)
LOG_DIR = Path(os.getenv("BOOKING_DEPLOYER_LOG_DIR", Path.cwd() / "logs"))

# Log formats
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    detailed: bool = False,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Setup a logger with console and file handlers.

    Args:
        name: Logger name (typically the package name)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file name (defaults to name.log)
        console: Whether to log to console
        detailed: Whether to use detailed format (includes file/line)
        log_dir: Directory for log files (defaults to LOG_DIR)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger("booking_deployer", level=logging.DEBUG)
        >>> logger.info("Deploying BookingPaymentContract")
        >>> logger.error("Deployment failed", exc_info=True)
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    # Choose format
    log_format = DETAILED_FORMAT if detailed else SIMPLE_FORMAT
    formatter = logging.Formatter(log_format, datefmt=DATE_FORMAT)

    # Console handler
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    directory = Path(log_dir) if log_dir is not None else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)

    # File handler with daily rotation
    if log_file is None:
        log_file = f"{name}.log"

    file_handler = TimedRotatingFileHandler(
        directory / log_file,
        when="midnight",
        interval=1,
        backupCount=30,  # Keep 30 days of logs
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Separate error log
    error_handler = RotatingFileHandler(
        directory / f"{name}_errors.log",
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(error_handler)

    return logger


def log_deployment(
    logger: logging.Logger,
    network: str,
    chain_id: int,
    address: str,
    deployer: str,
    block_number: int,
    tx_hash: Optional[str] = None,
) -> None:
    """
    Log a completed deployment in structured format (audit trail).

    Args:
        logger: Logger instance
        network: Network name
        chain_id: Chain ID
        address: Deployed contract address
        deployer: Deploying account
        block_number: Block the creation transaction landed in
        tx_hash: Creation transaction hash
    """
    msg = (
        f"DEPLOYED | {network} ({chain_id}) | Contract: {address} | "
        f"Deployer: {deployer} | Block: {block_number}"
    )
    if tx_hash:
        msg += f" | TX: {tx_hash}"
    logger.info(msg)


def get_cli_logger(debug: bool = False, log_dir: Optional[Path] = None) -> logging.Logger:
    """Get the package logger used by the command line entry point."""
    level = logging.DEBUG if debug else logging.INFO
    return setup_logger("booking_deployer", level=level, detailed=debug, log_dir=log_dir)
