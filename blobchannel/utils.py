#
# Copyright (c) 2022-2025, NVIDIA CORPORATION. All rights reserved.
#

import logging

import humanize

from blobchannel.const import DEFAULT_LOG_FORMAT


def get_logger(name: str, log_format: str = DEFAULT_LOG_FORMAT):
    """
    Create or retrieve a logger with the specified configuration.

    Args:
        name (str): The name of the logger.
        log_format (str, optional): Logging format.

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(log_format))
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def natural_size(num_bytes: int) -> str:
    """
    Format a byte count in human-readable form, e.g. '2.1 MB'.

    Args:
        num_bytes (int): Number of bytes.

    Returns:
        str: Human-readable size.
    """
    return humanize.naturalsize(num_bytes)
