"""
MIT License

Copyright (c) 2019-Present Jake Sichley

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

import datetime
import logging
import os
from typing import Optional, Tuple

import discord

cyan = '\x1b[36m'
yellow = '\x1b[33;20m'
blue = '\x1b[34m'
red = '\x1b[31;20m'
reset = '\x1b[0m'

bot_logger = logging.getLogger('RoleBot')

BASIC_FORMAT = '%(asctime)s: %(levelname)s [{tag}] - %(message)s (%(filename)s)'
DETAILED_FORMAT = '%(asctime)s: %(levelname)s [{tag}] - %(message)s (%(filename)s:%(funcName)s:%(lineno)d)'


def format_loggers(directory: Optional[str] = None) -> None:
    """
    Formats loggers for discord.py and RoleBot.
    Both loggers write to the standard stream and to a shared, timestamped file in the logs directory.

    Parameters:
        directory (Optional[str]): The directory to write log files to. Defaults to './logs'.

    Returns:
        None.
    """

    file_path = directory or os.path.join(os.getcwd(), 'logs')
    file_time_name = f"{str(datetime.datetime.today()).replace(':', '-').replace(' ', '-')}.txt"
    os.makedirs(file_path, exist_ok=True)
    log_file = os.path.join(file_path, file_time_name)

    # set up bot handlers
    bot_logger.setLevel(logging.INFO)
    bot_logger.addHandler(_stream_handler('RoleBot', (cyan, cyan, yellow, red, red)))
    bot_logger.addHandler(_file_handler('RoleBot', log_file))

    # set up discord handlers
    discord_handler = _stream_handler('discord.py', (blue, blue, yellow, red, red))
    discord_handler.addFilter(NoResumeFilter())
    discord.utils.setup_logging(formatter=discord_handler.formatter, handler=discord_handler, root=False)
    logging.getLogger('discord').addHandler(_file_handler('discord.py', log_file))


def _stream_handler(tag: str, colors: Tuple[str, str, str, str, str]) -> logging.Handler:
    """
    Creates a colored standard stream handler for the specified logger tag.

    Parameters:
        tag (str): The tag to prefix records with.
        colors (Tuple[str, str, str, str, str]): The colors to apply to each level.

    Returns:
        (logging.Handler).
    """

    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    handler.setFormatter(LevelFormatter(BASIC_FORMAT.format(tag=tag), DETAILED_FORMAT.format(tag=tag), colors))
    return handler


def _file_handler(tag: str, file: str) -> logging.Handler:
    """
    Creates an uncolored file handler for the specified logger tag.

    Parameters:
        tag (str): The tag to prefix records with.
        file (str): The log file.

    Returns:
        (logging.Handler).
    """

    handler = logging.FileHandler(file, encoding='utf-8')
    handler.setLevel(logging.INFO)
    handler.setFormatter(LevelFormatter(BASIC_FORMAT.format(tag=tag), DETAILED_FORMAT.format(tag=tag)))
    return handler


class LevelFormatter(logging.Formatter):
    """
    A logging.Formatter with custom formatting (and optionally coloring) based on logging level.
    Warnings and errors use the detailed format, which includes the function name and line number.

    Attributes:
        basic_format (str): A less-descriptive log format for info related events.
        detailed_format (str): A more-descriptive log format for warnings and errors.
        formats (Dict[int, str]): A dictionary of logging levels and their corresponding formats.
    """

    def __init__(
            self, basic_format: str, detailed_format: str, colors: Optional[Tuple[str, str, str, str, str]] = None
    ) -> None:
        """
        The constructor for the LevelFormatter class.

        Parameters:
            basic_format (str): A less-descriptive log format for info related events.
            detailed_format (str): A more-descriptive log format for warnings and errors.
            colors (Optional[Tuple[str, str, str, str, str]]): The colors to apply to each level. Could be None.

        Returns:
            None.
        """

        super().__init__(basic_format, datefmt='%I:%M %p on %A, %B %d, %Y')

        self.basic_format = basic_format
        self.detailed_format = detailed_format

        levels = (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL)
        level_formats = (basic_format, basic_format, detailed_format, detailed_format, detailed_format)

        if colors is None:
            self.formats = dict(zip(levels, level_formats))
        else:
            self.formats = {
                level: color + level_format + reset for level, level_format, color in zip(levels, level_formats, colors)
            }

    def format(self, record: logging.LogRecord) -> str:
        """
        Returns a formatted logging record.

        Parameters:
            record (logging.LogRecord): The logging record for an event.

        Returns:
            (str): The formatted record.
        """

        log_format = self.formats.get(record.levelno, self.basic_format)
        formatter = logging.Formatter(log_format, datefmt=self.datefmt)
        return formatter.format(record)


class NoResumeFilter(logging.Filter):
    """
    A logging.Filter that removes "RESUMED" events from discord.py logger.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Determine if the specified record is to be logged.
        Returns True if the record should be logged, or False otherwise.
        """

        return 'RESUMED' not in record.getMessage()
