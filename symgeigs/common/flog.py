'''
Console and file logging with indentation levels for the eigensolvers.

The solvers report restarts, convergence and numerical failures through a
single Logger object. It wraps a standard library logger, prefixes messages
with tab-indentation and optionally colours them for terminals.

@note File logging is enabled by setting the environment variable PYLOGFILE to a non-zero value.
@note Coloured output is disabled by setting the environment variable PYLOGCOLORS to '0'.
@note The default level of the global logger is read from SYMGEIGS_LOGLEVEL ('debug', 'info', ...).

-------------------------------------------------------
file        :   symgeigs/common/flog.py
date        :   2026-10-19
-------------------------------------------------------
'''

__all__         = [
    "Logger",
    "Colors",
    "get_global_logger"
]

import os
import re
import sys
import logging
import threading
from datetime import datetime
from typing import Optional

######################################################
#! COLORS
######################################################

class Colors:
    """
    ANSI colour codes for console output.
    """

    black   = "\033[30m"
    red     = "\033[31m"
    green   = "\033[32m"
    yellow  = "\033[33m"
    blue    = "\033[34m"
    white   = "\033[0m"  # reset

    def __init__(self, color : str):
        self.color = color

    def __str__(self) -> str:
        return getattr(Colors, str(self.color).lower(), Colors.white)

    def __repr__(self) -> str:
        return str(self)

    def __call__(self, text: str) -> str:
        return f"{str(self)}{text}{Colors.white}"

_ansi_escape = re.compile(r'\x1b\[[0-9;]*m')

class StripAnsiFormatter(logging.Formatter):
    '''Formatter for log files, removes colour codes.'''
    def format(self, record):
        msg = super().format(record)
        return _ansi_escape.sub('', msg)

######################################################
#! LOGGER
######################################################

ENV_LOGGER_FILE     = 'PYLOGFILE'
ENV_LOGGER_COLORS   = 'PYLOGCOLORS'
ENV_LOGGER_LEVEL    = 'SYMGEIGS_LOGLEVEL'

class Logger:
    """
    Logger class for handling console and file logging with verbosity control.
    """

    LEVELS = {
        logging.DEBUG   : 'debug',
        logging.INFO    : 'info',
        logging.WARNING : 'warning',
        logging.ERROR   : 'error'
    }

    LEVELS_R = {v: k for k, v in LEVELS.items()}

    def __init__(self,
                name            : str                   = "symgeigs",
                logfile         : Optional[str]         = None,
                lvl             : int                   = logging.INFO,
                use_ts_in_cmd   : bool                  = False):
        """
        Initialize the logger instance.

        Args:
            name (str):
                Name of the underlying standard library logger.
            logfile (str):
                Name of the log file. Used only when PYLOGFILE is set.
            lvl (int | str):
                Logging level (default: logging.INFO), also accepts 'debug', 'info', ...
            use_ts_in_cmd (bool):
                Whether to prefix console output with a timestamp.
        """
        self.now_str            = datetime.now().strftime("%d_%m_%Y_%H-%M_%S")
        self.lvl                = Logger.LEVELS_R.get(lvl.lower(), logging.INFO) if isinstance(lvl, str) else lvl
        self.has_colors         = sys.stdout.isatty() and os.environ.get(ENV_LOGGER_COLORS, '1') != '0'
        self.logfile            = None

        self.logger             = logging.getLogger(name)
        self.logger.setLevel(self.lvl)
        self.logger.propagate   = False

        # one console handler per logger name
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)
            h.close()

        console_fmt = '%(asctime)s [%(levelname)s] %(message)s' if use_ts_in_cmd else '[%(levelname)s] %(message)s'
        ch          = logging.StreamHandler(sys.stdout)
        ch.setLevel(self.lvl)
        ch.setFormatter(logging.Formatter(console_fmt, datefmt="%d_%m_%Y_%H-%M_%S"))
        self.logger.addHandler(ch)

        if logfile is not None and os.environ.get(ENV_LOGGER_FILE, '0') != '0':
            base = logfile[:-4] if logfile.endswith('.log') else logfile
            self.configure("./log", base if len(base) > 0 else self.now_str)

    # --------------------------------------------------------------

    @staticmethod
    def colorize(txt: str, color: Optional[str]) -> str:
        """
        Apply color to the given text (for console output).
        """
        if not color or color.lower() == 'white':
            return str(txt)
        return Colors(color)(txt)

    # --------------------------------------------------------------

    def configure(self, directory: str, base_name: str):
        """
        Attach a file handler writing to ``directory/base_name.log``.
        """
        os.makedirs(directory, exist_ok=True)
        self.logfile    = os.path.join(directory, f'{base_name}.log')
        fh              = logging.FileHandler(self.logfile, encoding='utf-8')
        fh.setLevel(self.lvl)
        fh.setFormatter(StripAnsiFormatter('%(asctime)s [%(levelname)s] %(message)s', datefmt="%d_%m_%Y_%H-%M-%S"))
        self.logger.addHandler(fh)
        self.logger.info(f"Log file created: {self.logfile}")

    # --------------------------------------------------------------

    @staticmethod
    def print_tab(lvl=0) -> str:
        return '\t' * lvl + ('->' if lvl > 0 else '')

    @staticmethod
    def print(msg: str, lvl=0) -> str:
        return f"{Logger.print_tab(lvl)}{msg}"

    # --------------------------------------------------------------

    def _emit(self, level: int, msg: str, lvl: int, verbose: bool, color: Optional[str]):
        if not verbose:
            return
        if color is not None and self.has_colors:
            msg = self.colorize(msg, color)
        self.logger.log(level, Logger.print(msg, lvl))

    def info(self, msg: str, lvl=0, verbose=True, color=None):
        """
        Log an informational message if verbosity is enabled.

        Args:
            msg (str)       : Message to log.
            lvl (int)       : Indentation level.
            verbose (bool)  : Log if True (default: True).
        """
        self._emit(logging.INFO, msg, lvl, verbose, color)

    def debug(self, msg: str, lvl=0, verbose=True, color=None):
        self._emit(logging.DEBUG, msg, lvl, verbose, color)

    def warning(self, msg: str, lvl=0, verbose=True, color='yellow'):
        self._emit(logging.WARNING, msg, lvl, verbose, color)

    def error(self, msg: str, lvl=0, verbose=True, color='red'):
        self._emit(logging.ERROR, msg, lvl, verbose, color)

######################################################

_G_LOGGER     = None
_G_LOGGER_PID = None
_G_LOCK       = threading.Lock()

def get_global_logger(**kwargs) -> Logger:
    """
    One Logger per process (PID), safe across threads and forks.

    Args:
        **kwargs: Arguments passed to the Logger constructor on first use.

    Example
    -------
        >>> logger = get_global_logger()
        >>> logger.info("Restart 3: 2 of 4 Ritz pairs converged", lvl=1)
    """
    global  _G_LOGGER, _G_LOGGER_PID
    pid     = os.getpid()

    if _G_LOGGER is not None and _G_LOGGER_PID == pid:
        return _G_LOGGER

    with _G_LOCK:
        if _G_LOGGER is not None and _G_LOGGER_PID == pid:
            return _G_LOGGER

        _G_LOGGER       = Logger(
            name            = kwargs.get("name",            "symgeigs"),
            lvl             = kwargs.get("lvl",             os.environ.get(ENV_LOGGER_LEVEL, logging.INFO)),
            use_ts_in_cmd   = kwargs.get("use_ts_in_cmd",   True),
            logfile         = kwargs.get("logfile",         None),
        )
        _G_LOGGER_PID   = pid
        return _G_LOGGER

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
