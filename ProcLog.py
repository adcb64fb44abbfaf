#! /usr/bin/env python
# -*- python-fmt -*-

## Copyright (c) 2023, 2024, 2025  University of Washington.
##
## Redistribution and use in source and binary forms, with or without
## modification, are permitted provided that the following conditions are met:
##
## 1. Redistributions of source code must retain the above copyright notice, this
##    list of conditions and the following disclaimer.
##
## 2. Redistributions in binary form must reproduce the above copyright notice,
##    this list of conditions and the following disclaimer in the documentation
##    and/or other materials provided with the distribution.
##
## 3. Neither the name of the University of Washington nor the names of its
##    contributors may be used to endorse or promote products derived from this
##    software without specific prior written permission.
##
## THIS SOFTWARE IS PROVIDED BY THE UNIVERSITY OF WASHINGTON AND CONTRIBUTORS “AS
## IS” AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
## IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
## DISCLAIMED. IN NO EVENT SHALL THE UNIVERSITY OF WASHINGTON OR CONTRIBUTORS BE
## LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
## CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE
## GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION)
## HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
## LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT
## OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

""" Logging for the glider processing pipeline """

import logging
import os
import sys
import traceback
from typing import Any, Dict, List

#                 debug,    info,      warning, error,    critical
_stack_options = ["caller", "caller", "caller", "caller", "exc"]

# Messages issued before ProcLogger is set up land here (and in pytest's caplog)
_default_log = logging.getLogger("GliderProc")


class ProcLogger:
    """
    ProcLogger: for use by all pipeline stages and the command line driver
    """

    self = None  # the global instance
    is_initialized = False
    opts = None  # whatever starting options
    log: logging.Logger = _default_log

    # warnings, errors, and criticals are always enabled
    # -v turns on log_info, --debug turns on log_debug
    debug_enabled = info_enabled = False
    debug_loc, info_loc, warning_loc, error_loc, critical_loc = _stack_options

    # Alerts are keyed by a section and are an appended list of strings
    alerts_d: Dict[str, List[str]] = {}

    def __init__(self, opts: Any) -> None:
        """
        Initializes the logger, according to options (opts).
        """
        if ProcLogger.is_initialized:
            return

        ProcLogger.self = self
        ProcLogger.opts = opts
        ProcLogger.log = logging.getLogger("GliderProc")
        ProcLogger.log.setLevel(logging.DEBUG)

        proc_log = getattr(opts, "proc_log", None)
        if proc_log:
            self.setHandler(logging.FileHandler(proc_log), opts)

        # always create a console handler
        self.setHandler(logging.StreamHandler(), opts)

        ProcLogger.is_initialized = True
        log_info("Process id = %d" % os.getpid())
        if getattr(opts, "config_file_not_found", False):
            log_warning(f"Config file {opts.config_file_name} was not found")

    def setHandler(self, handle: logging.Handler, opts: Any) -> None:
        """
        Set a logging handle.
        """
        formatter = logging.Formatter("%(levelname)s: %(message)s")

        if opts is not None and getattr(opts, "debug", False):
            ProcLogger.debug_enabled = True
            ProcLogger.info_enabled = True
            handle.setLevel(logging.DEBUG)
        elif opts is not None and getattr(opts, "verbose", False):
            ProcLogger.info_enabled = True
            handle.setLevel(logging.INFO)
        else:
            handle.setLevel(logging.WARNING)

        handle.setFormatter(formatter)
        ProcLogger.log.addHandler(handle)

        logging.captureWarnings(True)
        logging.getLogger("py.warnings").addHandler(handle)

    @staticmethod
    def reset() -> None:
        """Drop all handlers and state - used between command line runs and by tests"""
        warnings_log = logging.getLogger("py.warnings")
        for handle in list(ProcLogger.log.handlers):
            ProcLogger.log.removeHandler(handle)
            warnings_log.removeHandler(handle)
        logging.captureWarnings(False)
        ProcLogger.is_initialized = False
        ProcLogger.self = None
        ProcLogger.opts = None
        ProcLogger.debug_enabled = ProcLogger.info_enabled = False
        ProcLogger.alerts_d = {}


def __log_caller_info(s: object, loc: str | None) -> str:
    """Add stack or module: line number info for log caller to given string
    Input:
    s - object to be logged

    Return:
    string with possible location information added
    """
    s = str(s)
    if loc:
        try:
            # __log_caller_info(); log_XXXX; <caller>
            offset = 3
            if loc in ["caller", "parent"]:
                if loc == "parent":  # A utility routine
                    offset = offset + 1
                frame = traceback.extract_stack(None, offset)[0]
                module, lineno, _, _ = frame
                module = os.path.basename(module)
                s = "%s(%d): %s" % (module, lineno, s)
            elif loc == "exc":
                exc = traceback.format_exc()
                if exc and not exc.startswith("NoneType: None"):
                    s = "%s:\n%s" % (s, exc)
            else:  # unknown location request
                s = "(%s?): %s" % (loc, s)
        except Exception:
            pass
    return s


def log_alerts() -> Dict[str, List[str]]:
    """Fetches the alerts dictionary"""
    return ProcLogger.alerts_d


def _log_alert(key: str, s: str) -> None:
    """Log a general alert"""
    ProcLogger.alerts_d.setdefault(key, []).append(s)


# alert=None argument is optional to the log_X functions
# for easy searching, call like:
# log_warning("Dropped TH correction",alert='Salinity processing')


def log_critical(
    s: object, loc: str | None = ProcLogger.critical_loc, alert: str | None = None
) -> None:
    """Report string to the log as a CRITICAL error"""
    if alert:
        _log_alert(alert, "CRITICAL: %s" % s)
    ProcLogger.log.critical(__log_caller_info(s, loc))


def log_error(
    s: object, loc: str | None = ProcLogger.error_loc, alert: str | None = None
) -> None:
    """Report string to the log as an ERROR"""
    if alert:
        _log_alert(alert, f"ERROR: {s}")
    ProcLogger.log.error(__log_caller_info(s, loc))


def log_warning(
    s: object, loc: str | None = ProcLogger.warning_loc, alert: str | None = None
) -> None:
    """Report string to the log as a WARNING
    Input:
    s - string to be logged
    alert - string indicating the class of alert this warning should be assigned to
    """
    if alert:
        _log_alert(alert, f"WARNING: {s}")
    ProcLogger.log.warning(__log_caller_info(s, loc))


def log_info(
    s: object, loc: str | None = ProcLogger.info_loc, alert: str | None = None
) -> None:
    """Report string to the log as INFO"""
    if not ProcLogger.info_enabled:
        return
    if alert:
        _log_alert(alert, f"INFO: {s}")
    ProcLogger.log.info(__log_caller_info(s, loc))


def log_debug(
    s: object, loc: str | None = ProcLogger.debug_loc, alert: str | None = None
) -> None:
    """Report string to the log as DEBUG info"""
    if not ProcLogger.debug_enabled:
        return
    if alert:
        _log_alert(alert, f"DEBUG: {s}")
    ProcLogger.log.debug(__log_caller_info(s, loc))


if __name__ == "__main__":
    ProcLogger(None)
    log_warning("ProcLog self test", alert="Self test")
    sys.stdout.write(f"{log_alerts()}\n")
