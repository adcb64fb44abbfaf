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


"""Building the master time base: ordering, gap interpolation and trimming
"""

import numpy as np

from ProcLog import log_debug, log_error, log_info
import Utils

# Fewer rows than this at any stage and there is nothing to process
min_rows = 3


def enough_rows(num_rows, stage):
    """True if num_rows is enough to continue, logging the failure otherwise"""
    if num_rows < min_rows:
        log_error(f"Only {num_rows} rows left {stage} - nothing to process")
        return False
    return True


def build_time_base(data, time_col):
    """Order the raw data by the master time channel

    Input:
        data - 2-D sample matrix
        time_col - column of the master time channel

    Returns:
        rows of data with a time stamp, stably sorted by time, or None if too few remain
    """
    if not enough_rows(data.shape[0], "in the raw record"):
        return None

    has_time_v = np.logical_not(np.isnan(data[:, time_col]))
    num_dropped = data.shape[0] - np.count_nonzero(has_time_v)
    if num_dropped:
        log_info(f"Dropped {num_dropped} rows without a time stamp")
    data = data[has_time_v, :]
    if not enough_rows(data.shape[0], "with a time stamp"):
        return None

    order_i_v = np.argsort(data[:, time_col], kind="stable")
    return data[order_i_v, :]


def interpolate_gaps(ts, time_name, control_names):
    """Fill the gaps of the control channels by linear interpolation in time

    A channel with more than one but not all of its values present is interpolated at
    every time stamp from its present values.  There is no extrapolation, so values
    before the first or after the last support point stay NaN.

    Input:
        ts - TimeSeries holding time_name and control_names; updated in place
    """
    time_v = ts[time_name]
    num_rows = len(time_v)
    for name in control_names:
        if name not in ts:
            continue
        values_v = ts[name]
        good_i_v = np.flatnonzero(np.logical_not(np.isnan(values_v)))
        if 1 < len(good_i_v) < num_rows:
            log_debug(
                f"Interpolating {num_rows - len(good_i_v)} missing points of {name}"
            )
            ts[name] = Utils.interp1_no_extrap(
                time_v[good_i_v], values_v[good_i_v], time_v
            )
    return ts


def trim_unreferenced(ts, reference_names):
    """Drop rows lacking any of the reference (time and position) channels

    Returns:
        boolean mask of the rows kept, so other row aligned data can follow
    """
    good_v = np.ones(ts.num_rows or 0, dtype=bool)
    for name in reference_names:
        good_v = np.logical_and(good_v, np.logical_not(np.isnan(ts[name])))
    num_dropped = len(good_v) - np.count_nonzero(good_v)
    log_info(f"Found {num_dropped} records without spatio-temporal reference")
    if num_dropped:
        ts.filter_rows(good_v)
    return good_v


def fill_science_time(sci_time_v):
    """Fill missing science time stamps assuming regular sampling across the gaps"""
    sci_time_v = np.asarray(sci_time_v, dtype=np.float64)
    bad_i_v = np.flatnonzero(np.isnan(sci_time_v))
    if len(bad_i_v) == 0 or len(bad_i_v) == len(sci_time_v):
        return sci_time_v
    log_info(
        "Filled (%d/%d) %s science time stamps"
        % (len(bad_i_v), len(sci_time_v), Utils.succinct_elts(bad_i_v))
    )
    index_v = np.arange(len(sci_time_v), dtype=np.float64)
    return Utils.interp1_extrap(index_v, sci_time_v, index_v)
