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


"""Agreement between the navigation and science time stamps
"""

import dataclasses

import numpy as np

from ProcLog import log_info

# Time stamps further apart than this many sampling periods are out of step
sync_period_factor = 2.5


@dataclasses.dataclass
class SyncInfo:
    """Outcome of a synchronization check"""

    synchronized: np.ndarray
    sampling_period: float
    threshold: float

    @property
    def num_synchronized(self) -> int:
        return int(np.count_nonzero(self.synchronized))

    @property
    def num_rows(self) -> int:
        return len(self.synchronized)


def check_synchronization(nav_time_v, sci_time_v):
    """Flag rows whose navigation and science time stamps agree

    A row is synchronized if |nav - sci| is at most sync_period_factor times the
    median navigation sampling period.  Rows with a missing time stamp are not
    synchronized.
    """
    nav_time_v = np.asarray(nav_time_v, dtype=np.float64)
    sci_time_v = np.asarray(sci_time_v, dtype=np.float64)
    lag_v = np.abs(nav_time_v - sci_time_v)
    if len(nav_time_v) > 1:
        sampling_period = float(np.nanmedian(np.diff(nav_time_v)))
    else:
        sampling_period = np.nan
    threshold = sync_period_factor * sampling_period
    with np.errstate(invalid="ignore"):
        synchronized_v = lag_v <= threshold
    sync_info = SyncInfo(synchronized_v, sampling_period, threshold)
    log_info(
        f"Sampling period {sampling_period:.3f}s, threshold {threshold:.3f}s: "
        f"{sync_info.num_synchronized}/{sync_info.num_rows} rows synchronized"
    )
    return sync_info


def remove_desynchronized(ts, sync_info):
    """Drop the rows that are not synchronized from every field of ts"""
    num_dropped = sync_info.num_rows - sync_info.num_synchronized
    if num_dropped:
        log_info(f"Removing {num_dropped} desynchronized rows")
        ts.filter_rows(sync_info.synchronized)
    return ts
