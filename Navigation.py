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


"""Navigation derived products: transects and pitch
"""

import numpy as np

from ProcLog import log_info


def forward_fill(values_v):
    """Replace each NaN by the last preceding non-NaN value (leading NaNs stay)"""
    values_v = np.asarray(values_v, dtype=np.float64)
    good_v = np.logical_not(np.isnan(values_v))
    last_i_v = np.where(good_v, np.arange(len(values_v)), 0)
    np.maximum.accumulate(last_i_v, out=last_i_v)
    return values_v[last_i_v]


def find_transects(nav_time_v, wpt_lon_v=None, wpt_lat_v=None):
    """Split the record into transects at the times the commanded waypoint changes

    Returns:
        list of (start time, end time) pairs covering the record
    """
    nav_time_v = np.asarray(nav_time_v, dtype=np.float64)
    if len(nav_time_v) == 0:
        return []
    boundaries = [nav_time_v[0]]
    if wpt_lon_v is not None and wpt_lat_v is not None:
        lon_v = forward_fill(wpt_lon_v)
        lat_v = forward_fill(wpt_lat_v)
        known_v = np.logical_and(np.isfinite(lon_v), np.isfinite(lat_v))
        known_i_v = np.flatnonzero(known_v)
        if len(known_i_v) > 1:
            changed_v = np.logical_or(
                np.diff(lon_v[known_i_v]) != 0, np.diff(lat_v[known_i_v]) != 0
            )
            for change_i in known_i_v[1:][changed_v]:
                if nav_time_v[change_i] > boundaries[-1]:
                    boundaries.append(nav_time_v[change_i])
    else:
        log_info("No waypoint vars found to identify transects")
    if nav_time_v[-1] > boundaries[-1] or len(boundaries) == 1:
        boundaries.append(nav_time_v[-1])
    return [(boundaries[ii], boundaries[ii + 1]) for ii in range(len(boundaries) - 1)]


def fill_pitch(pitch_v, num_rows, default_pitch_deg):
    """Pitch in radians, using default_pitch_deg when the glider reported none"""
    if pitch_v is None or np.all(np.isnan(pitch_v)):
        log_info(f"No pitch reported - assuming {default_pitch_deg} degrees")
        return np.full(num_rows, np.deg2rad(default_pitch_deg))
    return np.asarray(pitch_v, dtype=np.float64)
