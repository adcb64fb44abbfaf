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


"""Range checks applied to the processed timeseries
"""

import numpy as np

from CorrectionRecipe import thermal_lag_salinity_names
from ProcLog import log_info
import Utils

temperature_range = (10.0, 40.0)
salinity_range = (2.0, 40.0)


def qc_ranges():
    """Dictionary of field name to the (min, max) range of plausible values"""
    ranges = {
        "temperature": temperature_range,
        "Tcor": temperature_range,
        "salinity": salinity_range,
    }
    for name in thermal_lag_salinity_names():
        ranges[name] = salinity_range
    return ranges


def assert_range(values_v, min_val, max_val, name):
    """NaN out values strictly outside [min_val, max_val]

    Returns:
        indices of the values changed
    """
    with np.errstate(invalid="ignore"):
        bad_i_v = np.flatnonzero(
            np.logical_or(values_v < min_val, values_v > max_val)
        )
    if len(bad_i_v):
        values_v[bad_i_v] = np.nan
        log_info(
            "Changed (%d/%d) %s of %s to NaN because out of range [%g, %g]"
            % (
                len(bad_i_v),
                len(values_v),
                Utils.succinct_elts(bad_i_v),
                name,
                min_val,
                max_val,
            ),
            loc="parent",
        )
    return bad_i_v


def qc_checks(ts, ranges=None):
    """Apply the range checks to every field of ts that has one

    Returns:
        dictionary of field name to the indices set to NaN
    """
    if ranges is None:
        ranges = qc_ranges()
    changed = {}
    for name, values_v in list(ts.items()):
        if name not in ranges:
            continue
        min_val, max_val = ranges[name]
        values_v = np.array(values_v, dtype=np.float64)
        bad_i_v = assert_range(values_v, min_val, max_val, name)
        if len(bad_i_v):
            ts[name] = values_v
            changed[name] = bad_i_v
    return changed
