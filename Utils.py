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

"""Misc utility routines"""

# Important note - no routines included in this file should rely on other
# pipeline modules (other than ProcLog) to avoid circular references when loading

import gsw
import numpy as np
import scipy.interpolate
import seawater

from ProcLog import log_error

# Conductivity at S=35, T=15, P=0 in S/m, where conductivity ratio is 1
c3515_S_m = seawater.constants.c3515 / 10.0


def ddmm2dd(x):
    """Converts a lat/long from ddmm.mmm to dd.dddd

    Input: x - float or array in ddmm.mm format; NaN stays NaN

    Returns: dd.ddd format of input
    """
    x = np.asarray(x, dtype=np.float64)
    abs_x = np.abs(x)
    return np.sign(x) * (np.floor(abs_x / 100.0) + np.mod(abs_x, 100.0) / 60.0)


def unique(s):
    """Return a sorted array of the unique values in s"""
    return np.unique(np.asarray(s))


def succinct_elts(elts, matlab_offset=1):
    """Return a string of elts, succinctly showing runs of consecutive values, if any
    Inputs:
    elts - a set of integers
    matlab_offset - offset to use if these are NOT indices

    Returns:
    selts - a succinct string
    """
    elts = unique(elts).astype(int) + matlab_offset
    selts = ""
    prefix = ""
    if len(elts):
        diff_elts = np.diff(elts)
        breaks_i_v = list(np.flatnonzero(diff_elts > 1))
        breaks_i_v.append(len(elts) - 1)  # add the final point
        last_i = 0
        for break_i in breaks_i_v:
            nelts = elts[break_i] - elts[last_i]
            if nelts == 0:
                selts = "%s%s%d" % (selts, prefix, elts[break_i])
            elif nelts == 1:
                selts = "%s%s%d %d" % (selts, prefix, elts[last_i], elts[break_i])
            else:
                selts = "%s%s%d:%d" % (selts, prefix, elts[last_i], elts[break_i])
            last_i = break_i + 1
            prefix = " "
    return selts


def _support(x_v, y_v):
    """Points where both x and y are finite, with duplicate x values removed (first kept)"""
    good_i_v = np.flatnonzero(np.logical_and(np.isfinite(x_v), np.isfinite(y_v)))
    _, first_i_v = np.unique(x_v[good_i_v], return_index=True)
    good_i_v = good_i_v[first_i_v]
    return x_v[good_i_v], y_v[good_i_v]


def interp1_no_extrap(x_v, y_v, xx_v):
    """Linear interpolation of y(x) at xx using the finite support points only

    Values of xx outside the support (or NaN) are returned as NaN
    """
    x_v = np.asarray(x_v, dtype=np.float64)
    y_v = np.asarray(y_v, dtype=np.float64)
    xx_v = np.asarray(xx_v, dtype=np.float64)
    sx_v, sy_v = _support(x_v, y_v)
    if len(sx_v) < 2:
        log_error(
            f"Need at least two support points to interpolate - have {len(sx_v)}"
        )
        return np.full(xx_v.shape, np.nan)
    return scipy.interpolate.interp1d(
        sx_v, sy_v, kind="linear", bounds_error=False, fill_value=np.nan
    )(xx_v)


def interp1_extrap(x_v, y_v, xx_v):
    """Linear interpolation of y(x) at xx, linearly extrapolating past the support ends"""
    x_v = np.asarray(x_v, dtype=np.float64)
    y_v = np.asarray(y_v, dtype=np.float64)
    xx_v = np.asarray(xx_v, dtype=np.float64)
    sx_v, sy_v = _support(x_v, y_v)
    if len(sx_v) == 0:
        return np.full(xx_v.shape, np.nan)
    if len(sx_v) == 1:
        # Nothing to extrapolate from - hold the single value
        return np.where(np.isfinite(xx_v), sy_v[0], np.nan)
    return scipy.interpolate.interp1d(
        sx_v, sy_v, kind="linear", bounds_error=False, fill_value="extrapolate"
    )(xx_v)


def distance_over_ground(lon_v, lat_v):
    """Cumulative distance (km) along the track, starting at 0"""
    lon_v = np.asarray(lon_v, dtype=np.float64)
    lat_v = np.asarray(lat_v, dtype=np.float64)
    if len(lon_v) < 2:
        return np.zeros(len(lon_v))
    step_m_v = gsw.distance(lon_v, lat_v)
    return np.concatenate(([0.0], np.cumsum(step_m_v) / 1000.0))


def depth_from_pressure(pressure, latitude):
    """Depth (m) from pressure (dbar) using the seawater toolbox"""
    return seawater.dpth(pressure, latitude)


def cond_ratio(conductivity):
    """Conductivity ratio of a conductivity in S/m"""
    return np.asarray(conductivity, dtype=np.float64) / c3515_S_m


def salinity_from_cond_ratio(cond_ratio_v, temperature, pressure):
    """Practical salinity using the seawater toolbox"""
    return seawater.salt(cond_ratio_v, temperature, pressure)


def density(salinity, temperature, pressure):
    """In-situ density (kg/m^3) using the seawater toolbox"""
    return seawater.dens(salinity, temperature, pressure)
