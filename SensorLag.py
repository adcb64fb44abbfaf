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


"""First order sensor response (lag) correction of CTD temperature and conductivity
"""

import collections

import numpy as np
import scipy.optimize

from ProcLog import log_debug, log_info
import Profiles
import Utils

# Correction token, raw field and corrected field
sensor_lag_variables = (
    ("T", "temperature", "Tcor"),
    ("C", "conductivity", "Ccor"),
)

time_constant_option = {"T": "temp_time_constant", "C": "cond_time_constant"}

# Points in the common depth grid used to compare neighbouring profiles
num_depth_grid_points = 50


def clean_profile(profile, time_name="time"):
    """Remove unusable rows from a profile record

    Rows with any missing field are dropped, as are rows whose time does not
    increase over the previous kept row.

    Input:
        profile - dictionary of equal length vectors

    Returns:
        cleaned profile (OrderedDict), indices of the surviving rows in the input
    """
    names = list(profile.keys())
    if not names:
        return (collections.OrderedDict(), np.array([], dtype=int))
    num_rows = len(profile[names[0]])
    good_v = np.ones(num_rows, dtype=bool)
    for name in names:
        good_v = np.logical_and(good_v, np.logical_not(np.isnan(profile[name])))
    good_i_v = np.flatnonzero(good_v)

    if time_name in profile and len(good_i_v) > 1:
        time_v = np.asarray(profile[time_name])[good_i_v]
        prev_max_v = np.maximum.accumulate(time_v)[:-1]
        increasing_v = np.concatenate(([True], time_v[1:] > prev_max_v))
        good_i_v = good_i_v[increasing_v]

    cleaned = collections.OrderedDict(
        (name, np.asarray(profile[name])[good_i_v]) for name in names
    )
    return (cleaned, good_i_v)


def correct_time_response(values_v, time_v, time_constant):
    """Undo a first order sensor response: v + tau * dv/dt"""
    values_v = np.asarray(values_v, dtype=np.float64)
    time_v = np.asarray(time_v, dtype=np.float64)
    if len(values_v) < 2 or time_constant == 0:
        return values_v.copy()
    return values_v + time_constant * np.gradient(values_v, time_v)


def _profile_record(ts, rows_i_v, variable):
    return collections.OrderedDict(
        (
            ("time", ts["sciTime"][rows_i_v]),
            ("depth", ts["depth"][rows_i_v]),
            (variable, ts[variable][rows_i_v]),
        )
    )


def _profile_mismatch(profile_a, profile_b, variable, time_constant):
    """Mean absolute difference of two corrected profiles over their common depths"""
    min_depth = max(np.min(profile_a["depth"]), np.min(profile_b["depth"]))
    max_depth = min(np.max(profile_a["depth"]), np.max(profile_b["depth"]))
    if not max_depth > min_depth:
        return np.nan
    depth_grid_v = np.linspace(min_depth, max_depth, num_depth_grid_points)
    for profile in (profile_a, profile_b):
        if len(np.unique(profile["depth"])) < 2:
            return np.nan
    gridded = []
    for profile in (profile_a, profile_b):
        corrected_v = correct_time_response(
            profile[variable], profile["time"], time_constant
        )
        gridded.append(
            Utils.interp1_no_extrap(profile["depth"], corrected_v, depth_grid_v)
        )
    diff_v = np.abs(gridded[0] - gridded[1])
    if np.all(np.isnan(diff_v)):
        return np.nan
    return float(np.nanmean(diff_v))


def find_time_constant(ts, variable, opts):
    """Estimate the response time constant of a CTD variable from the whole record

    Consecutive profiles (a dive and the following climb) sample the same water in
    opposite directions, so the best time constant is the one making them agree.  Each
    pair gives an estimate, bounded to [0, max_time_constant]; the median is returned.

    Returns:
        time constant (s) or NaN if no pair of profiles could be used
    """
    if "profile_index" not in ts or "depth" not in ts or variable not in ts:
        return np.nan
    max_time_constant = opts.max_time_constant
    min_samples = max(opts.min_profile_samples, 3)
    num_casts = Profiles.num_profiles(ts["profile_index"])
    estimates = []
    for prf in range(1, num_casts):
        profile_a, _ = clean_profile(
            _profile_record(ts, Profiles.profile_rows(ts["profile_index"], prf), variable)
        )
        profile_b, _ = clean_profile(
            _profile_record(
                ts, Profiles.profile_rows(ts["profile_index"], prf + 1), variable
            )
        )
        if len(profile_a["time"]) < min_samples or len(profile_b["time"]) < min_samples:
            continue
        if np.isnan(_profile_mismatch(profile_a, profile_b, variable, 0.0)):
            continue
        result = scipy.optimize.minimize_scalar(
            lambda tc, a=profile_a, b=profile_b: _profile_mismatch(a, b, variable, tc),
            bounds=(0.0, max_time_constant),
            method="bounded",
        )
        if result.success and np.isfinite(result.x):
            log_debug(
                f"{variable} time constant for profiles {prf}/{prf + 1}: {result.x:.3f}"
            )
            estimates.append(result.x)
    if not estimates:
        return np.nan
    return float(np.median(estimates))


def apply_pressure_filter(time_v, pressure_v, opts):
    """Causal first order low pass filter of the pressure

    The filter state only advances over samples with both time and pressure present;
    missing samples stay missing.
    """
    time_v = np.asarray(time_v, dtype=np.float64)
    pressure_v = np.asarray(pressure_v, dtype=np.float64)
    time_constant = opts.pressure_filter_constant
    filtered_v = np.full(pressure_v.shape, np.nan)
    good_i_v = np.flatnonzero(
        np.logical_and(np.isfinite(time_v), np.isfinite(pressure_v))
    )
    if len(good_i_v) == 0:
        return filtered_v
    if time_constant <= 0:
        filtered_v[good_i_v] = pressure_v[good_i_v]
        return filtered_v
    state = pressure_v[good_i_v[0]]
    last_time = time_v[good_i_v[0]]
    filtered_v[good_i_v[0]] = state
    for ii in good_i_v[1:]:
        dt = max(time_v[ii] - last_time, 0.0)
        weight = 1.0 - np.exp(-dt / time_constant)
        state = state + weight * (pressure_v[ii] - state)
        filtered_v[ii] = state
        last_time = time_v[ii]
    return filtered_v


def apply_sensor_lag(ts, recipe, opts, collaborators):
    """Sensor lag correct temperature (T) and conductivity (C) profile by profile

    Adds Tcor/Ccor to ts.  A variable whose time constant cannot be found is
    dropped from the recipe and gets no corrected field.

    Returns:
        dictionary of token to the time constant used
    """
    time_constants = {}
    num_casts = Profiles.num_profiles(ts["profile_index"])
    for token, variable, cor_name in sensor_lag_variables:
        if token not in recipe:
            continue
        ts[cor_name] = np.full(ts.num_rows, np.nan)
        time_constant = getattr(opts, time_constant_option[token], None)
        if time_constant is None:
            time_constant = collaborators.find_time_constant(ts, variable, opts)
            log_info(f"{variable} time constant found ({token}): {time_constant}")
            if time_constant is None or np.isnan(time_constant):
                del ts[cor_name]
                recipe.drop(token, f"{variable} time constant could not be identified")
                continue
        time_constants[token] = time_constant

        for prf in range(1, num_casts + 1):
            rows_i_v = Profiles.profile_rows(ts["profile_index"], prf)
            profile, good_i_v = collaborators.clean_profile(
                _profile_record(ts, rows_i_v, variable)
            )
            if len(good_i_v) == 0:
                log_debug(f"No usable {variable} data in profile {prf}")
                continue
            ts[cor_name][rows_i_v[good_i_v]] = collaborators.correct_time_response(
                profile[variable], profile["time"], time_constant
            )
    return time_constants
