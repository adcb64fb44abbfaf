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


"""Thermal lag correction of unpumped glider CTD salinity

The conductivity cell's thermal inertia is modelled with the recursive filter of
Lueck (1990) and Morison (1994), with the flow dependent parameters of
Garau et al. (2011):

    alpha = alpha_offset + alpha_slope / u
    tau   = tau_offset + tau_slope / sqrt(u)

where u is the flow speed through the cell.
"""

import collections

import numpy as np
import scipy.optimize

from CorrectionRecipe import (
    THERMAL_LAG,
    conductivity_variants,
    salinity_field_name,
    slots_from_meaning,
    temperature_variants,
    valid_meaning,
)
from ProcLog import log_debug, log_info, log_warning
import Profiles
import SensorLag
import Utils

# Initial guess and bounds of (alpha_offset, alpha_slope, tau_offset, tau_slope)
thermal_params_guess = np.array([0.0135, 0.0264, 7.1499, 2.7858])
thermal_params_bounds = ((0.0, 2.0), (0.0, 1.0), (0.0, 60.0), (0.0, 60.0))

# Conductivity sensitivity to temperature (S/m/degC), Morison et al. (1994)
dcond_dtemp_offset = 0.1
dcond_dtemp_slope = 0.0006


def flow_speed(time_v, depth_v, pitch_v, min_flow_speed):
    """Speed (m/s) of the water through the conductivity cell

    The glider's speed along its path, |dz/dt| / |sin(pitch)|, no slower than min_flow_speed
    """
    if len(time_v) < 2:
        return np.full(len(time_v), min_flow_speed)
    dz_dt_v = np.gradient(depth_v, time_v)
    with np.errstate(divide="ignore", invalid="ignore"):
        speed_v = np.abs(dz_dt_v) / np.abs(np.sin(pitch_v))
    speed_v[np.logical_not(np.isfinite(speed_v))] = min_flow_speed
    return np.maximum(speed_v, min_flow_speed)


def correct_thermal_lag(profile, params, min_flow_speed=0.05):
    """Estimate the temperature inside the conductivity cell

    Input:
        profile - dictionary with ptime, depth, temp, cond and pitch vectors (cleaned)
        params - alpha_offset, alpha_slope, tau_offset, tau_slope

    Returns:
        OrderedDict with temp_in_cell and cond_outside
    """
    time_v = np.asarray(profile["ptime"], dtype=np.float64)
    temp_v = np.asarray(profile["temp"], dtype=np.float64)
    cond_v = np.asarray(profile["cond"], dtype=np.float64)
    num_points = len(time_v)

    corrected = collections.OrderedDict()
    if num_points < 2:
        corrected["temp_in_cell"] = temp_v.copy()
        corrected["cond_outside"] = cond_v.copy()
        return corrected

    alpha_offset, alpha_slope, tau_offset, tau_slope = params
    speed_v = flow_speed(
        time_v, np.asarray(profile["depth"]), np.asarray(profile["pitch"]), min_flow_speed
    )[:-1]
    alpha_v = alpha_offset + alpha_slope / speed_v
    tau_v = tau_offset + tau_slope / np.sqrt(speed_v)

    dtime_v = np.diff(time_v)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio_v = dtime_v / tau_v
    # tau of 0 is an instantaneous response - no lag to correct
    ratio_v[np.logical_not(np.isfinite(ratio_v))] = np.inf
    coef_a_v = 2.0 * alpha_v / (2.0 + ratio_v)
    coef_b_v = 1.0 - 4.0 / (2.0 + ratio_v)
    coef_a_v[np.isinf(ratio_v)] = 0.0
    coef_b_v[np.isinf(ratio_v)] = 1.0

    dcond_dtemp_v = dcond_dtemp_offset + dcond_dtemp_slope * temp_v
    dtemp_v = np.diff(temp_v)

    temp_correction_v = np.zeros(num_points)
    cond_correction_v = np.zeros(num_points)
    for n in range(num_points - 1):
        temp_correction_v[n + 1] = (
            -coef_b_v[n] * temp_correction_v[n] + coef_a_v[n] * dtemp_v[n]
        )
        cond_correction_v[n + 1] = (
            -coef_b_v[n] * cond_correction_v[n]
            + coef_a_v[n] * dcond_dtemp_v[n] * dtemp_v[n]
        )

    corrected["temp_in_cell"] = temp_v - temp_correction_v
    corrected["cond_outside"] = cond_v + cond_correction_v
    return corrected


def ts_area(salinity_a_v, temp_a_v, salinity_b_v, temp_b_v):
    """Area enclosed by two opposite direction profiles joined in T-S space"""
    x_v = np.concatenate((salinity_a_v, salinity_b_v))
    y_v = np.concatenate((temp_a_v, temp_b_v))
    good_v = np.logical_and(np.isfinite(x_v), np.isfinite(y_v))
    x_v = x_v[good_v]
    y_v = y_v[good_v]
    if len(x_v) < 3:
        return np.inf
    return 0.5 * np.abs(np.dot(x_v, np.roll(y_v, -1)) - np.dot(y_v, np.roll(x_v, -1)))


def combined_profile(ts, rows_i_v, meaning):
    """The profile record a thermal lag correction works on

    meaning names the temperature and conductivity variants to use
    """
    temp_name, cond_name = _meaning_variables(meaning)
    return collections.OrderedDict(
        (
            ("ptime", ts["sciTime"][rows_i_v]),
            ("depth", ts["depth"][rows_i_v]),
            ("temp", ts[temp_name][rows_i_v]),
            ("cond", ts[cond_name][rows_i_v]),
            ("pitch", ts["pitch"][rows_i_v]),
        )
    )


def _meaning_variables(meaning):
    """(temperature variant, conductivity variant) named in meaning, in either order"""
    temp_name = cond_name = None
    for name in meaning:
        if name in temperature_variants:
            temp_name = name
        elif name in conductivity_variants:
            cond_name = name
    if temp_name is None or cond_name is None:
        raise ValueError(
            f"Thermal lag meaning {meaning} does not name a temperature and a conductivity"
        )
    return (temp_name, cond_name)


def _pair_params(profile_a, profile_b, pressure_a_v, pressure_b_v, opts):
    """Parameters minimizing the T-S area between two neighbouring profiles"""

    def area(params):
        salinities = []
        temps = []
        for profile, pressure_v in ((profile_a, pressure_a_v), (profile_b, pressure_b_v)):
            corrected = correct_thermal_lag(profile, params, opts.min_flow_speed)
            temps.append(corrected["temp_in_cell"])
            salinities.append(
                Utils.salinity_from_cond_ratio(
                    Utils.cond_ratio(profile["cond"]),
                    corrected["temp_in_cell"],
                    pressure_v,
                )
            )
        result = ts_area(salinities[0], temps[0], salinities[1], temps[1])
        return result if np.isfinite(result) else 1e6

    result = scipy.optimize.minimize(
        area,
        thermal_params_guess,
        method="L-BFGS-B",
        bounds=thermal_params_bounds,
        options={"maxiter": 100},
    )
    if not np.all(np.isfinite(result.x)):
        return None
    return result.x


def find_thermal_lag_params(ts, opts):
    """Identify thermal lag parameters for every available temperature/conductivity pair

    Each pair of consecutive profiles gives an estimate; the median is used.

    Returns:
        list of parameter rows, list of meanings (temperature, conductivity); rows
        for which nothing could be fit are all NaN
    """
    params_rows = []
    meanings = []
    num_casts = Profiles.num_profiles(ts["profile_index"])
    min_samples = max(opts.min_profile_samples, 3)
    for temp_name in temperature_variants:
        for cond_name in conductivity_variants:
            if temp_name not in ts or cond_name not in ts:
                continue
            meaning = (temp_name, cond_name)
            estimates = []
            for prf in range(1, num_casts):
                profiles = []
                for p in (prf, prf + 1):
                    rows_i_v = Profiles.profile_rows(ts["profile_index"], p)
                    profile, good_i_v = clean_combined_profile(ts, rows_i_v, meaning)
                    profiles.append((profile, ts["pressure"][rows_i_v[good_i_v]]))
                if min(len(p[0]["ptime"]) for p in profiles) < min_samples:
                    continue
                params = _pair_params(
                    profiles[0][0], profiles[1][0], profiles[0][1], profiles[1][1], opts
                )
                if params is not None:
                    estimates.append(params)
            if estimates:
                row = np.median(np.array(estimates), axis=0)
            else:
                row = np.full(4, np.nan)
            log_info(f"Thermal params {meaning} (a_o a_s t_o t_s): {row}")
            params_rows.append(row)
            meanings.append(meaning)
    return (params_rows, meanings)


def clean_combined_profile(ts, rows_i_v, meaning):
    """Combined profile for rows_i_v with unusable rows removed"""
    return SensorLag.clean_profile(
        combined_profile(ts, rows_i_v, meaning), time_name="ptime"
    )


def _usable_params(ts, params_rows, meanings):
    """Drop parameter rows with missing values, malformed meanings or unavailable variables"""
    kept_rows = []
    kept_meanings = []
    for row, meaning in zip(params_rows, meanings):
        row = np.asarray(row, dtype=np.float64)
        if np.any(np.isnan(row)):
            log_warning(
                f"Problems found during thermal lag parameter identification for {meaning} - row discarded",
                alert="Salinity processing",
            )
            continue
        if not valid_meaning(meaning):
            log_warning(
                f"Thermal lag parameters for {meaning} do not name a temperature and a conductivity - row discarded",
                alert="Salinity processing",
            )
            continue
        missing = [name for name in meaning if name not in ts]
        if missing:
            log_warning(
                f"Thermal lag parameters for {meaning} need {missing} - row discarded",
                alert="Salinity processing",
            )
            continue
        kept_rows.append(row)
        kept_meanings.append(tuple(meaning))
    return (kept_rows, kept_meanings)


def apply_thermal_lag(ts, recipe, opts, collaborators):
    """Thermal lag correct salinity, profile by profile, for each parameter row

    Adds one salinity_corrected_..._TH field per retained parameter row.

    Returns:
        parameter rows and meanings used (empty if the correction was dropped)
    """
    if THERMAL_LAG not in recipe:
        return ([], [])

    if opts.thermal_params is not None and opts.thermal_params_meaning is not None:
        params_rows = list(opts.thermal_params)
        meanings = list(opts.thermal_params_meaning)
        if len(params_rows) != len(meanings):
            log_warning(
                f"{len(params_rows)} thermal lag parameter rows but {len(meanings)} meanings",
                alert="Salinity processing",
            )
            recipe.drop(
                THERMAL_LAG, "thermal lag parameters do not match their meanings"
            )
            return ([], [])
    else:
        params_rows, meanings = collaborators.find_thermal_lag_params(ts, opts)

    params_rows, meanings = _usable_params(ts, params_rows, meanings)
    if not params_rows:
        recipe.drop(THERMAL_LAG, "no usable thermal lag parameters")
        return ([], [])

    field_names = []
    for meaning in meanings:
        name = salinity_field_name(slots_from_meaning(meaning))
        ts[name] = np.full(ts.num_rows, np.nan)
        field_names.append(name)
        log_debug(f"Thermal lag salinity for {meaning} in {name}")

    num_casts = Profiles.num_profiles(ts["profile_index"])
    for prf in range(1, num_casts + 1):
        rows_i_v = Profiles.profile_rows(ts["profile_index"], prf)
        for params, meaning, name in zip(params_rows, meanings, field_names):
            profile, good_i_v = collaborators.clean_profile(
                combined_profile(ts, rows_i_v, meaning), time_name="ptime"
            )
            if len(good_i_v) == 0:
                continue
            corrected = collaborators.correct_thermal_lag(
                profile, params, opts.min_flow_speed
            )
            ts[name][rows_i_v[good_i_v]] = Utils.salinity_from_cond_ratio(
                Utils.cond_ratio(profile["cond"]),
                corrected["temp_in_cell"],
                ts["pressure"][rows_i_v[good_i_v]],
            )
    return (params_rows, meanings)
