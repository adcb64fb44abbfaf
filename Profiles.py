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


"""Splitting a glider record into dive and climb profiles
"""

import numpy as np

from ProcLog import log_debug, log_info
import Utils


def continuous_depth(sci_time_v, depth_v):
    """Depth at every science time stamp

    Interpolated from the rows where both depth and time are present, extended
    linearly past the first and last of them
    """
    return Utils.interp1_extrap(sci_time_v, depth_v, sci_time_v)


def find_inflections(cont_depth_v):
    """Indices where the vertical direction changes (or stalls)

    The first and last samples are always included, so a monotonic record
    yields two indices and a sawtooth with K turns yields K+2
    """
    cont_depth_v = np.asarray(cont_depth_v, dtype=np.float64)
    num_points = len(cont_depth_v)
    if num_points == 0:
        return np.array([], dtype=int)
    first_der_v = np.diff(cont_depth_v)
    with np.errstate(invalid="ignore"):
        turns_i_v = np.flatnonzero(first_der_v[1:] * first_der_v[:-1] <= 0) + 1
    return np.concatenate(([0], turns_i_v, [num_points - 1])).astype(int)


def find_profiles(depth_v, inflections_i_v, min_range=10.0, min_samples=3):
    """Number the profiles between inflection points, rejecting shallow ones

    Each segment runs from one inflection to the sample before the next (the last
    segment includes the final sample).  A segment is rejected if it spans less than
    min_range meters or has fewer than min_samples depths.  Consecutive retained
    segments going the same way (ie split by a stall or a rejected wiggle) form a
    single, contiguous profile that includes the rejected rows between them.

    Returns:
        profile_index_v - 1..M for samples in retained profiles, 0 elsewhere
    """
    depth_v = np.asarray(depth_v, dtype=np.float64)
    profile_index_v = np.zeros(len(depth_v))
    if len(inflections_i_v) < 2:
        return profile_index_v

    profile_num = 0
    last_direction = 0
    num_rejected = 0
    prev_end_i = 0
    num_segments = len(inflections_i_v) - 1
    for seg in range(num_segments):
        start_i = inflections_i_v[seg]
        end_i = inflections_i_v[seg + 1]
        if seg == num_segments - 1:
            end_i = end_i + 1
        if end_i <= start_i:
            continue
        seg_depth_v = depth_v[start_i:end_i]
        good_depth_v = seg_depth_v[np.logical_not(np.isnan(seg_depth_v))]
        if len(good_depth_v) < min_samples:
            num_rejected += 1
            continue
        if np.max(good_depth_v) - np.min(good_depth_v) < min_range:
            num_rejected += 1
            continue
        direction = np.sign(good_depth_v[-1] - good_depth_v[0])
        if direction != last_direction or profile_num == 0:
            profile_num += 1
            last_direction = direction
        else:
            # Rows of any rejected segment in between join the merged profile
            profile_index_v[prev_end_i:start_i] = profile_num
        profile_index_v[start_i:end_i] = profile_num
        prev_end_i = end_i

    log_debug(f"Rejected {num_rejected} of {num_segments} segments as too shallow")
    log_info(f"Found {profile_num} profiles")
    return profile_index_v


def profile_rows(profile_index_v, profile_num):
    """Row indices of a single profile"""
    return np.flatnonzero(profile_index_v == profile_num)


def num_profiles(profile_index_v):
    """Number of profiles (the maximum profile index)"""
    if len(profile_index_v) == 0:
        return 0
    return int(np.max(profile_index_v))
