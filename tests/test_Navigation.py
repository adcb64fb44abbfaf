# -*- python-fmt -*-

## Copyright (c) 2024, 2025  University of Washington.
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


import numpy as np
import pytest

import Navigation


def test_forward_fill():
    filled_v = Navigation.forward_fill([np.nan, 1.0, np.nan, np.nan, 3.0, np.nan])
    assert np.isnan(filled_v[0])
    assert np.array_equal(filled_v[1:], [1.0, 1.0, 1.0, 3.0, 3.0])


def test_transects_without_waypoints():
    time_v = np.arange(10.0)
    assert Navigation.find_transects(time_v) == [(0.0, 9.0)]
    assert Navigation.find_transects(np.array([])) == []


def test_transects_split_on_waypoint_change():
    time_v = np.arange(10.0) * 60.0
    wpt_lon_v = np.full(10, np.nan)
    wpt_lat_v = np.full(10, np.nan)
    wpt_lon_v[[1, 6]] = [-7000.0, -7010.0]
    wpt_lat_v[[1, 6]] = [4230.0, 4230.0]
    transects = Navigation.find_transects(time_v, wpt_lon_v, wpt_lat_v)
    assert transects == [(0.0, 360.0), (360.0, 540.0)]


def test_transects_unchanged_waypoint():
    time_v = np.arange(5.0)
    wpt_v = np.full(5, 4230.0)
    assert Navigation.find_transects(time_v, wpt_v, wpt_v) == [(0.0, 4.0)]


def test_fill_pitch():
    assert Navigation.fill_pitch(None, 3, 26.0) == pytest.approx(
        np.full(3, np.deg2rad(26.0))
    )
    all_nan_v = np.full(4, np.nan)
    assert Navigation.fill_pitch(all_nan_v, 4, 20.0) == pytest.approx(
        np.full(4, np.deg2rad(20.0))
    )
    pitch_v = np.array([0.1, np.nan, -0.2])
    filled_v = Navigation.fill_pitch(pitch_v, 3, 26.0)
    assert filled_v[0] == 0.1 and np.isnan(filled_v[1])
