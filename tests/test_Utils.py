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
import seawater
import testutils

import Utils


def test_ddmm2dd():
    assert Utils.ddmm2dd(100.0) == 1.0
    assert Utils.ddmm2dd(-4230.0) == pytest.approx(-42.5)
    assert Utils.ddmm2dd(0.0) == 0.0

    ddmm_v = np.array([4230.0, -7015.5, np.nan, 130.0])
    deg_v = Utils.ddmm2dd(ddmm_v)
    assert np.isnan(deg_v[2])
    good_v = np.logical_not(np.isnan(ddmm_v))
    assert np.all(np.abs(deg_v[good_v]) < np.abs(ddmm_v[good_v]))
    assert deg_v[3] == pytest.approx(1.5)


def test_succinct_elts():
    assert Utils.succinct_elts([0, 1, 2, 5, 7, 8]) == "1:3 6 8 9"
    assert Utils.succinct_elts([], matlab_offset=0) == ""
    assert Utils.succinct_elts([4], matlab_offset=0) == "4"


def test_interp1_no_extrap():
    x_v = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    y_v = np.array([np.nan, 10.0, np.nan, 30.0, np.nan])
    yy_v = Utils.interp1_no_extrap(x_v, y_v, x_v)
    assert np.isnan(yy_v[0])
    assert np.isnan(yy_v[4])
    np.testing.assert_allclose(yy_v[1:4], [10.0, 20.0, 30.0])


def test_interp1_no_extrap_single_point(caplog):
    yy_v = Utils.interp1_no_extrap([0.0, 1.0], [1.0, np.nan], [0.0, 0.5])
    assert np.all(np.isnan(yy_v))
    testutils.check_log(caplog, ["Need at least two support points"])


def test_interp1_extrap():
    yy_v = Utils.interp1_extrap([1.0, 2.0], [10.0, 20.0], [0.0, 1.5, 3.0])
    np.testing.assert_allclose(yy_v, [0.0, 15.0, 30.0])
    # Duplicate abscissa are tolerated
    yy_v = Utils.interp1_extrap([1.0, 1.0, 2.0], [10.0, 11.0, 20.0], [1.5])
    np.testing.assert_allclose(yy_v, [15.0])


def test_distance_over_ground():
    lat_v = np.array([45.0, 45.0, 45.0])
    lon_v = np.array([-125.0, -124.99, -124.98])
    dog_v = Utils.distance_over_ground(lon_v, lat_v)
    assert dog_v[0] == 0.0
    assert np.all(np.diff(dog_v) > 0)
    # ~0.79 km per 0.01 degree of longitude at 45N
    assert dog_v[-1] == pytest.approx(1.57, abs=0.05)
    assert len(Utils.distance_over_ground([1.0], [1.0])) == 1


def test_salinity_from_conductivity():
    cond_v = seawater.cndr(35.0, 15.0, 0.0) * seawater.constants.c3515 / 10.0
    assert Utils.salinity_from_cond_ratio(
        Utils.cond_ratio(cond_v), 15.0, 0.0
    ) == pytest.approx(35.0, abs=1e-4)
    assert Utils.cond_ratio(Utils.c3515_S_m) == pytest.approx(1.0)
