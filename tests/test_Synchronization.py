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

import Synchronization
from TimeSeries import TimeSeries


def test_identical_times_synchronized():
    nav_v = 1000.0 + 4.0 * np.arange(10)
    sync_info = Synchronization.check_synchronization(nav_v, nav_v.copy())
    assert np.all(sync_info.synchronized)
    assert sync_info.sampling_period == pytest.approx(4.0)
    assert sync_info.threshold == pytest.approx(10.0)
    assert sync_info.num_synchronized == 10


def test_lagged_and_missing():
    nav_v = 4.0 * np.arange(6)
    sci_v = nav_v.copy()
    sci_v[1] += 10.0  # exactly at the threshold
    sci_v[2] += 10.5
    sci_v[3] = np.nan
    sync_info = Synchronization.check_synchronization(nav_v, sci_v)
    np.testing.assert_array_equal(
        sync_info.synchronized, [True, True, False, False, True, True]
    )


def test_remove_desynchronized():
    nav_v = 4.0 * np.arange(5)
    sci_v = nav_v + np.array([0.0, 0.0, 100.0, 0.0, 0.0])
    ts = TimeSeries(navTime=nav_v, sciTime=sci_v, temperature=np.arange(5.0))
    sync_info = Synchronization.check_synchronization(nav_v, sci_v)
    Synchronization.remove_desynchronized(ts, sync_info)
    assert ts.num_rows == 4
    np.testing.assert_array_equal(ts["temperature"], [0.0, 1.0, 3.0, 4.0])
    np.testing.assert_array_equal(ts["navTime"], [0.0, 4.0, 12.0, 16.0])
