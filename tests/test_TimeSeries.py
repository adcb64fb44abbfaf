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

from TimeSeries import TimeSeries


def test_length_mismatch():
    ts = TimeSeries(a=np.arange(5.0))
    ts["b"] = np.zeros(5)
    with pytest.raises(ValueError):
        ts["c"] = np.zeros(4)
    with pytest.raises(ValueError):
        ts["a"] = np.zeros(6)
    with pytest.raises(ValueError):
        ts["d"] = np.zeros((5, 2))


def test_filter_rows():
    ts = TimeSeries(a=np.arange(5.0), b=10.0 * np.arange(5.0))
    ts.filter_rows(np.array([True, False, True, False, True]))
    assert ts.num_rows == 3
    np.testing.assert_array_equal(ts["a"], [0.0, 2.0, 4.0])
    np.testing.assert_array_equal(ts["b"], [0.0, 20.0, 40.0])
    with pytest.raises(ValueError):
        ts.filter_rows(np.ones(5, dtype=bool))


def test_select_rows_and_copy():
    ts = TimeSeries(a=np.arange(4.0), b=-np.arange(4.0))
    copy_ts = ts.copy()
    ts.select_rows([3, 1])
    np.testing.assert_array_equal(ts["a"], [3.0, 1.0])
    np.testing.assert_array_equal(ts["b"], [-3.0, -1.0])
    assert copy_ts.num_rows == 4
    assert list(copy_ts.keys()) == ["a", "b"]


def test_empty():
    ts = TimeSeries()
    assert ts.num_rows is None
    ts["a"] = np.zeros(3)
    assert ts.num_rows == 3
