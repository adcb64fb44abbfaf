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

from Channels import ChannelIndex
from GliderData import RawRecord
import Sensors


def _record(columns):
    record = RawRecord.from_columns(columns)
    return record.data, ChannelIndex(record.column_defs)


def test_ctd_priority():
    data, channels = _record(
        {
            "sci_water_cond": [4.0, 4.1, 4.2],
            "sci_water_temp": [15.0, 15.1, 15.2],
            "sci_water_pressure": [1.0, 2.0, 3.0],
            "m_water_cond": [3.0, 3.0, 3.0],
            "m_water_temp": [10.0, 10.0, 10.0],
            "m_water_pressure": [0.5, 0.5, 0.5],
        }
    )
    source, fields = Sensors.select_ctd(data, channels)
    assert source == "sci_water"
    assert list(fields.keys()) == ["conductivity", "temperature", "pressure"]
    np.testing.assert_allclose(fields["pressure"], [10.0, 20.0, 30.0])
    np.testing.assert_allclose(fields["temperature"], [15.0, 15.1, 15.2])


def test_ctd_fallback():
    nan_v = [np.nan, np.nan]
    data, channels = _record(
        {
            "sci_water_cond": nan_v,
            "sci_water_temp": nan_v,
            "sci_water_pressure": nan_v,
            "m_water_cond": [3.0, np.nan],
            "m_water_temp": [10.0, np.nan],
            "m_water_pressure": [0.5, np.nan],
        }
    )
    source, fields = Sensors.select_ctd(data, channels)
    assert source == "m_water"
    np.testing.assert_allclose(fields["pressure"], [5.0, np.nan])


def test_no_ctd():
    data, channels = _record({"sci_water_cond": [1.0], "sci_water_temp": [1.0]})
    assert Sensors.select_ctd(data, channels) == (None, None)


def test_aux_groups():
    data, channels = _record(
        {
            # Single valued flntu is a sensor reporting its fill value
            "sci_flntu_chlor_units": [0.1, 0.1, 0.1],
            "sci_flntu_turb_units": [0.1, np.nan, 0.1],
            "sci_bbfl2s_bb_scaled": [1.0, 2.0, 3.0],
            "sci_bbfl2s_chlor_scaled": [0.5, 0.6, 0.7],
            "sci_bbfl2s_cdom_scaled": [0.0, 0.1, 0.2],
            "sci_oxy3835_oxygen": [np.nan, np.nan, np.nan],
            "sci_oxy3835_saturation": [np.nan, np.nan, np.nan],
        }
    )
    fields, available = Sensors.select_aux(data, channels)
    assert available["flntu"] is False
    assert available["bbfl2s"] is True
    assert available["oxy3835"] is False
    assert available["ocr504I"] is False
    assert list(fields.keys()) == ["backscatter", "chlorophyll", "cdom"]
    np.testing.assert_allclose(fields["chlorophyll"], [0.5, 0.6, 0.7])


def test_aux_fallback_chain():
    data, channels = _record(
        {
            "sci_flntu_chlor_units": [0.1, 0.2],
            "sci_flntu_turb_units": [1.0, 2.0],
            "sci_bbfl2s_bb_scaled": [1.0, 2.0],
            "sci_bbfl2s_chlor_scaled": [0.5, 0.6],
            "sci_bbfl2s_cdom_scaled": [0.0, 0.1],
        }
    )
    fields, available = Sensors.select_aux(data, channels)
    assert available["flntu"] is True
    assert available["bbfl2s"] is False
    np.testing.assert_allclose(fields["chlorophyll"], [0.1, 0.2])
    assert "cdom" not in fields


def test_water_info():
    time_v = np.arange(4.0)
    lon_v = -np.arange(4.0)
    lat_v = np.arange(4.0) + 40.0
    data, channels = _record(
        {
            "m_final_water_vx": [np.nan, 0.1, np.nan, np.nan],
            "m_final_water_vy": [np.nan, 0.2, np.nan, np.nan],
            "x_dr_state": [np.nan, np.nan, 2.0, np.nan],
        }
    )
    info = Sensors.water_info(data, channels, time_v, lon_v, lat_v)
    np.testing.assert_array_equal(info["time"], [1.0, 2.0])
    np.testing.assert_array_equal(info["lat"], [41.0, 42.0])
    np.testing.assert_array_equal(info["x_dr_state"][1], 2.0)

    data, channels = _record(
        {
            "m_final_water_vx": [np.nan, 0.1, np.nan, np.nan],
            "m_final_water_vy": [np.nan, 0.2, np.nan, np.nan],
            "x_dr_state": [np.nan, np.nan, np.nan, np.nan],
        }
    )
    assert Sensors.water_info(data, channels, time_v, lon_v, lat_v) is None
