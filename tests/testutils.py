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



from typing import Any

import numpy as np
import pytest
import seawater

from GliderData import RawRecord
import ProcOpts

start_time = 1.7e9


def check_log(caplog: Any, allowed_msgs: list[str] | None = None) -> None:
    """Checks warning and error output against a known list

    Args:
    caplog: logging capture from pytest fixture
    allow_msgs: list of allowed messages that can appear in the caplog
    """
    if allowed_msgs is None:
        allowed_msgs = []
    bad_errors = ""
    for record in caplog.records:
        # Check for known WARNING, ERROR or CRITICAL msgs
        for msg in allowed_msgs:
            if msg in record.getMessage():
                break
        else:
            if record.levelname in ["CRITICAL", "ERROR", "WARNING"]:
                bad_errors += f"{record.levelname}:{record.getMessage()}\n"
    if bad_errors:
        pytest.fail(bad_errors)


def make_opts(cmdline_args: list[str] | None = None) -> ProcOpts.ProcOptions:
    """Processing options as the command line driver would see them"""
    return ProcOpts.ProcOptions(
        "test options",
        cmdline_args=cmdline_args if cmdline_args is not None else [],
        calling_module="ProcessGliderData",
    )


def sawtooth_depth(num_rows: int, half_period: int = 25, max_depth: float = 100.0):
    """Dive/climb depths (m), starting at the surface, turning every half_period samples"""
    phase_v = np.arange(num_rows) % (2 * half_period)
    tri_v = np.where(phase_v <= half_period, phase_v, 2 * half_period - phase_v)
    return 2.0 + (max_depth - 2.0) * tri_v / half_period


def ddmm(deg_v):
    """Decimal degrees to ddmm.mm"""
    deg_v = np.asarray(deg_v, dtype=np.float64)
    abs_v = np.abs(deg_v)
    return np.sign(deg_v) * (np.floor(abs_v) * 100.0 + (abs_v - np.floor(abs_v)) * 60.0)


def glider_columns(
    num_rows: int = 100,
    sample_period: float = 4.0,
    sci_offset: float = 0.5,
    ctd: str | None = "sci_water",
    waypoints: bool = False,
) -> dict[str, np.ndarray]:
    """Synthetic, fully populated Slocum channels following a sawtooth"""
    time_v = start_time + sample_period * np.arange(num_rows)
    depth_v = sawtooth_depth(num_rows)
    pitch_v = np.where(np.gradient(depth_v) >= 0, -0.45, 0.45)

    columns = {
        "m_present_time": time_v,
        "sci_m_present_time": time_v + sci_offset,
        "m_gps_lat": ddmm(42.5 + 0.0001 * np.arange(num_rows)),
        "m_gps_lon": ddmm(-70.2 - 0.0001 * np.arange(num_rows)),
        "m_pitch": pitch_v,
        "m_depth": depth_v,
    }
    if ctd is not None:
        temp_v = 25.0 - 0.1 * depth_v
        salinity_v = 35.0 + 0.01 * depth_v
        pressure_dbar_v = depth_v
        cond_v = (
            seawater.cndr(salinity_v, temp_v, pressure_dbar_v)
            * seawater.constants.c3515
            / 10.0
        )
        columns[f"{ctd}_cond"] = cond_v
        columns[f"{ctd}_temp"] = temp_v
        columns[f"{ctd}_pressure"] = pressure_dbar_v / 10.0
    if waypoints:
        wpt_lat_v = np.full(num_rows, np.nan)
        wpt_lon_v = np.full(num_rows, np.nan)
        half = num_rows // 2
        wpt_lat_v[0] = ddmm(43.0)
        wpt_lon_v[0] = ddmm(-70.0)
        wpt_lat_v[half] = ddmm(44.0)
        wpt_lon_v[half] = ddmm(-69.0)
        columns["c_wpt_lat"] = wpt_lat_v
        columns["c_wpt_lon"] = wpt_lon_v
    return columns


def glider_record(**kwargs: Any) -> RawRecord:
    """Synthetic RawRecord - see glider_columns"""
    return RawRecord.from_columns(glider_columns(**kwargs), source="synthetic")
