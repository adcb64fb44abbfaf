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


"""Selection of the CTD and auxiliary science sensors present in a glider record
"""

import collections
import dataclasses

import numpy as np

from ProcLog import log_debug, log_info
from TimeSeries import TimeSeries


@dataclasses.dataclass
class SensorGroup:
    """A set of sensor channels that are used together

    name             - tag reported in sensors_available
    channels         - ordered mapping of raw channel name to output field name
    require_distinct - also require more than one distinct value across the channels
    scale            - optional mapping of raw channel name to a multiplier
    """

    name: str
    channels: dict
    require_distinct: bool = False
    scale: dict = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.channels, collections.OrderedDict):
            self.channels = collections.OrderedDict(self.channels)

    @property
    def output_names(self):
        return tuple(self.channels.values())


# Sea-Bird CTD41CP, science bay first, then as reported through the glider
ctd_sources = (
    SensorGroup(
        "sci_water",
        (
            ("sci_water_cond", "conductivity"),
            ("sci_water_temp", "temperature"),
            ("sci_water_pressure", "pressure"),
        ),
        scale={"sci_water_pressure": 10.0},  # bar to dbar
    ),
    SensorGroup(
        "m_water",
        (
            ("m_water_cond", "conductivity"),
            ("m_water_temp", "temperature"),
            ("m_water_pressure", "pressure"),
        ),
        scale={"m_water_pressure": 10.0},
    ),
)

# Optics and oxygen, in order of preference - a group whose outputs are
# already provided by an earlier group is skipped
aux_groups = (
    SensorGroup(
        "flntu",
        (
            ("sci_flntu_chlor_units", "chlorophyll"),
            ("sci_flntu_turb_units", "turbidity"),
        ),
        require_distinct=True,
    ),
    SensorGroup(
        "bbfl2s",
        (
            ("sci_bbfl2s_bb_scaled", "backscatter"),
            ("sci_bbfl2s_chlor_scaled", "chlorophyll"),
            ("sci_bbfl2s_cdom_scaled", "cdom"),
        ),
    ),
    SensorGroup(
        "bb3slo",
        (
            ("sci_bb3slo_b470_scaled", "backscatter470"),
            ("sci_bb3slo_b532_scaled", "backscatter532"),
            ("sci_bb3slo_b660_scaled", "backscatter660"),
        ),
    ),
    SensorGroup(
        "ocr504I",
        (
            ("sci_ocr504I_irrad1", "irradiance412nm"),
            ("sci_ocr504I_irrad2", "irradiance442nm"),
            ("sci_ocr504I_irrad3", "irradiance491nm"),
            ("sci_ocr504I_irrad4", "irradiance664nm"),
        ),
    ),
    SensorGroup(
        "oxy3835",
        (
            ("sci_oxy3835_oxygen", "oxygen"),
            ("sci_oxy3835_saturation", "oxygen_saturation"),
        ),
    ),
)

water_current_channels = ("m_final_water_vx", "m_final_water_vy", "x_dr_state")


def group_data(data, channels, group):
    """Output name to (scaled) vector for a group, or None if the group is unusable

    The group is usable if all its channels are present in the record and at least
    one sample is not missing (and, for require_distinct groups, there is more than
    one distinct value).
    """
    if not channels.has_all(group.channels.keys()):
        return None
    cols = list(channels.columns(group.channels.keys()))
    values = data[:, cols]
    good_v = values[np.logical_not(np.isnan(values))]
    if len(good_v) == 0:
        log_debug(f"No data for {group.name}")
        return None
    if group.require_distinct and len(np.unique(good_v)) <= 1:
        log_debug(f"Only a single value reported for {group.name}")
        return None
    fields = collections.OrderedDict()
    for ii, (raw_name, out_name) in enumerate(group.channels.items()):
        fields[out_name] = values[:, ii] * group.scale.get(raw_name, 1.0)
    return fields


def select_ctd(data, channels):
    """Pick the CTD source

    Returns:
        (source name, ordered dict of conductivity, temperature and pressure) or
        (None, None) if no source has data
    """
    for source in ctd_sources:
        fields = group_data(data, channels, source)
        if fields is not None:
            log_info(f"Using {source.name} CTD channels")
            return (source.name, fields)
    log_info("No CTD data found")
    return (None, None)


def select_aux(data, channels, existing_names=()):
    """Collect the auxiliary sensor groups

    Returns:
        ordered dict of output fields, dict of group name to availability
    """
    fields = collections.OrderedDict()
    sensors_available = {}
    provided = set(existing_names)
    for group in aux_groups:
        sensors_available[group.name] = False
        if provided.intersection(group.output_names):
            log_debug(f"Skipping {group.name} - outputs already provided")
            continue
        group_fields = group_data(data, channels, group)
        if group_fields is None:
            continue
        sensors_available[group.name] = True
        fields.update(group_fields)
        provided.update(group_fields.keys())
    return (fields, sensors_available)


def water_info(data, channels, time_v, lon_v, lat_v):
    """Depth averaged current estimates reported by the glider

    Included only if every channel is present and each has data.

    Returns:
        TimeSeries of time, lon, lat and the current channels over the rows
        where any of them is reported, or None
    """
    if not channels.has_all(water_current_channels):
        return None
    values = data[:, list(channels.columns(water_current_channels))]
    present_v = np.logical_not(np.isnan(values))
    if not np.all(np.any(present_v, axis=0)):
        log_debug("Incomplete water current information - skipping")
        return None
    rows_v = np.any(present_v, axis=1)
    info = TimeSeries(time=time_v[rows_v], lon=lon_v[rows_v], lat=lat_v[rows_v])
    for ii, name in enumerate(water_current_channels):
        info[name] = values[rows_v, ii]
    return info
