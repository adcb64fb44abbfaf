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


"""Process a raw Slocum glider record into a quality controlled, profile segmented timeseries

The processing runs strictly forward:

  channel resolution -> time base -> gap interpolation -> sensor selection ->
  derived physics -> synchronization check -> profiles -> sensor lag correction ->
  thermal lag correction -> range checks

Data problems never raise.  A record that cannot be processed gives an empty
ProcessedData carrying a diagnostic; a correction that cannot be calibrated is
dropped from the recipe and processing continues without it.
"""

from __future__ import annotations

import dataclasses
import os
import sys
import time

import numpy as np
import scipy.io

import Channels
from Collaborators import Collaborators
from CorrectionRecipe import CorrectionRecipe
import GliderData
import Navigation
import ProcOpts
from ProcLog import (
    ProcLogger,
    log_alerts,
    log_critical,
    log_debug,
    log_error,
    log_info,
    log_warning,
)
import Profiles
import QC
import SensorLag
import Sensors
import Synchronization
import ThermalLag
import TimeBase
from TimeSeries import TimeSeries
import Utils


@dataclasses.dataclass
class ProcessedData:
    """Results of processing a glider record"""

    timeseries: TimeSeries = dataclasses.field(default_factory=TimeSeries)
    correction_params: list = dataclasses.field(default_factory=list)
    correction_params_meaning: list = dataclasses.field(default_factory=list)
    transects: list = dataclasses.field(default_factory=list)
    water_info: TimeSeries | None = None
    source: str | None = None
    ctd_available: bool = False
    sensors_available: dict = dataclasses.field(default_factory=dict)
    recipe: CorrectionRecipe = dataclasses.field(default_factory=CorrectionRecipe)
    sync_info: Synchronization.SyncInfo | None = None
    diagnostic: str | None = None

    def is_empty(self) -> bool:
        return not self.timeseries.num_rows

    def fail(self, diagnostic: str) -> ProcessedData:
        """Empty the results, noting why"""
        log_error(diagnostic)
        self.timeseries = TimeSeries()
        self.diagnostic = diagnostic
        return self

    def to_dict(self) -> dict:
        """Flatten for scipy.io.savemat"""
        out_d = {}
        for name, values_v in self.timeseries.items():
            out_d[name] = values_v
        out_d["timeseries"] = np.array(list(self.timeseries.keys()), dtype=object)
        out_d["correctionParams"] = np.array(self.correction_params).reshape(-1, 4)
        if self.correction_params_meaning:
            out_d["correctionParamsMeaning"] = np.array(
                [",".join(m) for m in self.correction_params_meaning], dtype=object
            )
        out_d["transects"] = np.array(self.transects).reshape(-1, 2)
        if self.water_info is not None:
            out_d["waterInfo"] = dict(self.water_info)
        out_d["source"] = self.source if self.source is not None else ""
        out_d["ctdAvailable"] = int(self.ctd_available)
        out_d["salinityCorrected"] = str(self.recipe)
        return out_d


def process_glider_data(raw_record, opts, collaborators=None):
    """Process a raw glider record

    Input:
        raw_record - GliderData.RawRecord
        opts - ProcOpts.ProcOptions (or anything with the same attributes)
        collaborators - Collaborators, replacing any of the default algorithms

    Returns:
        ProcessedData - empty, with a diagnostic, if the record could not be processed
    """
    if collaborators is None:
        collaborators = Collaborators()

    recipe = CorrectionRecipe.parse(opts.salinity_corrected)
    processed = ProcessedData(source=raw_record.source, recipe=recipe)

    channels = Channels.ChannelIndex(raw_record.column_defs)
    time_channel = Channels.resolve(channels, "time")
    if time_channel is None:
        return processed.fail("No time channel found")
    position_channels = Channels.resolve(channels, "position")
    if position_channels is None:
        return processed.fail("No position channels found")
    (time_col,) = time_channel[1]
    lat_col, lon_col = position_channels[1]

    #
    # Time base
    #
    data = TimeBase.build_time_base(raw_record.data, time_col)
    if data is None:
        return processed.fail("Not enough time stamped rows to process")

    nav = TimeSeries(
        navTime=data[:, time_col],
        latitude=Utils.ddmm2dd(data[:, lat_col]),
        longitude=Utils.ddmm2dd(data[:, lon_col]),
    )
    control_names = ["latitude", "longitude"]
    for rule_name in ("pitch", "glider_depth"):
        resolved = Channels.resolve(channels, rule_name)
        if resolved is not None:
            nav[resolved[0][0]] = data[:, resolved[1][0]]
            control_names.append(resolved[0][0])

    TimeBase.interpolate_gaps(nav, "navTime", control_names)
    keep_v = TimeBase.trim_unreferenced(nav, ("navTime", "latitude", "longitude"))
    data = data[keep_v, :]
    if not TimeBase.enough_rows(nav.num_rows, "with time and position"):
        return processed.fail("Not enough rows with time and position to process")
    num_rows = nav.num_rows

    ts = TimeSeries(navTime=nav["navTime"])
    sci_time_channel = Channels.resolve(channels, "sci_time")
    if sci_time_channel is not None:
        ts["sciTime"] = data[:, sci_time_channel[1][0]]
    else:
        log_info("No science time found - using navigation time")
        ts["sciTime"] = ts["navTime"].copy()
    if opts.allow_sci_time_fill:
        ts["sciTime"] = collaborators.fill_science_time(ts["sciTime"])

    ts["latitude"] = nav["latitude"]
    ts["longitude"] = nav["longitude"]

    waypoint_channels = Channels.resolve(channels, "waypoint")
    if waypoint_channels is not None:
        wpt_lat_col, wpt_lon_col = waypoint_channels[1]
        processed.transects = collaborators.find_transects(
            ts["navTime"],
            Utils.ddmm2dd(data[:, wpt_lon_col]),
            Utils.ddmm2dd(data[:, wpt_lat_col]),
        )
    else:
        processed.transects = collaborators.find_transects(ts["navTime"])

    ts["pitch"] = Navigation.fill_pitch(
        nav.get("m_pitch"), num_rows, opts.default_pitch_deg
    )

    #
    # Sensors
    #
    _, ctd_fields = Sensors.select_ctd(data, channels)
    if ctd_fields is not None:
        ts.update(ctd_fields)
        processed.ctd_available = True

    aux_fields, processed.sensors_available = Sensors.select_aux(
        data, channels, ts.keys()
    )
    ts.update(aux_fields)

    processed.water_info = Sensors.water_info(
        data, channels, ts["navTime"], ts["longitude"], ts["latitude"]
    )

    ts["distanceOverGround"] = collaborators.distance_over_ground(
        ts["longitude"], ts["latitude"]
    )

    if processed.ctd_available and opts.allow_press_filter:
        ts["pressure"] = collaborators.apply_pressure_filter(
            ts["sciTime"], ts["pressure"], opts
        )

    if processed.ctd_available:
        ts["depth"] = Utils.depth_from_pressure(ts["pressure"], ts["latitude"])
        ts["salinity"] = Utils.salinity_from_cond_ratio(
            Utils.cond_ratio(ts["conductivity"]), ts["temperature"], ts["pressure"]
        )
        ts["density"] = Utils.density(
            ts["salinity"], ts["temperature"], ts["pressure"]
        )
    elif "m_depth" in nav:
        log_info("No CTD - using the glider's depth")
        ts["depth"] = nav["m_depth"]

    #
    # Synchronization
    #
    processed.sync_info = Synchronization.check_synchronization(
        ts["navTime"], ts["sciTime"]
    )
    if opts.allow_desynchro_deletion:
        Synchronization.remove_desynchronized(ts, processed.sync_info)
        if not TimeBase.enough_rows(ts.num_rows, "after removing desynchronized data"):
            return processed.fail("Not enough synchronized rows to process")

    #
    # Profiles
    #
    if "depth" in ts and np.count_nonzero(np.isfinite(ts["depth"])) > 1:
        ts["continuousDepth"] = Profiles.continuous_depth(ts["sciTime"], ts["depth"])
        inflections_i_v = Profiles.find_inflections(ts["continuousDepth"])
        ts["profile_index"] = collaborators.find_profiles(
            ts["depth"],
            inflections_i_v,
            opts.min_profile_range,
            opts.min_profile_samples,
        )
    else:
        log_warning("No depth available - profiles not identified")
        ts["profile_index"] = np.zeros(ts.num_rows)

    #
    # Corrections
    #
    if processed.ctd_available and "depth" in ts:
        SensorLag.apply_sensor_lag(ts, recipe, opts, collaborators)
        (
            processed.correction_params,
            processed.correction_params_meaning,
        ) = ThermalLag.apply_thermal_lag(ts, recipe, opts, collaborators)
    elif len(recipe):
        log_debug(f"Skipping {recipe} corrections - no CTD data")

    QC.qc_checks(ts)

    processed.timeseries = ts
    log_info(f"Processed {ts.num_rows} rows into {len(ts)} fields")
    return processed


def main(cmdline_args: list[str] = sys.argv[1:]) -> int:
    """Command line driver for processing a raw glider data file

    Returns:
        0 - success
        1 - failure

    Raises:
        None - all exceptions are caught and logged
    """
    # Handle multiple runs under pytest
    ProcLogger.reset()

    proc_opts = ProcOpts.ProcOptions(
        "Command line driver for processing raw Slocum glider data",
        cmdline_args=cmdline_args,
        calling_module="ProcessGliderData",
    )
    ProcLogger(proc_opts)

    log_info(
        "Started processing "
        + time.strftime("%H:%M:%S %d %b %Y %Z", time.gmtime(time.time()))
    )

    if not proc_opts.raw_data_file:
        log_error("No raw data file specified")
        return 1

    raw_record = GliderData.RawRecord.from_mat(proc_opts.raw_data_file)
    if raw_record is None:
        return 1

    processed = process_glider_data(raw_record, proc_opts)
    if processed.is_empty():
        log_error(f"Nothing processed from {proc_opts.raw_data_file}")
        return 1

    if processed.recipe.removals:
        log_info(f"Corrections dropped: {processed.recipe.removals}")

    out_d = processed.to_dict()
    alerts_d = log_alerts()
    if alerts_d:
        alert_msgs = []
        for alert_class, msgs in alerts_d.items():
            log_info(f"Alert: {alert_class} ({len(msgs)} messages)")
            alert_msgs.extend(f"{alert_class}: {msg}" for msg in msgs)
        out_d["alerts"] = np.array(alert_msgs, dtype=object)

    output_file = proc_opts.output_file
    if not output_file:
        output_file = f"{os.path.splitext(proc_opts.raw_data_file)[0]}_processed.mat"
    try:
        scipy.io.savemat(output_file, out_d, do_compression=True)
    except (OSError, ValueError):
        log_error(f"Could not write {output_file}", "exc")
        return 1
    log_info(f"Wrote {output_file}")

    log_info(
        "Finished processing "
        + time.strftime("%H:%M:%S %d %b %Y %Z", time.gmtime(time.time()))
    )
    return 0


if __name__ == "__main__":
    retval = 1
    try:
        retval = main()
    except Exception:
        log_critical("Unhandled exception in main -- exiting")

    sys.exit(retval)
