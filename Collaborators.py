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


"""The replaceable steps of glider data processing
"""

import dataclasses
import typing

import Navigation
import Profiles
import SensorLag
import ThermalLag
import TimeBase
import Utils


@dataclasses.dataclass
class Collaborators:
    """Algorithms the processing pipeline calls out to

    Any of them can be replaced, for example by a better profile filter or a
    different parameter identification, as long as the call signature is kept.
    """

    fill_science_time: typing.Callable = TimeBase.fill_science_time
    find_transects: typing.Callable = Navigation.find_transects
    distance_over_ground: typing.Callable = Utils.distance_over_ground
    apply_pressure_filter: typing.Callable = SensorLag.apply_pressure_filter
    find_profiles: typing.Callable = Profiles.find_profiles
    clean_profile: typing.Callable = SensorLag.clean_profile
    correct_time_response: typing.Callable = SensorLag.correct_time_response
    find_time_constant: typing.Callable = SensorLag.find_time_constant
    correct_thermal_lag: typing.Callable = ThermalLag.correct_thermal_lag
    find_thermal_lag_params: typing.Callable = ThermalLag.find_thermal_lag_params
