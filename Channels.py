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

"""Mapping of Slocum sensor names to data matrix columns, with fallback rules
"""

import collections.abc
import types

from ProcLog import log_debug

# Each rule is an ordered tuple of candidates; each candidate a tuple of
# sensor names that must all be present.  The first complete candidate wins.
TIME_RULE = (("m_present_time",), ("sci_m_present_time",))
POSITION_RULE = (("m_gps_lat", "m_gps_lon"), ("m_lat", "m_lon"))
SCI_TIME_RULE = (("sci_m_present_time",), ("sci_ctd41cp_timestamp",))
WAYPOINT_RULE = (("c_wpt_lat", "c_wpt_lon"),)
PITCH_RULE = (("m_pitch",),)
GLIDER_DEPTH_RULE = (("m_depth",),)

channel_rules = {
    "time": TIME_RULE,
    "position": POSITION_RULE,
    "sci_time": SCI_TIME_RULE,
    "waypoint": WAYPOINT_RULE,
    "pitch": PITCH_RULE,
    "glider_depth": GLIDER_DEPTH_RULE,
}


class ChannelIndex(collections.abc.Mapping):
    """Read-only map of sensor name to column"""

    def __init__(self, column_defs):
        self._columns = types.MappingProxyType(dict(column_defs))

    def __getitem__(self, name):
        return self._columns[name]

    def __iter__(self):
        return iter(self._columns)

    def __len__(self):
        return len(self._columns)

    def __repr__(self):
        return f"ChannelIndex({dict(self._columns)})"

    def has_all(self, names):
        """True if every one of names has a column"""
        return all(n in self._columns for n in names)

    def columns(self, names):
        """Columns for names, in the same order"""
        return tuple(self._columns[n] for n in names)


def resolve(channels, rule):
    """Apply a fallback rule

    Input:
        channels - ChannelIndex
        rule - a rule from channel_rules (or the key of one)

    Returns:
        (names, columns) of the first candidate fully present, or None
    """
    if isinstance(rule, str):
        rule_name = rule
        rule = channel_rules[rule]
    else:
        rule_name = None
    for candidate in rule:
        if channels.has_all(candidate):
            if rule_name:
                log_debug(f"Using {candidate} for {rule_name}")
            return candidate, channels.columns(candidate)
    return None
