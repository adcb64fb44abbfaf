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


"""Correction recipes and the names of the corrected salinity fields they produce
"""

import itertools

from ProcLog import log_warning

SENSOR_LAG_TEMPERATURE = "T"
SENSOR_LAG_CONDUCTIVITY = "C"
THERMAL_LAG = "TH"

known_tokens = (SENSOR_LAG_TEMPERATURE, SENSOR_LAG_CONDUCTIVITY, THERMAL_LAG)

# Sensor lag corrected variants and the raw variable each replaces
CORRECTED_VARIANTS = {"Tcor": "temperature", "Ccor": "conductivity"}

temperature_variants = ("temperature", "Tcor")
conductivity_variants = ("conductivity", "Ccor")

salinity_corrected_base = "salinity_corrected"


class CorrectionRecipe:
    """Ordered set of correction tokens, with a record of tokens dropped while processing

    tokens   - active tokens, in the order configured
    removals - list of (token, reason) for every token dropped
    """

    def __init__(self, tokens=()):
        self.tokens = []
        self.removals = []
        for t in tokens:
            if t not in self.tokens:
                self.tokens.append(t)

    @classmethod
    def parse(cls, recipe_str, delimiter="_"):
        """Parse a '_' delimited recipe (ie T_C_TH).  Empty strings give an empty recipe"""
        if recipe_str is None:
            return cls()
        tokens = [t.strip() for t in str(recipe_str).split(delimiter) if t.strip()]
        for t in tokens:
            if t not in known_tokens:
                log_warning(f"Unknown correction {t} in {recipe_str} - ignored")
        return cls(t for t in tokens if t in known_tokens)

    def __contains__(self, token):
        return token in self.tokens

    def __iter__(self):
        return iter(self.tokens)

    def __len__(self):
        return len(self.tokens)

    def __str__(self):
        return "_".join(self.tokens)

    def __repr__(self):
        return f"CorrectionRecipe({self.tokens}, removals={self.removals})"

    def drop(self, token, reason):
        """Remove token from the active recipe, noting why"""
        if token not in self.tokens:
            return
        self.tokens.remove(token)
        self.removals.append((token, reason))
        log_warning(
            f"Dropped {token} correction - {reason}", alert="Salinity processing"
        )


def valid_meaning(meaning):
    """True if meaning names exactly one temperature and one conductivity variant"""
    meaning = tuple(meaning)
    return (
        len(meaning) == 2
        and sum(name in temperature_variants for name in meaning) == 1
        and sum(name in conductivity_variants for name in meaning) == 1
    )


def slots_from_meaning(meaning):
    """Ordered (name, is_corrected) pairs that feed a thermal lag correction

    Input:
        meaning - (temperature variant, conductivity variant), in the order given
    """
    return (
        [("sciTime", False), ("depth", False)]
        + [(name, name in CORRECTED_VARIANTS) for name in meaning]
        + [("pitch", False)]
    )


def salinity_field_name(slots):
    """Name of the salinity field produced from the given input slots

    salinity_corrected, then _<name> for each slot using a corrected variant, then _TH
    """
    name = salinity_corrected_base
    for slot_name, is_corrected in slots:
        if is_corrected:
            name = f"{name}_{slot_name}"
    return f"{name}_{THERMAL_LAG}"


def thermal_lag_salinity_names():
    """Every salinity field name a thermal lag correction can produce"""
    names = []
    for temp_name, cond_name in itertools.product(
        temperature_variants, conductivity_variants
    ):
        for meaning in ((temp_name, cond_name), (cond_name, temp_name)):
            name = salinity_field_name(slots_from_meaning(meaning))
            if name not in names:
                names.append(name)
    return names
