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

"""The raw, merged glider record handed to the processing pipeline
"""

from __future__ import annotations

import numpy as np
import scipy.io

from ProcLog import log_debug, log_error


class RawRecord:
    """A matrix of samples plus the name of each of its columns

    data        - 2-D float array, one row per sample, NaN where a channel was not sampled
    column_defs - dictionary of channel name to (0-based) column
    source      - provenance tag passed through to the processed output
    """

    def __init__(self, data, column_defs, source=None):
        self.data = np.array(data, dtype=np.float64, ndmin=2)
        self.column_defs = dict(column_defs)
        self.source = source
        num_cols = self.data.shape[1]
        for name, col in self.column_defs.items():
            if not 0 <= col < num_cols:
                raise ValueError(
                    f"Column {col} for {name} is outside the data matrix ({num_cols} columns)"
                )

    @property
    def num_rows(self) -> int:
        return self.data.shape[0]

    @classmethod
    def from_columns(cls, columns_d, source=None) -> RawRecord:
        """Build a record from a dictionary of equal length channel vectors"""
        names = list(columns_d.keys())
        if not names:
            return cls(np.zeros((0, 0)), {}, source)
        data = np.column_stack([np.asarray(columns_d[n], dtype=np.float64) for n in names])
        return cls(data, {n: i for i, n in enumerate(names)}, source)

    @classmethod
    def from_mat(cls, filename, struct_name=None) -> RawRecord | None:
        """Load the loader's MATLAB struct

        The struct holds the data matrix in 'data', an optional 'source' string and
        one scalar numeric field per channel giving its (1-based) column

        Returns:
            RawRecord or None if the file could not be interpreted
        """
        try:
            mat_d = scipy.io.loadmat(filename, squeeze_me=True, struct_as_record=False)
        except (OSError, ValueError, NotImplementedError):
            log_error(f"Could not load {filename}", "exc")
            return None

        if struct_name is None:
            candidates = [
                k
                for k, v in mat_d.items()
                if not k.startswith("__") and hasattr(v, "_fieldnames")
            ]
            if len(candidates) != 1:
                log_error(
                    f"Expected a single struct in {filename} - found {candidates}"
                )
                return None
            struct_name = candidates[0]

        glider_data = mat_d[struct_name]
        if "data" not in glider_data._fieldnames:
            log_error(f"No data matrix in {filename}:{struct_name}")
            return None

        data = np.array(glider_data.data, dtype=np.float64, ndmin=2)
        column_defs = {}
        source = None
        for field_name in glider_data._fieldnames:
            value = getattr(glider_data, field_name)
            if field_name == "source":
                source = str(value)
            elif np.isscalar(value) and isinstance(value, (int, float, np.number)):
                column_defs[field_name] = int(value) - 1  # matlab columns are 1-based
            else:
                log_debug(f"Skipping non-column field {field_name}")
        return cls(data, column_defs, source)
