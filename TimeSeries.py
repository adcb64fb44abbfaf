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


"""Named, equal length channel vectors that are filtered together
"""

import collections

import numpy as np


class TimeSeries(collections.OrderedDict):
    """Ordered mapping of field name to 1-D vector

    Every vector has the same length.  Rows are only ever removed through
    filter_rows() or select_rows(), which apply to every field at once.
    """

    def __init__(self, *args, **kwargs):
        super().__init__()
        self.update(*args, **kwargs)

    def __setitem__(self, name, vector):
        vector = np.asarray(vector)
        if vector.ndim != 1:
            raise ValueError(f"{name} is not a vector (shape {vector.shape})")
        n = self.num_rows
        # Replacing the only field may change the length
        if (
            n is not None
            and len(vector) != n
            and not (len(self) == 1 and name in self)
        ):
            raise ValueError(
                f"{name} has {len(vector)} rows - timeseries has {n}"
            )
        super().__setitem__(name, vector)

    def update(self, *args, **kwargs):
        for k, v in dict(*args, **kwargs).items():
            self[k] = v

    @property
    def num_rows(self):
        """Length of the vectors, None if there are none yet"""
        for v in self.values():
            return len(v)
        return None

    def filter_rows(self, mask):
        """Keep the rows where mask is True, in every field"""
        mask = np.asarray(mask, dtype=bool)
        n = self.num_rows
        if n is not None and len(mask) != n:
            raise ValueError(f"Row mask has {len(mask)} entries - timeseries has {n}")
        for k in list(self.keys()):
            super().__setitem__(k, self[k][mask])
        return self

    def select_rows(self, indices):
        """Keep (and reorder to) the rows listed in indices, in every field"""
        indices = np.asarray(indices, dtype=int)
        for k in list(self.keys()):
            super().__setitem__(k, self[k][indices])
        return self

    def copy(self):
        return TimeSeries((k, v.copy()) for k, v in self.items())
