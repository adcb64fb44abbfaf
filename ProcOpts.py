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

"""
  Common set of options for glider data processing
  Default values supplemented by option processing, both config file and command line
"""

import argparse
import configparser
import copy
import dataclasses
import inspect
import os
import sys
import typing

from CorrectionRecipe import (
    conductivity_variants,
    temperature_variants,
    valid_meaning,
)


def generate_range_action(arg, min_val, max_val):
    """Creates an range checking action for argparse"""

    class RangeAction(argparse.Action):
        """Range checking action"""

        def __call__(self, parser, namespace, values, option_string=None):
            if values is None:
                raise argparse.ArgumentError(
                    self, f"None is not valid for argument [{arg}]"
                )

            if not min_val <= values <= max_val:
                raise argparse.ArgumentError(
                    self, f"{values} not in range for argument [{arg}]"
                )
            setattr(namespace, self.dest, values)

    return RangeAction


def FullPath(x):
    """Expand user- and relative-paths"""
    if x == "":
        return x
    return os.path.abspath(os.path.expanduser(x))


class FullPathAction(argparse.Action):
    """Expand user- and relative-paths"""

    def __call__(self, parser, namespace, values, option_string=None):
        if values is not None:
            setattr(namespace, self.dest, FullPath(values))
        else:
            setattr(namespace, self.dest, values)


def ParamTable(x):
    """Converts "a_o,a_s,t_o,t_s;a_o,..." to a list of 4-element float rows

    Already converted tables (lists of rows) are passed through
    """
    if isinstance(x, (list, tuple)):
        rows = [list(map(float, row)) for row in x]
    else:
        rows = []
        for row_str in x.split(";"):
            if row_str.strip() == "":
                continue
            rows.append([float(v) for v in row_str.split(",")])
    for row in rows:
        if len(row) != 4:
            raise ValueError(
                f"Thermal lag parameter rows need 4 values (a_o a_s t_o t_s) - got {row}"
            )
    return rows


def MeaningTable(x):
    """Converts "temperature,conductivity;Tcor,Ccor" to a list of name pairs"""
    if isinstance(x, (list, tuple)):
        rows = [tuple(row) for row in x]
    else:
        rows = [
            tuple(v.strip() for v in row_str.split(","))
            for row_str in x.split(";")
            if row_str.strip() != ""
        ]
    for row in rows:
        if len(row) != 2:
            raise ValueError(
                f"Thermal lag parameter meanings name a temperature and a conductivity - got {row}"
            )
        if not valid_meaning(row):
            raise ValueError(
                f"Thermal lag parameter meaning {row} needs one of {temperature_variants}"
                f" and one of {conductivity_variants}"
            )
    return rows


# The kwargs in this type is overloaded.  Everything that is legit for argparse is allowed.
# Additionally, there is:
#
# range:list - two element list of the min and max allowed for an argument (inclusive).
# section:str - name of the section where the argument is loaded in the config file
# option_group:str - name of the option group to include the option in (for help)
@dataclasses.dataclass
class options_t:
    """Data that drives options processing"""

    default_val: typing.Any
    group: set
    args: tuple
    var_type: typing.Any
    kwargs: dict

    def __post_init__(self):
        """Type conversions"""
        if not isinstance(self.args, tuple):
            raise ValueError("args is not a tuple")
        if self.group is not None and not isinstance(self.group, set):
            self.group = set(self.group)
        if not isinstance(self.kwargs, dict):
            raise ValueError("kwargs is not a dict")


global_options_dict = {
    "generate_sample_conf": options_t(
        False,
        None,
        ("--generate_sample_conf",),
        bool,
        {
            "help": "Generates a sample conf file to stdout",
            "action": "store_true",
        },
    ),
    "config_file_name": options_t(
        None,
        None,
        ("--config", "-c"),
        FullPath,
        {"help": "script configuration file", "action": FullPathAction},
    ),
    "proc_log": options_t(
        "",
        None,
        ("--proc_log",),
        FullPath,
        {
            "help": "processing log file, records all levels of notifications",
            "action": FullPathAction,
        },
    ),
    "debug": options_t(
        False,
        None,
        ("--debug",),
        bool,
        {
            "action": "store_true",
            "help": "log/display debug messages",
        },
    ),
    "verbose": options_t(
        False,
        None,
        (
            "--verbose",
            "-v",
        ),
        bool,
        {
            "action": "store_true",
            "help": "print status messages to stdout",
        },
    ),
    #
    "raw_data_file": options_t(
        None,
        ("ProcessGliderData",),
        ("raw_data_file",),
        FullPath,
        {
            "help": "MATLAB file holding the raw glider data struct",
            "nargs": "?",
        },
    ),
    "output_file": options_t(
        None,
        ("ProcessGliderData",),
        ("--output_file", "-o"),
        FullPath,
        {
            "help": "MATLAB file to write the processed data to",
            "action": FullPathAction,
        },
    ),
    #
    "salinity_corrected": options_t(
        "TH",
        None,
        ("--salinity_corrected",),
        str,
        {
            "help": "Corrections to attempt, '_' separated (T: temperature sensor lag, C: conductivity sensor lag, TH: thermal lag)",
            "section": "processing",
            "option_group": "processing",
        },
    ),
    "allow_sci_time_fill": options_t(
        True,
        None,
        ("--allow_sci_time_fill",),
        bool,
        {
            "help": "Fill missing science time stamps assuming regular sampling",
            "action": argparse.BooleanOptionalAction,
            "section": "processing",
            "option_group": "processing",
        },
    ),
    "allow_press_filter": options_t(
        False,
        None,
        ("--allow_press_filter",),
        bool,
        {
            "help": "Low-pass filter the CTD pressure before deriving depth",
            "action": argparse.BooleanOptionalAction,
            "section": "processing",
            "option_group": "processing",
        },
    ),
    "allow_desynchro_deletion": options_t(
        False,
        None,
        ("--allow_desynchro_deletion",),
        bool,
        {
            "help": "Remove samples whose navigation and science time stamps disagree",
            "action": argparse.BooleanOptionalAction,
            "section": "processing",
            "option_group": "processing",
        },
    ),
    "min_profile_range": options_t(
        10.0,
        None,
        ("--min_profile_range",),
        float,
        {
            "help": "Minimum depth span (m) of a segment to be considered a profile",
            "section": "processing",
            "option_group": "processing",
            "range": [0.0, 11000.0],
        },
    ),
    "min_profile_samples": options_t(
        3,
        None,
        ("--min_profile_samples",),
        int,
        {
            "help": "Minimum number of valid depth samples in a profile",
            "section": "processing",
            "option_group": "processing",
            "range": [2, 1000000],
        },
    ),
    "default_pitch_deg": options_t(
        26.0,
        None,
        ("--default_pitch_deg",),
        float,
        {
            "help": "Pitch (degrees) assumed when the glider reported none",
            "section": "processing",
            "option_group": "processing",
            "range": [1.0, 90.0],
        },
    ),
    "pressure_filter_constant": options_t(
        4.0,
        None,
        ("--pressure_filter_constant",),
        float,
        {
            "help": "Time constant (s) of the pressure low-pass filter",
            "section": "processing",
            "option_group": "processing",
            "range": [0.0, 600.0],
        },
    ),
    #
    "temp_time_constant": options_t(
        None,
        None,
        ("--temp_time_constant",),
        float,
        {
            "help": "Temperature sensor time constant (s) - identified from the data if not given",
            "section": "corrections",
            "option_group": "corrections",
        },
    ),
    "cond_time_constant": options_t(
        None,
        None,
        ("--cond_time_constant",),
        float,
        {
            "help": "Conductivity sensor time constant (s) - identified from the data if not given",
            "section": "corrections",
            "option_group": "corrections",
        },
    ),
    "max_time_constant": options_t(
        10.0,
        None,
        ("--max_time_constant",),
        float,
        {
            "help": "Upper bound (s) of the sensor time constant search",
            "section": "corrections",
            "option_group": "corrections",
            "range": [0.0, 600.0],
        },
    ),
    "thermal_params": options_t(
        None,
        None,
        ("--thermal_params",),
        ParamTable,
        {
            "help": "Thermal lag parameters, ';' separated rows of alpha_offset,alpha_slope,tau_offset,tau_slope",
            "section": "corrections",
            "option_group": "corrections",
        },
    ),
    "thermal_params_meaning": options_t(
        None,
        None,
        ("--thermal_params_meaning",),
        MeaningTable,
        {
            "help": "Variables used for each thermal lag row, ';' separated temperature,conductivity pairs (e.g. Tcor,conductivity)",
            "section": "corrections",
            "option_group": "corrections",
        },
    ),
    "min_flow_speed": options_t(
        0.05,
        None,
        ("--min_flow_speed",),
        float,
        {
            "help": "Smallest flow speed (m/s) through the conductivity cell used by the thermal lag model",
            "section": "corrections",
            "option_group": "corrections",
            "range": [0.001, 10.0],
        },
    ),
}

option_group_description = {
    "processing": "Time base, interpolation and profile options",
    "corrections": "Sensor lag and thermal lag correction options",
}


def generate_sample_conf_file(options_dict, calling_module):
    """Generates a sample .conf file (to stdout)"""
    sort_options_dict = dict(
        sorted(
            options_dict.items(),
            key=lambda x: x[1].kwargs["section"] if "section" in x[1].kwargs else "",
        )
    )

    seen_sections = set()

    print(f"#\n# Sample conf file for {calling_module}.py\n#")
    print(f"# Generated with python {calling_module}.py --generate_sample_conf\n#")
    print("[base]")

    for opt_n, opt_v in sort_options_dict.items():
        if opt_n in ("config_file_name", "generate_sample_conf"):
            continue
        if opt_v.group is None or calling_module in opt_v.group:
            section_name = opt_v.kwargs["section"] if "section" in opt_v.kwargs else ""
            if section_name not in seen_sections and section_name:
                print(f"#\n[{section_name}]")
                seen_sections.add(section_name)
            print(f"#\n# {opt_v.kwargs['help']}")
            print(f"#{opt_n} = ", end="")
            if opt_v.var_type is bool:
                print(f"{int(opt_v.default_val)}")
            elif opt_v.var_type is FullPath:
                print("<path_to_file>")
            else:
                print(f"{opt_v.default_val}")


class CustomFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter
):
    """Allow for multiple formatters for help"""


class ProcOptions:
    """
    ProcOptions: for use by the processing pipeline and its drivers.
       Defaults are trumped by command-line arguments;
       command-line arguments are trumped by options listed in the configuration file.
    """

    def __init__(
        self,
        description,
        cmdline_args=None,
        calling_module=None,
    ):
        """
        Input:
            cmdline_args - list of options equivalent to sys.argv[1:]
            calling_module - name used to select module specific options; defaults
                             to the caller's file name
        """
        self._opts = None  # Retained for debugging
        self._ap = None  # Retained for debugging

        if cmdline_args is None:
            cmdline_args = sys.argv[1:]

        if calling_module is None:
            calling_module = os.path.splitext(
                os.path.split(inspect.stack()[1].filename)[1]
            )[0]

        options_dict = global_options_dict

        if "--generate_sample_conf" in cmdline_args:
            generate_sample_conf_file(options_dict, calling_module)
            sys.exit(0)

        cp_default = {}
        for k, v in options_dict.items():
            if v.group is None or calling_module in v.group:
                setattr(self, k, v.default_val)  # Set the default for the object
            cp_default[k] = None

        cp = configparser.RawConfigParser(cp_default)

        ap = argparse.ArgumentParser(
            description=description, formatter_class=CustomFormatter
        )

        option_group_dict = {}
        for k, v in options_dict.items():
            if v.group is None or calling_module in v.group:
                og = v.kwargs.get("option_group")
                if og is not None and og not in option_group_dict:
                    option_group_dict[og] = ap.add_argument_group(
                        og, option_group_description[og]
                    )

        # Loop over potential arguments and add what is appropriate
        for k, v in options_dict.items():
            if not (v.group is None or calling_module in v.group):
                continue
            kwargs = copy.deepcopy(v.kwargs)
            if not (v.var_type == bool and "action" in v.kwargs.keys()):
                kwargs["type"] = v.var_type
            if v.args and v.args[0].startswith("-"):
                kwargs["dest"] = k
            kwargs["default"] = v.default_val
            if "section" in kwargs.keys():
                del kwargs["section"]
            if (
                "range" in kwargs.keys()
                and isinstance(kwargs["range"], list)
                and len(kwargs["range"]) == 2
            ):
                min_val = kwargs["range"][0]
                max_val = kwargs["range"][1]
                kwargs["action"] = generate_range_action(k, min_val, max_val)
                del kwargs["range"]
                kwargs["metavar"] = f"{{{min_val}..{max_val}}}"

            if "option_group" in kwargs.keys():
                og = kwargs["option_group"]
                del kwargs["option_group"]
                option_group_dict[og].add_argument(*v.args, **kwargs)
            else:
                ap.add_argument(*v.args, **kwargs)

        self._ap = ap
        self._opts = ap.parse_args(cmdline_args)

        # Initialize the object with the results of the command line parse
        for opt in dir(self._opts):
            if opt in options_dict.keys():
                setattr(self, opt, getattr(self._opts, opt))

        # Config file trumps the command line so a glider specific config
        # can override a site wide command line
        if self._opts.config_file_name is not None:
            if not os.path.exists(self._opts.config_file_name):
                setattr(self, "config_file_not_found", True)
            try:
                cp.read(self._opts.config_file_name)
            except configparser.Error as exc:
                raise RuntimeError(
                    f"ERROR parsing {self._opts.config_file_name}"
                ) from exc
            for k, v in options_dict.items():
                if k == "config_file_name":
                    continue
                if not (v.group is None or calling_module in v.group):
                    continue
                section_name = v.kwargs.get("section", "base")
                if not cp.has_section(section_name):
                    continue
                if v.var_type == bool:
                    try:
                        value = cp.getboolean(section_name, k)
                    except ValueError as exc:
                        raise ValueError(
                            f"Could not convert {k} from {self._opts.config_file_name} to boolean"
                        ) from exc
                    except AttributeError:
                        # Option not present in the file
                        continue
                    if value is None:
                        continue
                    setattr(self, k, value)
                    continue

                value = cp.get(section_name, k)
                if value is None:
                    continue
                try:
                    val = v.var_type(value)
                except ValueError as exc:
                    raise ValueError(
                        f"Could not convert {k} from {self._opts.config_file_name} to requested type"
                    ) from exc
                if (
                    "range" in v.kwargs.keys()
                    and isinstance(v.kwargs["range"], list)
                    and len(v.kwargs["range"]) == 2
                ):
                    min_val, max_val = v.kwargs["range"]
                    if not min_val <= val <= max_val:
                        raise ValueError(
                            f"{k}:{val} outside of range {min_val} {max_val}"
                        )
                setattr(self, k, val)

        thermal_params = getattr(self, "thermal_params", None)
        thermal_params_meaning = getattr(self, "thermal_params_meaning", None)
        if (
            thermal_params is not None
            and thermal_params_meaning is not None
            and len(thermal_params) != len(thermal_params_meaning)
        ):
            ap.error(
                f"{len(thermal_params)} thermal_params rows but "
                f"{len(thermal_params_meaning)} thermal_params_meaning rows"
            )


if __name__ == "__main__":
    proc_opts = ProcOptions("Glider processing options test")
    for opt_name in sorted(global_options_dict):
        if hasattr(proc_opts, opt_name):
            print(f"{opt_name}: {getattr(proc_opts, opt_name)}")
