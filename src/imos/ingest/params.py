"""Canonical output types for the variables this package emits."""

import numpy as np

dtype_map = {
    "double": "float64",
    "float": "float32",
    "int": "int32",
    "short": "int16",
    "byte": "int8",
    "char": "U1",
}

PARAMETERS = {
    "TIME": "double",
    "TIMESERIES": "int",
    "PROFILE": "short",
    "MAXZ": "int",
    "DIRECTION": "char",
    "LATITUDE": "double",
    "LONGITUDE": "double",
    "NOMINAL_DEPTH": "float",
    "BOT_DEPTH": "float",
    "DEPTH": "float",
    "PRES": "float",
    "PRES_REL": "float",
    "TEMP": "float",
    "CNDC": "float",
    "PSAL": "float",
    "DENS": "float",
    "SVEL": "float",
    "DOX": "float",
    "DOX1": "float",
    "DOX2": "float",
    "DOXS": "float",
    "DOXY": "float",
    "CPHL": "float",
    "CHLF": "float",
    "TURB": "float",
    "PAR": "float",
    "VOLT": "float",
    "FLU2": "float",
    "SCAN": "int",
}

DEFAULT_TYPE = "double"


def param_type(name: str) -> str:
    return PARAMETERS.get(name.upper(), DEFAULT_TYPE)


def param_dtype(name: str) -> np.dtype:
    """Numpy dtype a variable called ``name`` is cast to on output.

    Names not in the catalog are treated as ``double``.
    """
    return np.dtype(dtype_map[param_type(name)])
