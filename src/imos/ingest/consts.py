import numpy as np

# SBE19plus raw scan rate is 4 Hz
BASE_SCAN_INTERVAL = 0.25

# used when a file carries no usable timing metadata at all
DEFAULT_START = np.datetime64("1970-01-01T00:00:00", "ns")
DEFAULT_INTERVAL = 0.25

# 14.7 PSI atmosphere removed by SBE software, in dbar
PRES_REL_APPLIED_OFFSET = -14.7 * 0.689476

PRES_REL_PREFIX = "PRES_REL"

TIME = "TIME"
DEPTH = "DEPTH"
MAXZ = "MAXZ"
PROFILE = "PROFILE"

TIMESERIES_COORDINATES = "TIME LATITUDE LONGITUDE NOMINAL_DEPTH"
PROFILE_COORDINATES = "TIME LATITUDE LONGITUDE DEPTH"

PRES_REL_COMMENT = (
    "relative pressure measurements (calibration offset usually performed to "
    "balance current atmospheric pressure and acute sensor precision at a "
    "deployed depth)"
)
DEPTH_FROM_PRES_REL_COMMENT = (
    f"Depth computed from {PRES_REL_COMMENT}, assuming 1dbar ~= 1m."
)
BOT_DEPTH_COMMENT = (
    "Bottom depth measured by ship-based acoustic sounder at time of CTD cast."
)
PROFILE_TIME_COMMENT = "First value over profile measurement."

TIME_ENCODING = {
    "units": "days since 1950-01-01T00:00Z",
    "calendar": "gregorian",
    "dtype": "double",
}
