import io

import numpy as np
import pytest

from imos.ingest.helpers import simple_cnv, simple_vemco
from imos.ingest.io import read_sbe, read_vemco

START_TIME = "# start_time = Feb 20 2011 10:00:00 [Instrument's time stamp, header]"


@pytest.fixture
def cnv_timeseries():
    raw = simple_cnv(processed_header=[START_TIME])
    return read_sbe(io.BytesIO(raw), "timeSeries")


@pytest.fixture
def cnv_profile_two_legs():
    data = [(p, 20.0 - p / 4) for p in (1.0, 2.0, 5.0, 4.0, 2.0, 1.0)]
    raw = simple_cnv(
        columns=("prDM", "t090C"),
        data=data,
        processed_header=[START_TIME, "# binavg_binsize = 1"],
    )
    return read_sbe(io.BytesIO(raw), "profile")


@pytest.fixture
def vemco_timeseries():
    return read_vemco(io.BytesIO(simple_vemco()), "timeSeries")


@pytest.fixture
def depth_column():
    return np.array([1.0, 2.0, 5.0, 4.0, 2.0, 1.0])
