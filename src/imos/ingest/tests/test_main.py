import numpy as np
import xarray as xr
from click.testing import CliRunner

from imos.ingest.__main__ import cli
from imos.ingest.helpers import simple_cnv, simple_vemco

START_TIME = "# start_time = Feb 20 2011 10:00:00 [Instrument's time stamp, header]"


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0


def test_describe(tmp_path):
    path = tmp_path / "test.cnv"
    path.write_bytes(simple_cnv(processed_header=[START_TIME]))

    result = CliRunner().invoke(cli, ["describe", str(path)])

    assert result.exit_code == 0, result.output
    assert "Seabird SBE19plus" in result.output
    assert "PRES_REL" in result.output


def test_convert_file(tmp_path):
    path = tmp_path / "test.csv"
    path.write_bytes(simple_vemco())
    out = tmp_path / "test.nc"

    result = CliRunner().invoke(
        cli, ["convert-file", str(path), str(out), "--format", "vemco"]
    )

    assert result.exit_code == 0, result.output
    ds = xr.load_dataset(out)
    np.testing.assert_allclose(ds.TEMP, [21.5, 21.25, 21.0])
    assert ds.attrs["instrument_model"] == "Minilog-II-T"


def test_convert_file_profile(tmp_path):
    path = tmp_path / "test.cnv"
    data = [(p, 20.0) for p in (1.0, 2.0, 3.0, 2.0)]
    path.write_bytes(simple_cnv(data=data, processed_header=[START_TIME]))
    out = tmp_path / "test.nc"

    result = CliRunner().invoke(
        cli, ["convert-file", str(path), str(out), "--mode", "profile"]
    )

    assert result.exit_code == 0, result.output
    ds = xr.load_dataset(out)
    assert ds.TEMP.dims == ("MAXZ", "PROFILE")
    assert list(ds.DIRECTION.values.astype(str)) == ["D", "A"]


def test_convert_file_error(tmp_path):
    path = tmp_path / "test.cnv"
    path.write_bytes(b"* SBE 19plus V 2.3 SERIAL NO. 1234\n")

    result = CliRunner().invoke(
        cli, ["convert-file", str(path), str(tmp_path / "test.nc")]
    )

    assert result.exit_code != 0


def test_mode_is_case_insensitive(tmp_path):
    path = tmp_path / "test.cnv"
    path.write_bytes(simple_cnv(processed_header=[START_TIME]))
    out = tmp_path / "test.nc"

    result = CliRunner().invoke(
        cli, ["convert-file", str(path), str(out), "--mode", "TIMESERIES"]
    )

    assert result.exit_code == 0, result.output
    assert xr.load_dataset(out).attrs["featureType"] == "timeSeries"
