import numpy as np
import pytest

from imos.ingest.formats.sbe import INSTRUMENT_RULES, PROCESSED_RULES
from imos.ingest.formats.vemco import PROCESSED_RULES as VEMCO_RULES
from imos.ingest.header import (
    CastRecord,
    HeaderRecord,
    append_cast,
    hms_to_seconds,
    parse_header,
    rule,
    to_seconds,
)
from imos.ingest.types import CastPolicy

SBE_HEADER = [
    "* Sea-Bird SBE19plus Data File:",
    "* FileName = C:\\data\\19plus.hex",
    "* Software Version Seasave V 7.21h",
    "* Temperature SN = 6180",
    "* SBE 19plus V 2.3 SERIAL NO. 4567",
    "* vbatt = 12.8, vlith = 8.3, ioper = 62.5 ma, ipump = 21.8 ma,",
    "* Ext Volt 0 = yes, Ext Volt 1 = no",
    "* Ext Volt 2 = yes, Ext Volt 3 = no",
    "* samples = 3000, free = 1200000, casts = 2",
    "* mode = profile, minimum cond freq = 3000, pump delay = 60 sec",
    "* pressure sensor = strain gauge, range = 1000.0",
    "* number of scans to average = 4",
    "* output format = converted decimal",
    "* cast   1 20 Feb 2011 10:00:00 samples 1 to 1500, avg = 1",
    "* cast   2 20 Feb 2011 11:00:00 samples 1501 to 3000, avg = 1",
]

CAST_1 = "* cast   1 20 Feb 2011 10:00:00 samples 1 to 3, avg = 1"
CAST_2 = "* cast   2 20 Feb 2011 11:00:00 samples 5 to 7, avg = 2"


def test_classic_banner():
    header = parse_header(["* SBE 19plus V 2.3 SERIAL NO. 1234"], INSTRUMENT_RULES)

    assert header.instrument_model == "SBE"
    assert header.instrument_firmware == "2.3"
    assert header.instrument_serial_no == "1234"


def test_seacatplus_banner():
    header = parse_header(["* SeacatPlus V 1.6b SERIAL NO. 4321"], INSTRUMENT_RULES)

    assert header.instrument_model == "SeacatPlus"
    assert header.instrument_firmware == "1.6b"
    assert header.instrument_serial_no == "4321"


@pytest.mark.parametrize(
    "lines,model",
    [
        (["* Sea-Bird SBE19plus Data File:", "* SBE 19plus V 2.3 SERIAL NO. 1234"], "SBE19plus"),
        (["* SBE 19plus V 2.3 SERIAL NO. 1234", "* Sea-Bird SBE19plus Data File:"], "SBE"),
        (
            [
                "* <HardwareData DeviceType='SBE16plus' SerialNumber='01606331'>",
                "* Sea-Bird SBE 16plus Data File:",
            ],
            "SBE16plus",
        ),
        (["* Sea-Bird SBE 16plus Data File:"], "SBE16plus"),
    ],
)
def test_model_first_match_wins(lines, model):
    header = parse_header(lines, INSTRUMENT_RULES)
    assert header.instrument_model == model


def test_full_instrument_header():
    header = parse_header(SBE_HEADER, INSTRUMENT_RULES)

    assert header.instrument_model == "SBE19plus"
    assert header.instrument_serial_no == "4567"
    assert header.instrument_firmware == "2.3"
    assert header.scan_avg == 4
    assert header.num_samples == 3000
    assert header.free_mem == 1200000
    assert header.num_casts == 2
    assert header.mode == "profile"
    assert header.min_cond_freq == 3000
    assert header.pump_delay == 60
    assert header.pressure_sensor == "strain gauge"
    assert header.output_format == "converted decimal"
    assert header.ext_volts == {"0": "yes", "1": "no", "2": "yes", "3": "no"}
    assert header.extra == {"FileName": "C:\\data\\19plus.hex"}
    assert [cast.number for cast in header.casts] == [1, 2]


def test_one_rule_per_line():
    # also a plain name = value line
    header = parse_header(["* OPTODE = yes"], INSTRUMENT_RULES)

    assert header.optode == "yes"
    assert header.extra == {}


def test_unrecognized_lines_ignored():
    header = parse_header(
        ["* some free text the instrument wrote", "* ds", "*"], INSTRUMENT_RULES
    )
    assert header == HeaderRecord()


def test_parse_idempotent():
    assert parse_header(SBE_HEADER, INSTRUMENT_RULES) == parse_header(
        SBE_HEADER, INSTRUMENT_RULES
    )


def test_custom_table_priority():
    @rule("first", r"model is (\w+)")
    def first(record, match, policy):
        record.set_once("instrument_model", f"first-{match[1]}")

    @rule("second", r"is (\w+)")
    def second(record, match, policy):
        record.set_once("instrument_model", f"second-{match[1]}")

    lines = ["model is A", "model is B"]
    assert parse_header(lines, (first, second)).instrument_model == "first-A"
    assert parse_header(lines, (second, first)).instrument_model == "second-A"


def test_cast_record():
    header = parse_header([CAST_1], INSTRUMENT_RULES)

    assert header.casts == [
        CastRecord(
            number=1,
            date=np.datetime64("2011-02-20T10:00:00", "ns"),
            start=1,
            end=3,
            interval=1.0,
        )
    ]
    assert header.casts[0].size == 3


@pytest.mark.parametrize(
    "policy,numbers",
    [
        (CastPolicy.ALL, [1, 2]),
        (CastPolicy.FIRST, [1]),
    ],
)
def test_cast_policy(policy, numbers):
    header = parse_header([CAST_1, CAST_2], INSTRUMENT_RULES, policy)
    assert [cast.number for cast in header.casts] == numbers


def test_cast_repeated_line_kept_once():
    header = parse_header([CAST_1, CAST_1, CAST_2], INSTRUMENT_RULES, CastPolicy.ALL)
    assert [cast.number for cast in header.casts] == [1, 2]


def test_hdr_cast_line():
    header = parse_header(
        ["* hdr  3 01 Mar 2012 08:30:00 samples 10 to 20, int = 5"], INSTRUMENT_RULES
    )
    (cast,) = header.casts
    assert cast.number == 3
    assert cast.interval == 5.0
    assert cast.date == np.datetime64("2012-03-01T08:30:00")


def test_append_cast_policy_is_explicit():
    record = HeaderRecord()
    one = CastRecord(1, np.datetime64("2011-02-20T10:00:00", "ns"), 1, 3, 1.0)
    two = CastRecord(2, np.datetime64("2011-02-20T11:00:00", "ns"), 4, 6, 1.0)

    append_cast(record, one, CastPolicy.FIRST)
    append_cast(record, two, CastPolicy.FIRST)
    assert record.casts == [one]

    append_cast(record, two, CastPolicy.ALL)
    assert record.casts == [one, two]


@pytest.mark.parametrize(
    "line,interval",
    [
        ("* sample interval = 10 seconds, number of measurements per sample = 2", 10),
        ("* sample interval = 5 minutes, number of measurements per sample = 1", 300),
        ("* sample interval = 1 hours, number of measurements per sample = 1", 3600),
    ],
)
def test_sample_interval_seconds(line, interval):
    header = parse_header([line], INSTRUMENT_RULES)
    assert header.sample_interval == interval


def test_xml_header():
    lines = [
        "* <HardwareData DeviceType='SBE19plus' SerialNumber='01907203'>",
        "*    <FirmwareVersion>2.5.2</FirmwareVersion>",
        "*    <ScansToAverage>4</ScansToAverage>",
        "*    <Samples>1200</Samples>",
        "*    <Profiles>3</Profiles>",
        "*    <Sensor id='Main Temperature'>",
        "*       <type>temperature0</type>",
        "*    <Sensor id='Main Conductivity'>",
        "*       <type>conductivity0</type>",
    ]
    header = parse_header(lines, INSTRUMENT_RULES)

    assert header.instrument_model == "SBE19plus"
    assert header.instrument_serial_no == "01907203"
    assert header.instrument_firmware == "2.5.2"
    assert header.scan_avg == 4
    assert header.cast_avg == 4
    assert header.num_samples == 1200
    assert header.num_casts == 3
    assert header.sensor_ids == ["Main Temperature", "Main Conductivity"]
    assert header.sensor_types == ["temperature0", "conductivity0"]


@pytest.mark.parametrize(
    "line,firmware,serial",
    [
        ("* FirmwareVersion: 1.1", "1.1", None),
        ("* SerialNumber: 03906311", None, "03906311"),
        ("* SEACAT PROFILER V2.1a SN 597   10/15/11  10:02:56.721", "2.1a", "597"),
    ],
)
def test_alternate_identity_lines(line, firmware, serial):
    header = parse_header([line], INSTRUMENT_RULES)
    assert header.instrument_firmware == firmware
    assert header.instrument_serial_no == serial


def test_misc_instrument_lines():
    lines = [
        "* Cast Time = Feb 20 2011 10:00:00",
        "* SBE 38 = no, Gas Tension Device = yes",
        "* OPTODE = yes",
        "* volt 0: offset = -4.650000e-02, slope = 1.250000e+00",
    ]
    header = parse_header(lines, INSTRUMENT_RULES)

    assert header.cast_date == np.datetime64("2011-02-20T10:00:00")
    assert header.sbe38 == "no"
    assert header.gtd == "yes"
    assert header.optode == "yes"
    assert header.volt_calibrations == {"0": (-0.0465, 1.25)}


def test_processed_header():
    lines = [
        "# nquan = 3",
        "# nvalues = 120",
        "# units = specified",
        "# name 0 = prDM: Pressure, Digiquartz [db]",
        "# name 1 = t090C: Temperature [ITS-90, deg C]",
        "# name 2 = v0: Voltage 0",
        "# sensor 2 = Extrnl Volt  0  WET Labs, ECO-AFL/FL",
        "# start_time = Feb 20 2011 10:00:00 [Instrument's time stamp, header]",
        "# bad_flag = -9.990e-29",
        "# interval = seconds: 0.25",
        "# binavg_binsize = 1",
    ]
    header = parse_header(lines, PROCESSED_RULES)

    assert header.columns == ["prDM", "t090C", "v0"]
    assert header.n_values == 120
    assert header.bad_flag == -9.99e-29
    assert header.start_time == np.datetime64("2011-02-20T10:00:00")
    assert header.volt_sensors == {"0": "WET Labs, ECO-AFL/FL"}
    assert header.sample_interval == 0.25
    assert header.bin_size == 1


def test_vemco_header():
    lines = [
        "Source File: C:\\Field\\Trip5934\\Minilog-II-T_354314_20140213_1.vld",
        "Source Device: Minilog-II-T-354314",
        "Study Description: TAN100",
        "Study Start Time: 2013-08-05 00:00:00",
        "Study Stop Time: 2014-02-13 11:44:00",
        "Sample Interval: 00:01:30",
    ]
    header = parse_header(lines, VEMCO_RULES)

    assert header.instrument_model == "Minilog-II-T"
    assert header.instrument_serial_no == "354314"
    assert header.start_time == np.datetime64("2013-08-05T00:00:00")
    assert header.stop_time == np.datetime64("2014-02-13T11:44:00")
    assert header.sample_interval == 90
    assert header.extra["Study Description"] == "TAN100"


def test_update_keeps_first():
    instrument = HeaderRecord(instrument_model="SBE19plus", sensor_ids=["a"])
    processed = HeaderRecord(
        instrument_model="other", columns=["prDM"], sensor_ids=["b"], bin_size=1.0
    )
    instrument.update(processed)

    assert instrument.instrument_model == "SBE19plus"
    assert instrument.columns == ["prDM"]
    assert instrument.sensor_ids == ["a", "b"]
    assert instrument.bin_size == 1.0


def test_as_dict_skips_empty():
    assert HeaderRecord(scan_avg=4).as_dict() == {"scan_avg": 4}


def test_time_helpers():
    assert hms_to_seconds("01", "02", "03") == 3723
    assert to_seconds("2", "minutes") == 120
    assert to_seconds("2", "fortnights") == 2
