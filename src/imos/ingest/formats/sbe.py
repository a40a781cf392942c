"""Sea-Bird SBE19plus, SBE16plus and SBE39plus ``.cnv`` files.

Lines written by the instrument start with ``*``, lines added by SBE Data
Processing start with ``#``, ``*END*`` closes the header. There is no real
structure to the instrument header, the same information is written in
several different ways depending on the model and firmware.
"""

import re
from types import MappingProxyType

from ..consts import PRES_REL_COMMENT
from ..header import (
    CastRecord,
    append_cast,
    parse_datetime,
    rule,
    to_seconds,
)
from ..types import LineKind
from .base import ColumnDef, FormatProfile

CAST_DATE_FORMAT = "%d %b %Y %H:%M:%S"
START_TIME_FORMAT = "%b %d %Y %H:%M:%S"


@rule("header", r"^\*\s*(SBE|SeacatPlus)\s*(\S*)\s+V\s+(\S+)\s+SERIAL NO\.\s+(\d+)")
def _header(record, match, policy):
    record.set_once("instrument_model", match[1])
    record.set_once("instrument_firmware", match[3])
    record.set_once("instrument_serial_no", match[4])


@rule("hardware", r"<HardwareData DeviceType='(\S+)' SerialNumber='(\S+)'>")
def _hardware(record, match, policy):
    record.set_once("instrument_model", match[1])
    record.set_once("instrument_serial_no", match[2])


@rule("banner", r"Sea-Bird (.*?) *?Data File:")
def _banner(record, match, policy):
    record.set_once("instrument_model", match[1].replace(" ", ""))


@rule("scan", r"number of scans to average = (\d+)")
def _scan(record, match, policy):
    record.set_once("scan_avg", int(match[1]))


@rule("scan_xml", r"\*\s+<ScansToAverage>(\d+)</ScansToAverage>")
def _scan_xml(record, match, policy):
    if record.set_once("scan_avg", int(match[1])):
        record.cast_avg = record.scan_avg


@rule("memory", r"samples = (\d+), free = (\d+), casts = (\d+)")
def _memory(record, match, policy):
    record.set_once("num_samples", int(match[1]))
    record.free_mem = int(match[2])
    record.set_once("num_casts", int(match[3]))


@rule(
    "sample",
    r"sample interval = (\d+) (\w+), number of measurements per sample = (\d+)",
)
def _sample(record, match, policy):
    record.set_once("sample_interval", to_seconds(match[1], match[2]))
    record.measurements_per_sample = int(match[3])


@rule("samples_xml", r"\*\s+<Samples>(\d+)</Samples>")
def _samples_xml(record, match, policy):
    record.set_once("num_samples", int(match[1]))


@rule("profiles_xml", r"\*\s+<Profiles>(\d+)</Profiles>")
def _profiles_xml(record, match, policy):
    record.set_once("num_casts", int(match[1]))


@rule("mode", r"mode = (\w+), minimum cond freq = (\d*), pump delay = (\d*)")
def _mode(record, match, policy):
    record.mode = match[1]
    if match[2]:
        record.min_cond_freq = float(match[2])
    if match[3]:
        record.pump_delay = float(match[3])


@rule("pressure", r"pressure sensor = (strain gauge|quartz)")
def _pressure(record, match, policy):
    record.pressure_sensor = match[1]


@rule("volt", r"Ext Volt ?(\d+) = (yes|no)")
def _volt(record, match, policy):
    # several channels are usually reported on one line
    for channel in match.re.finditer(match.string):
        record.ext_volts[channel[1]] = channel[2]


@rule("output", r"output format = (.*)$")
def _output(record, match, policy):
    record.output_format = match[1].strip()


@rule(
    "cast",
    r"(?:cast|hdr)\s+(\d+)\s+(\d+ \w+ \d+ \d+:\d+:\d+)\s+"
    r"samples (\d+) to (\d+), (?:avg|int) = (\d+)",
)
def _cast(record, match, policy):
    cast = CastRecord(
        number=int(match[1]),
        date=parse_datetime(match[2], CAST_DATE_FORMAT),
        start=int(match[3]),
        end=int(match[4]),
        interval=float(match[5]),
    )
    append_cast(record, cast, policy)


@rule("cast_time", r"Cast Time = (\w+ \d+ \d+ \d+:\d+:\d+)")
def _cast_time(record, match, policy):
    record.set_once("cast_date", parse_datetime(match[1], START_TIME_FORMAT))


@rule("interval", r"interval = (.*): ([\d.]+)$")
def _interval(record, match, policy):
    record.resolution = match[1].strip()
    record.interval = float(match[2])


@rule("sbe38", r"SBE 38 = (yes|no), Gas Tension Device = (yes|no)")
def _sbe38(record, match, policy):
    record.sbe38 = match[1]
    record.gtd = match[2]


@rule("optode", r"OPTODE = (yes|no)")
def _optode(record, match, policy):
    record.optode = match[1]


@rule("volt_cal", r"volt (\d): offset = (\S+), slope = (\S+)")
def _volt_cal(record, match, policy):
    offset = float(match[2].rstrip(","))
    slope = float(match[3].rstrip(","))
    record.volt_calibrations[match[1]] = (offset, slope)


@rule("firmware_xml", r"<FirmwareVersion>(\S+)</FirmwareVersion>")
def _firmware_xml(record, match, policy):
    record.set_once("instrument_firmware", match[1])


@rule("sensor_id", r"<Sensor id='(.*\S+.*)'>")
def _sensor_id(record, match, policy):
    record.sensor_ids.append(match[1])


@rule("sensor_type", r"<[tT]ype>(.*\S+.*)</[tT]ype>")
def _sensor_type(record, match, policy):
    record.sensor_types.append(match[1])


@rule("firmware", r"^\*\s*FirmwareVersion:\s*(\S+)")
def _firmware(record, match, policy):
    record.set_once("instrument_firmware", match[1])


@rule("serial", r"^\*\s*SerialNumber:\s*(\S+)")
def _serial(record, match, policy):
    record.set_once("instrument_serial_no", match[1])


# e.g. "* SEACAT PROFILER V2.1a SN 597   10/15/11  10:02:56.721"
@rule("seacat_profiler", r"^\*\s*SEACAT PROFILER\s*V(\S+)\s*SN\s*(\S+)")
def _seacat_profiler(record, match, policy):
    record.set_once("instrument_firmware", match[1])
    record.set_once("instrument_serial_no", match[2])


@rule("other", r"^\*\s*([^\s=]+)\s*=\s*([^\s=]+)\s*$")
def _other(record, match, policy):
    record.extra.setdefault(match[1], match[2])


INSTRUMENT_RULES = (
    _header,
    _hardware,
    _banner,
    _scan,
    _scan_xml,
    _memory,
    _sample,
    _samples_xml,
    _profiles_xml,
    _mode,
    _pressure,
    _volt,
    _output,
    _cast,
    _cast_time,
    _interval,
    _sbe38,
    _optode,
    _volt_cal,
    _firmware_xml,
    _sensor_id,
    _sensor_type,
    _firmware,
    _serial,
    _seacat_profiler,
    _other,
)


@rule("name", r"name \d+ = (.+?):")
def _name(record, match, policy):
    record.columns.append(match[1].strip())


@rule("nvalues", r"nvalues = (\d+)")
def _nvalues(record, match, policy):
    record.n_values = int(match[1])


@rule("bad_flag", r"bad_flag = (.*)$")
def _bad_flag(record, match, policy):
    record.bad_flag = float(match[1])


@rule("start_time", r"start_time = (\w+ \d+ \d+ \d+:\d+:\d+)")
def _start_time(record, match, policy):
    record.set_once("start_time", parse_datetime(match[1], START_TIME_FORMAT))


@rule("volt_sensor", r"sensor \d+ = Extrnl Volt\s+(\d)\s+(.+)")
def _volt_sensor(record, match, policy):
    record.volt_sensors[match[1]] = match[2].strip()


@rule("bin_size", r"binavg_binsize = (\d+)")
def _bin_size(record, match, policy):
    record.bin_size = float(match[1])


@rule("scan_interval", r"interval = (\w+): ([\d.]+)")
def _scan_interval(record, match, policy):
    record.set_once("sample_interval", to_seconds(match[2], match[1]))


PROCESSED_RULES = (
    _name,
    _nvalues,
    _bad_flag,
    _start_time,
    _volt_sensor,
    _bin_size,
    _scan_interval,
)

COLUMNS = MappingProxyType(
    {
        "prDM": ColumnDef("PRES_REL", PRES_REL_COMMENT),
        "prdM": ColumnDef("PRES_REL", PRES_REL_COMMENT),
        "prSM": ColumnDef("PRES_REL", PRES_REL_COMMENT),
        "depSM": ColumnDef("DEPTH"),
        "depFM": ColumnDef("DEPTH"),
        "t090C": ColumnDef("TEMP"),
        "tv290C": ColumnDef("TEMP"),
        "t068C": ColumnDef("TEMP", "Temperature on the IPTS-68 scale."),
        "c0S/m": ColumnDef("CNDC"),
        "cond0S/m": ColumnDef("CNDC"),
        "sal00": ColumnDef("PSAL"),
        "density00": ColumnDef("DENS"),
        "svCM": ColumnDef("SVEL"),
        "sbeox0Mm/L": ColumnDef("DOX1"),
        "sbeox0ML/L": ColumnDef("DOX"),
        "sbeox0PS": ColumnDef("DOXS"),
        "flECO-AFL": ColumnDef("CPHL", "Artificial chlorophyll data computed from fluorometry."),
        "turbWETntu0": ColumnDef("TURB"),
        "par": ColumnDef("PAR"),
        "scan": ColumnDef("SCAN"),
        "flag": None,
    }
)

SBE = FormatProfile(
    name="sbe",
    make="Seabird",
    default_model="SBE19",
    instrument_rules=INSTRUMENT_RULES,
    processed_rules=PROCESSED_RULES,
    instrument_marker="*",
    processed_marker="#",
    terminator=re.compile(r"^\*END\*"),
    unmarked=LineKind.DATA_ROW,
    delimiter=r"\s+",
    columns=COLUMNS,
)

__all__ = ["SBE", "INSTRUMENT_RULES", "PROCESSED_RULES"]
