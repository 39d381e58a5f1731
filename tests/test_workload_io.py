from pathlib import Path

import pytest

from batch_scheduler.errors import WorkloadFormatError
from batch_scheduler.workload_io import load_workload, parse_workload
from batch_scheduler.models import Process


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("1,5,0,2\n2, 3, 2\n\n3,1,4,1\n")
    procs = load_workload(p)
    assert procs == [
        Process(1, burst_duration=5, arrival_time=0, priority=2),
        Process(2, burst_duration=3, arrival_time=2, priority=0),
        Process(3, burst_duration=1, arrival_time=4, priority=1),
    ]


def test_load_any_suffix_as_csv(tmp_path: Path):
    p = tmp_path / "processes.txt"
    p.write_text("4,2,0\n")
    assert load_workload(p) == [Process(4, burst_duration=2, arrival_time=0)]


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"id":1,"burst_duration":3,"arrival_time":0,"priority":1},'
                 '{"id":2,"burst_duration":2,"arrival_time":1}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert procs[0].priority == 1
    assert procs[1].priority == 0
    assert procs[1].arrival_time == 1


def test_empty_file_is_empty_workload(tmp_path: Path):
    p = tmp_path / "empty.csv"
    p.write_text("")
    assert load_workload(p) == []


def test_missing_file_raises_oserror(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_workload(tmp_path / "nope.csv")


def test_malformed_field_reports_line():
    with pytest.raises(WorkloadFormatError) as excinfo:
        parse_workload(["1,5,0\n", "\n", "2,x,1\n"])
    assert excinfo.value.line == 3
    assert "burst_duration" in str(excinfo.value)


@pytest.mark.parametrize(
    "line",
    [
        "1,5\n",
        "1,5,0,1,9\n",
        "1,5.5,0\n",
        "1,0,0\n",
        "1,5,-2\n",
    ],
)
def test_bad_records_rejected(line):
    with pytest.raises(WorkloadFormatError):
        parse_workload([line])


def test_duplicate_ids_rejected():
    with pytest.raises(WorkloadFormatError, match="duplicate"):
        parse_workload(["1,5,0\n", "1,2,3\n"])


@pytest.mark.parametrize(
    "body",
    [
        '{"id": 1}',
        '[{"id": 1, "burst_duration": 2}]',
        '[{"id": 1, "burst_duration": "2", "arrival_time": 0}]',
        '[{"id": 1, "burst_duration": true, "arrival_time": 0}]',
        '[1, 2, 3]',
        '[{"id": 1,',
    ],
)
def test_bad_json_rejected(tmp_path: Path, body):
    p = tmp_path / "w.json"
    p.write_text(body)
    with pytest.raises(WorkloadFormatError):
        load_workload(p)


@pytest.mark.parametrize("name", ["w.csv", "w.json"])
def test_undecodable_bytes_rejected(tmp_path: Path, name):
    p = tmp_path / name
    p.write_bytes(b"1,5,0\n2,\xff,1\n")
    with pytest.raises(WorkloadFormatError, match="UTF-8") as excinfo:
        load_workload(p)
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)
