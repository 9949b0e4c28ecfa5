import json
import logging
import os
from pathlib import Path

from analysis.errors import DataUnavailableError, InvalidLogError, LogNotFoundError
from report import Report


class PrivateReport(DataUnavailableError):
    pass


class TemporaryUnavailable(DataUnavailableError):
    pass


def get_saved_logs_dir():
    return Path(os.environ.get("SAVED_LOGS_DIR", "../saved_logs"))


def find_saved_log(report_id: str, fight_id: int, source_id: int):
    """Latest saved log for the fight, files are named
    <timestamp>_<report>_<fight>_<source>.json"""
    logs_dir = get_saved_logs_dir()
    if not logs_dir.is_dir():
        raise LogNotFoundError(f"No saved logs directory at {logs_dir}")

    # the timestamp prefix sorts chronologically
    matches = sorted(logs_dir.glob(f"*_{report_id}_{fight_id}_{source_id}.json"))
    if not matches:
        raise LogNotFoundError(
            f"No saved log for report {report_id}, fight {fight_id}, source {source_id}"
        )
    return matches[-1]


def load_saved_log(path: Path):
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise LogNotFoundError(f"Saved log {path} disappeared", cause=e) from e
    except json.JSONDecodeError as e:
        raise InvalidLogError(f"Saved log {path} is not valid JSON", cause=e) from e
    except OSError as e:
        raise TemporaryUnavailable(f"Could not read saved log {path}", cause=e) from e


async def fetch_report(report_id: str, fight_id: int, source_id: int) -> Report:
    path = find_saved_log(report_id, fight_id, source_id)
    logging.info(f"Loading saved log {path}")

    log_data = load_saved_log(path)
    if not isinstance(log_data, dict):
        raise InvalidLogError(f"Saved log {path} is not an object")
    if log_data.get("metadata", {}).get("private"):
        raise PrivateReport(f"Report {report_id} is private")

    return Report.from_saved_log(log_data)
